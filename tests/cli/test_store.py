from vvenroll.store import ProcessStore


def test_missing_file_means_no_process(tmp_path):
    assert ProcessStore(str(tmp_path / "none.json")).load() == ""


def test_save_load_clear(tmp_path):
    s = ProcessStore(str(tmp_path / "nested" / "process.json"))
    s.save("abc-123")
    assert ProcessStore(s.path).load() == "abc-123"
    s.clear()
    assert s.load() == ""
