import os
from dotenv import load_dotenv

load_dotenv()

# Registration authority and local e-ID agent
VV_SERVER = os.getenv("VV_SERVER", "https://ra.volksverschluesselung.de").rstrip("/")
EID_AGENT_URL = os.getenv("EID_AGENT_URL", "http://127.0.0.1:24727/eID-Client")

# Pinned trust anchor; empty path uses the root CA bundled in vvenroll/data,
# and the platform trust store when none is bundled.
# The password only satisfies the key store format, it is not a secret.
TRUST_STORE = os.getenv("VV_TRUST_STORE", "")
TRUST_STORE_PASSWORD = os.getenv("VV_TRUST_STORE_PASSWORD", "changeit")

DATA_DIR = os.getenv("DATA_DIR", "var/data")
STATE_FILE = os.getenv("VV_STATE_FILE", os.path.join(DATA_DIR, "process.json"))

HTTP_TIMEOUT_SEC = float(os.getenv("HTTP_TIMEOUT_SEC", "30"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
