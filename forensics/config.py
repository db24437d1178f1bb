import os

LOG_LEVEL = os.getenv("FORENSICS_LOG_LEVEL", "INFO").upper()

# Run the three detectors in a thread pool. They are pure Python, so the GIL
# keeps this from being faster; results are merged in fixed order either way.
PARALLEL_DETECTORS = os.getenv("FORENSICS_PARALLEL_DETECTORS", "0").lower() in {"1", "true", "yes"}

# Upper bound on transactions per analysis call; 0 disables the guard.
MAX_TRANSACTIONS = int(os.getenv("FORENSICS_MAX_TRANSACTIONS", "0"))

HOST = os.getenv("FORENSICS_HOST", "0.0.0.0")
PORT = int(os.getenv("FORENSICS_PORT", "8000"))
