import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8080))

# Unclaimed rooms are destroyed after this many seconds (default 5 minutes)
CODE_TTL_SECONDS = float(os.getenv("CODE_TTL_SECONDS", 5 * 60))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

ROLE_CALLER = "caller"
ROLE_CALLEE = "callee"
