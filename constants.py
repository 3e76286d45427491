import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 4000))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

# Largest inbound WebSocket frame, in bytes. SDP offers with many candidates stay well under this.
WS_MAX_SIZE = int(os.getenv("WS_MAX_SIZE", 2**20))

RELOAD = os.getenv("RELOAD", "false").lower() in ("1", "true", "yes")
