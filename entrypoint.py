import uvicorn
from constants import HOST, PORT, LOG_LEVEL, LOG_FILE, WS_MAX_SIZE, RELOAD
from logging_config import setup_logging, get_logger

# Setup logging before importing app
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)

logger = get_logger(__name__)


def main():
    logger.info(f"Starting screensy relay on {HOST}:{PORT}")
    uvicorn.run("app:app", host=HOST, port=PORT, reload=RELOAD, ws_max_size=WS_MAX_SIZE, log_config=None)


if __name__ == "__main__":
    main()
