import logging

from xroute.config import load_config
from xroute.rpc import run

# Only show ERROR and CRITICAL from uvicorn, our logger handles the rest
uvicorn_loggers = [
    logging.getLogger("uvicorn"),
    logging.getLogger("uvicorn.error"),
    logging.getLogger("uvicorn.access"),
    logging.getLogger("uvicorn.asgi"),
]

for uvicorn_logger in uvicorn_loggers:
    uvicorn_logger.setLevel(logging.ERROR)
    uvicorn_logger.handlers = []

if __name__ == "__main__":
    config = load_config()
    if not config.rpc.enabled:
        raise SystemExit("[rpc] enabled = false; nothing to serve")
    run(config)
