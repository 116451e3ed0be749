import logging
import sys

FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def _stdout_handler(root: logging.Logger):
    for h in root.handlers:
        if type(h) is logging.StreamHandler and h.stream is sys.stdout:
            return h
    return None


def configure_logging(level: str = "INFO") -> logging.Handler:
    """Log to stdout at ``level``; calling it again only changes the level."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    handler = _stdout_handler(root)
    if handler is None:
        handler = logging.StreamHandler(stream=sys.stdout)
        handler.setFormatter(logging.Formatter(FORMAT))
        root.addHandler(handler)
    return handler
