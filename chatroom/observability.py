import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def setup_logging(level: str = "INFO"):
    """Configure root logging once, on startup."""
    root = logging.getLogger()
    if not any(getattr(h, "_chatroom", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._chatroom = True
        root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
