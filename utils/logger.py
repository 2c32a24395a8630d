# utils/logger.py - shared logger factory for the client and transport
import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def get_logger(name: str = "frappe"):
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(LOG_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def redact_headers(headers):
    """Copy a header mapping with the Authorization value masked for logs."""
    safe = dict(headers or {})
    for k in list(safe):
        if k.lower() == "authorization" and safe[k]:
            safe[k] = str(safe[k]).split(" ", 1)[0] + " [REDACTED]"
    return safe
