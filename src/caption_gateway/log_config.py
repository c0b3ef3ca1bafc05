import logging
import sys

LOGGER_NAME = "caption_gateway"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger(LOGGER_NAME)


def setup_logger(level: int | str = logging.INFO) -> logging.Logger:
    """Attach a stream handler to the package logger once and set its level."""
    if not any(getattr(handler, "_caption_gateway", False) for handler in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._caption_gateway = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def mask_token(token: str | None, *, keep: int = 4) -> str:
    """Return a masked token representation for safe logging."""
    if not token:
        return "<empty>"
    token = token.strip()
    if len(token) <= keep * 2:
        return f"{token[:keep]}...len={len(token)}"
    return f"{token[:keep]}...{token[-keep:]}(len={len(token)})"
