"""Console logging for the sidecar, with credential masking.

The AdGuard password travels in every request and may end up in error text
raised by the HTTP stack. Values passed to register_secret are replaced by
a mask in every record that reaches the sidecar's handler.
"""

import logging

__all__ = ["SecretMaskFilter", "configure_logs", "register_secret"]

MASK = "******"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%d/%m/%y %H:%M:%S"


class SecretMaskFilter(logging.Filter):
    """Replaces registered secret values in the rendered message."""

    def __init__(self) -> None:
        super().__init__()
        self.secrets: set[str] = set()

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secrets:
            return True
        message = record.getMessage()
        masked = message
        for secret in self.secrets:
            masked = masked.replace(secret, MASK)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


_mask_filter = SecretMaskFilter()
_handler: logging.Handler | None = None


def register_secret(value: str) -> None:
    """Mask value in all sidecar log output from now on."""
    if value:
        _mask_filter.secrets.add(value)


def configure_logs(level: str = "INFO") -> None:
    """Install the console handler and set logger levels.

    Safe to call more than once: the handler is installed a single time.

    Levels:
    - rule_sidecar: the requested level (unknown names fall back to INFO).
    - aiohttp.access: WARNING, so liveness polls do not log a line each.
    - aiohttp, asyncio: WARNING.

    Args:
        level: Level name, usually from LOG_LEVEL.
    """
    global _handler

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    if _handler is None or _handler not in root.handlers:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        _handler.addFilter(_mask_filter)
        root.addHandler(_handler)

    for name in ("aiohttp", "aiohttp.access", "asyncio"):
        logging.getLogger(name).setLevel(logging.WARNING)

    app_level = logging.getLevelName(level.upper())
    if not isinstance(app_level, int):
        app_level = logging.INFO
    logging.getLogger("rule_sidecar").setLevel(app_level)
