import logging
import sys

_HANDLER_NAME = "dca_dashboard.stdout"

NOISY_LOGGERS = ("httpx", "httpcore", "urllib3")


def resolve_level(level: int | str) -> int:
    """Accept ``logging.INFO`` or a name such as ``"debug"``."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def setup_logging(level: int | str = logging.INFO) -> None:
    """Send log records to stdout; repeated calls only adjust the level."""
    root_logger = logging.getLogger()
    root_logger.setLevel(resolve_level(level))
    if any(h.get_name() == _HANDLER_NAME for h in root_logger.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    )
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
