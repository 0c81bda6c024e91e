import logging
import sys
from typing import Union


class _AccessNoiseFilter(logging.Filter):
    """
    Keep our own logs; let third-party loggers through only at WARNING+.
    uvicorn's access log is dropped since the request middleware logs every request.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith("tasktracker"):
            return True
        if name == "uvicorn.access":
            return False
        return record.levelno >= logging.WARNING


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Configure the root logger with a single stderr handler.

    Call this once, before the app starts serving.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    ch.addFilter(_AccessNoiseFilter())
    root.addHandler(ch)

    logging.captureWarnings(True)
