import logging
import sys
from threading import Lock
from typing import Final, Optional, TextIO, Union

LOG_FORMAT: Final[str] = "%(asctime)s (%(name)-16s / line %(lineno)-4d) - %(levelname)-8s %(message)s"
TIME_FMT: Final[str] = "%Y-%m-%d %H:%M:%S"

_lock: Final[Lock] = Lock()
_handler: Optional[logging.Handler] = None


class StderrHandler(logging.StreamHandler):
    """StreamHandler that always writes to the current sys.stderr."""

    def __init__(self) -> None:
        logging.Handler.__init__(self)

    @property
    def stream(self) -> TextIO:  # type: ignore[override]
        return sys.stderr


def setup_logging(level: Union[int, str] = logging.WARNING, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Attach one handler to the root logger and set its level.

    stdout belongs to the result sink (collectd reads PUTVAL lines from it), so logs
    go to stderr unless another stream is given. Calling this again only adjusts the level.
    """
    global _handler

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    root = logging.getLogger()
    with _lock:
        if _handler is None:
            _handler = logging.StreamHandler(stream) if stream is not None else StderrHandler()
            _handler.setFormatter(logging.Formatter(LOG_FORMAT, TIME_FMT))
            root.addHandler(_handler)
        root.setLevel(level)
    return root
