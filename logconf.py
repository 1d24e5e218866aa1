import logging
import os
from logging.handlers import RotatingFileHandler
import sys

_LOG_DIR = os.path.abspath("logs")
_LOG_FILE = os.path.join(_LOG_DIR, "app.log")

def setup_logging(level=logging.DEBUG, log_file: bool = True) -> None:
    """Root logger to stdout, plus logs/app.log unless log_file is False.

    The CLI passes its --log-level and skips the file; the desktop app keeps
    both at the default level.
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    ch = logging.StreamHandler(stream=sys.stdout)
    ch.setFormatter(fmt)
    ch.setLevel(level)
    root.addHandler(ch)

    if log_file:
        os.makedirs(_LOG_DIR, exist_ok=True)
        fh = RotatingFileHandler(_LOG_FILE, maxBytes=5_000_000, backupCount=3)
        fh.setFormatter(fmt)
        fh.setLevel(logging.DEBUG)
        root.addHandler(fh)

    # Tame noisy libs
    logging.getLogger("PIL").setLevel(logging.WARNING)
    logging.getLogger("imageio").setLevel(logging.WARNING)

def log_path() -> str:
    return _LOG_FILE
