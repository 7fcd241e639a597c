import logging
from pathlib import Path
from typing import Optional, Union

LOG_FILENAME = "dome.log"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def setup_logging(data_dir: Union[str, Path], level: Optional[str] = None) -> Path:
    """Send ``dome.*`` records to ``<data_dir>/dome.log``; the terminal belongs to the TUI."""
    directory = Path(data_dir).expanduser()
    directory.mkdir(parents=True, exist_ok=True)
    log_path = directory / LOG_FILENAME

    root = logging.getLogger("dome")
    for handler in list(root.handlers):
        if getattr(handler, "_dome_handler", False):
            root.removeHandler(handler)
            handler.close()

    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._dome_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    resolved = logging.getLevelName((level or "INFO").upper())
    root.setLevel(resolved if isinstance(resolved, int) else logging.INFO)
    return log_path


__all__ = ["setup_logging", "LOG_FILENAME"]
