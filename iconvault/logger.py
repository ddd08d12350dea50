"""Logging configuration for hosts embedding the icon engine."""
import logging
from pathlib import Path

LOG_FILE = Path("iconvault.log")


def setup_logging(log_file: Path = LOG_FILE, level: int = logging.INFO) -> logging.Logger:
    """Configure root logging and return the package logger."""
    log_file = Path(log_file)
    if log_file.parent != Path(""):
        log_file.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )
    return logging.getLogger("iconvault")
