"""
Logging configuration utility.
"""
import logging
import sys
from pathlib import Path

NOISY_LOGGERS = ("urllib3", "httpx", "httpcore")


def setup_logging(log_level: str = "INFO", log_dir: str = "logs") -> None:
    """
    Configure application logging.
    """
    # Create logs directory if it doesn't exist
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    # Configure logging format
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    # Configure root logger
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=log_format,
        datefmt=date_format,
        handlers=[
            logging.FileHandler(log_path / "app.log"),
            logging.StreamHandler(sys.stdout)
        ]
    )

    # Silence verbose libraries
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
