import logging
import sys
from datetime import datetime
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def setup_logging(log_level=logging.INFO, log_to_file=False, log_dir="logs"):
    """Set up logging configuration."""
    handlers = [logging.StreamHandler(sys.stdout)]

    if log_to_file:
        log_path = Path(log_dir)
        log_path.mkdir(exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        handlers.append(logging.FileHandler(log_path / f"sync_{timestamp}.log"))

    logging.basicConfig(level=log_level, format=LOG_FORMAT, handlers=handlers)

    # Suppress noisy loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("gspread").setLevel(logging.WARNING)
