import logging
import os
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_configured = False


def configure_logging(level: str = "INFO", log_dir: Optional[str] = None) -> None:
    """Attach console (and optionally rotating file) handlers to the root logger once."""
    global _configured

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    if _configured:
        return

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        current_date = datetime.now().strftime('%Y-%m-%d')
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, f'shortlinks_{current_date}.log'),
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
