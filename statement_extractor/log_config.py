import os
import logging
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = 'INFO', log_dir: Optional[str] = None, debug: bool = False) -> logging.Logger:
    """Attach a console handler (and a file handler when log_dir is set) to the root logger.

    With ``debug`` the file handler records DEBUG and above while the console
    stays at ``level``.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO))

    # Drop handlers from an earlier call so repeated setup doesn't duplicate output
    for handler in list(root_logger.handlers):
        if getattr(handler, '_statement_extractor', False):
            root_logger.removeHandler(handler)
            handler.close()

    log_formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    console_handler.setFormatter(log_formatter)
    console_handler._statement_extractor = True
    root_logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(os.path.join(log_dir, 'statement_extractor.log'), mode='a')
        file_handler.setLevel(logging.DEBUG if debug else console_handler.level)
        file_handler.setFormatter(log_formatter)
        file_handler._statement_extractor = True
        root_logger.addHandler(file_handler)

    return logging.getLogger('statement_extractor')
