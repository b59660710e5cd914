"""Logger for sync runs: a log file plus console output that respects progress bars."""
import logging
import os
import sys
from logging import Handler

from tqdm import tqdm

LOGGER_NAME = "translation_sync"
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


class TqdmLoggingHandler(Handler):
    """Console handler for request and merge logs while the mapper's bars are drawn."""

    def emit(self, record):
        try:
            tqdm.write(self.format(record), file=sys.stderr)
            self.flush()
        except (KeyboardInterrupt, SystemExit):
            raise
        except Exception:
            self.handleError(record)


def setup_logger(log_level_str: str, log_file_path: str, log_to_console: bool) -> logging.Logger:
    """
    Configure the ``translation_sync`` logger that every sync module logs under.

    Calling it again replaces the handlers of the previous call.

    Args:
        log_level_str: Level name such as 'INFO'; unknown names mean INFO.
        log_file_path: Where to append the run log. Empty disables the file.
        log_to_console: Also echo records to stderr above the progress bars.

    Returns:
        The ``translation_sync`` logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level_str.upper(), logging.INFO))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT)
    handlers = []
    if log_file_path:
        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(log_file_path, encoding='utf-8'))
    if log_to_console:
        handlers.append(TqdmLoggingHandler())

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
