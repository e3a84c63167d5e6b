"""
Utility functions for transect processing.
"""

import os
import time
import logging


def init_logger(output_dir, level=logging.INFO):
    """
    Attach a timestamped log file in the output directory to the root logger.

    Parameters:
    ----------
    output_dir : str
        Directory to save log files. Created if missing.
    level : int
        Logging level for the file handler and the root logger.

    Returns:
    -------
    logging.Logger
        Configured logger instance.
    """
    os.makedirs(output_dir, exist_ok=True)
    formatter = logging.Formatter("%(asctime)s:%(levelname)s:%(message)s")

    time_str = time.strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(output_dir, f"log_{time_str}.txt")

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    # Every package logger inherits from the root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Drop earlier file handlers so repeated runs don't write duplicates
    for handler in root_logger.handlers[:]:
        if isinstance(handler, logging.FileHandler):
            root_logger.removeHandler(handler)
            handler.close()

    root_logger.addHandler(file_handler)

    logger = logging.getLogger(__name__)
    logger.info("Logger initialized successfully")
    return logger


def file_stem(filename):
    """Return the file name without directory or extension."""
    return os.path.splitext(os.path.basename(str(filename)))[0]
