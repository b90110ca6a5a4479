# local_rt_setup/logging.py
import logging
import logging.handlers
import os
import platform
from datetime import datetime
import sys

import appdirs

from local_rt_setup.config.const import package_name

DEFAULT_LOG_DIR = appdirs.user_log_dir(package_name)
DEFAULT_LOG_KEEP = 3
LOGGER_NAME = "local_rt_setup"


def setup_logging(
    log_dir=DEFAULT_LOG_DIR,
    log_filename="local_rt_setup.log",
    log_keep=DEFAULT_LOG_KEEP,
    file_log_level=logging.INFO,
    cli_log_level=logging.INFO,
    when="midnight",
    interval=1,
    force_reconfigure=False,
):
    """Sets up the package logger with a daily-rotated file and console output.

    Args:
        log_dir (str): Directory to store log files.
        log_filename (str): The base name of the log file.
        log_keep (int): Number of backup log files to keep.
        file_log_level (int): The minimum level written to the log file.
        cli_log_level (int): The minimum level written to stderr.
        when (str):  Indicates when to rotate. See TimedRotatingFileHandler docs.
        interval (int): The rotation interval.
        force_reconfigure (bool): Drop existing handlers before adding new ones.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(min(file_log_level, cli_log_level))

    if force_reconfigure:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    if logger.handlers:  # Prevent duplicate handlers
        return logger

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(cli_log_level)
    logger.addHandler(console_handler)

    try:
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.join(log_dir, log_filename)
        handler = logging.handlers.TimedRotatingFileHandler(
            log_path, when=when, interval=interval, backupCount=log_keep
        )
        handler.setLevel(file_log_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    except OSError as e:
        # Console logging keeps working without a log file.
        logger.warning(f"Failed to create log file handler in '{log_dir}': {e}")

    logger.debug(
        f"Logging setup complete. Dir: {log_dir}, Filename: {log_filename}, "
        f"File level: {file_log_level}, CLI level: {cli_log_level}"
    )
    return logger


def log_separator(logger, app_name=None, app_version="0.0.0"):
    """Writes a separator line to the file handlers, including OS, app version,
       app name, Python version, and time.

    Args:
        logger: The logger object.
        app_name: The name of the application.
        app_version: The version of the application.
    """

    os_name = platform.system()
    os_version = platform.release()
    os_info = f"{os_name} {os_version}"
    if os_name == "Windows":
        os_info = f"{os_name} {platform.version()}"
    current_time = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    python_version = platform.python_version()

    separator_line = "=" * 100
    info_lines = [
        f"{app_name} v{app_version}",
        f"Operating System: {os_info}",
        f"Python Version: {python_version}",
        f"Timestamp: {current_time}",
    ]

    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler):
            if getattr(handler, "stream", None) is not None:
                try:
                    handler.stream.write("\n" + separator_line + "\n")
                    for line in info_lines:
                        handler.stream.write(line + "\n")
                    handler.stream.write(separator_line + "\n\n")
                    handler.stream.flush()
                except ValueError as e:
                    if "I/O operation on closed file" in str(e):
                        logger.warning(
                            f"Could not write to log file (stream closed): {handler.baseFilename} - {e}"
                        )
                    else:
                        raise
