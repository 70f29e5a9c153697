# shaderland/utils/logger.py

import logging
import traceback
import os

from shaderland import config

os.makedirs(config.LOGS_PATH, exist_ok=True)

access_log_file = os.path.join(config.LOGS_PATH, "access.log")
error_log_file = os.path.join(config.LOGS_PATH, "error.log")

formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", "%Y-%m-%d %H:%M:%S")

# Raw model output kept for offline diagnosis is truncated to this many characters
MAX_DIAGNOSTIC_CHARS = 20000


def setup_logger(name, log_file, level):
    """A helper function to set up a logger."""
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False  # Prevent duplicate logs in parent loggers

    # Avoid adding handlers if they already exist (e.g., during autoreload)
    if not logger.handlers:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


access_logger = setup_logger("access", access_log_file, logging.INFO)
error_logger = setup_logger("error", error_log_file, logging.ERROR)


def log_info(message):
    access_logger.info(message)


def log_exception(e: Exception, context: str = ""):
    error_logger.error(f"❌ Exception in {context}:\n{traceback.format_exc()}")


def log_raw_output(context: str, raw_text: str):
    """Record model output that broke the output contract."""
    clipped = raw_text if len(raw_text) <= MAX_DIAGNOSTIC_CHARS else raw_text[:MAX_DIAGNOSTIC_CHARS] + "…[truncated]"
    error_logger.error(f"{context} ({len(raw_text)} chars):\n{clipped}")
