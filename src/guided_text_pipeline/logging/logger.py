# ============================================================================
# src/guided_text_pipeline/logging/logger.py
# ============================================================================
"""Project-wide logger shared by every component and stage."""

import logging
import os
import sys
from pathlib import Path

LOGGER_NAME = "guidedTextPipelineLogger"
LOG_FORMAT = "[%(asctime)s: %(levelname)s: %(module)s: %(message)s]"


def _build_logger() -> logging.Logger:
    """Configure the named logger once with console and optional file output."""
    log = logging.getLogger(LOGGER_NAME)
    if log.handlers:
        return log

    level = os.environ.get("GUIDED_PIPELINE_LOG_LEVEL", "INFO").upper()
    log.setLevel(getattr(logging, level, logging.INFO))
    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    log.addHandler(console_handler)

    log_file = os.environ.get("GUIDED_PIPELINE_LOG_FILE")
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        log.addHandler(file_handler)

    return log


logger = _build_logger()
