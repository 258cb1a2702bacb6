"""
Tests for LibLoaderLogger.
"""

import json
import logging

from libloader.libloader_logger import LibLoaderLogger


def test_log_line_is_json_with_caller(caplog):
    logger = LibLoaderLogger()
    with caplog.at_level(logging.INFO, logger="libloader"):
        logger.log("it's\nhere", logging.INFO)

    (record,) = caplog.records
    line = json.loads(record.getMessage())
    assert line["message"] == 'it"s here'
    assert line["level"] == "INFO"
    assert line["caller_file"] == "test_libloader_logger.py"
    assert line["caller_name"] == "test_log_line_is_json_with_caller"


def test_disabled_level_is_skipped(caplog):
    logger = LibLoaderLogger(level=logging.WARNING)
    with caplog.at_level(logging.WARNING, logger="libloader"):
        logger.log("quiet", logging.DEBUG)
    assert caplog.records == []
