"""Tests for structured logging."""

import json
import logging

from cppreview.utils.logging import ComponentLogger, get_unit_logger, setup_logging


class TestSetupLogging:
    """Test logger configuration."""

    def test_level_and_handlers(self):
        logger = setup_logging(level="ERROR")
        assert logger.level == logging.ERROR
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_file_logging(self, tmp_path):
        log_file = tmp_path / "logs" / "cppreview.log"
        setup_logging(level="WARNING", log_file=log_file)
        ComponentLogger("scanner", parent="core").warning("Path does not exist", path="x.cpp")
        for handler in logging.getLogger("cppreview").handlers:
            handler.flush()
        content = log_file.read_text()
        assert "cppreview.core.scanner" in content
        assert "Path does not exist | path=x.cpp" in content

    def test_json_file_logging(self, tmp_path):
        log_file = tmp_path / "cppreview.jsonl"
        setup_logging(level="DEBUG", log_file=log_file, json_format=True)
        get_unit_logger(tmp_path / "a.cpp").unit_failed("Cannot read file")
        for handler in logging.getLogger("cppreview").handlers:
            handler.flush()
        record = json.loads(log_file.read_text().splitlines()[-1])
        assert record["level"] == "WARNING"
        assert record["context"]["component"] == "unit"
        assert record["context"]["error"] == "Cannot read file"
        assert record["context"]["file"].endswith("a.cpp")


class TestComponentLogger:
    def test_message_format(self):
        logger = ComponentLogger("taint", parent="analysis")
        assert logger._format_message("Depth limit", max_depth=3) == "Depth limit | max_depth=3"
        assert logger._format_message("Plain") == "Plain"
        assert logger._logger.name == "cppreview.analysis.taint"
