"""
Unit tests for the product service JSON logging setup.
"""

import json
import logging

from product_service.app.utils.logging import setup_product_logging


class TestProductLogging:
    def test_emits_json_with_extra_context(self, capsys):
        logger = setup_product_logging("product_service.test_json", log_level="INFO")

        logger.info("Cleaned", extra={"product_id": "p1", "operation": "reconcile"})

        line = capsys.readouterr().out.strip().splitlines()[-1]
        entry = json.loads(line)
        assert entry["message"] == "Cleaned"
        assert entry["service"] == "product_service"
        assert entry["level"] == "INFO"
        assert entry["product_id"] == "p1"
        assert entry["operation"] == "reconcile"

    def test_level_filters_and_setup_is_repeatable(self, capsys):
        setup_product_logging("product_service.test_level", log_level="INFO")
        logger = setup_product_logging("product_service.test_level", log_level="WARNING")

        logger.info("hidden")

        assert len(logger.handlers) == 1
        assert logger.level == logging.WARNING
        assert "hidden" not in capsys.readouterr().out

    def test_file_logging_writes_rotating_files(self, tmp_path):
        logger = setup_product_logging(
            "product_service.test_files",
            log_level="INFO",
            enable_file_logging=True,
            log_dir=str(tmp_path),
        )

        logger.error("Broken", extra={"operation": "probe_media"})
        for handler in logger.handlers:
            handler.flush()

        assert (tmp_path / "product_service.test_files.log").exists()
        errors = (tmp_path / "product_service.test_files_errors.log").read_text()
        assert json.loads(errors.strip())["operation"] == "probe_media"
