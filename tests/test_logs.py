from __future__ import annotations

import logging

from logs import configure_logging, get_logger


def test_configure_logging_sets_root_handlers(tmp_path) -> None:
    log_file = tmp_path / "virtual-things.log"
    configure_logging(level="DEBUG", file_path=str(log_file))

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert any(isinstance(handler, logging.FileHandler) for handler in root.handlers)

    get_logger(__name__).info("structured log test", device_id="virtual-things-0")
    for handler in root.handlers:
        handler.flush()
    assert "structured log test" in log_file.read_text()


def test_unknown_level_falls_back_to_info() -> None:
    configure_logging(level="chatty", json_output=True)

    assert logging.getLogger().level == logging.INFO
