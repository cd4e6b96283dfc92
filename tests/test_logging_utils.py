import datetime
import logging

from prepcards import logging_utils


def test_log_file_path_uses_env_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("PREPCARDS_LOG_DIR", str(tmp_path / "logs"))
    path = logging_utils.log_file_path(day=datetime.date(2024, 3, 5))
    assert path == tmp_path / "logs" / "prepcards_20240305.log"


def test_resolve_level(monkeypatch):
    monkeypatch.delenv("PREPCARDS_LOG_LEVEL", raising=False)
    assert logging_utils.resolve_level() == logging.INFO
    assert logging_utils.resolve_level("debug") == logging.DEBUG
    assert logging_utils.resolve_level("nonsense") == logging.INFO
    monkeypatch.setenv("PREPCARDS_LOG_LEVEL", "WARNING")
    assert logging_utils.resolve_level() == logging.WARNING


def test_configure_logging_writes_daily_file(tmp_path):
    logger = logging.getLogger("prepcards.test_configure")
    logger.propagate = False
    try:
        logfile = logging_utils.configure_logging(str(tmp_path), "DEBUG", logger=logger)
        logger.debug("Deck %s geladen", "leetcode")
        for handler in logger.handlers:
            handler.flush()
        assert logfile.parent == tmp_path
        assert logfile.name.startswith("prepcards_")
        assert logger.level == logging.DEBUG
        assert "Deck leetcode geladen" in logfile.read_text(encoding="utf-8")
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
