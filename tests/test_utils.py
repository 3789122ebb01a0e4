import logging

import pytest
import requests
from rich.logging import RichHandler

from localized_date.logging_config import get_logger, setup_logging
from localized_date.utils import (
    SourceLoadError,
    load_source,
    load_source_from_file,
    load_source_from_url,
)


def test_load_source_from_file_keeps_line_endings(tmp_path):
    path = tmp_path / "tasks.py"
    path.write_bytes(b"class Task:\r\n    pass\r\n")

    name, source = load_source_from_file(path)
    assert name == str(path)
    assert source == "class Task:\r\n    pass\r\n"


def test_load_source_from_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_source_from_file(tmp_path / "absent.py")


def test_load_source_from_undecodable_file(tmp_path):
    path = tmp_path / "tasks.py"
    path.write_bytes(b"\xff\xfe\x00")
    with pytest.raises(SourceLoadError, match="UTF-8"):
        load_source_from_file(path)


def test_load_source_requires_exactly_one_input(tmp_path):
    with pytest.raises(SourceLoadError):
        load_source()
    with pytest.raises(SourceLoadError):
        load_source(file_path=tmp_path / "a.py", url="https://example.com/a.py")


def test_invalid_url():
    with pytest.raises(SourceLoadError, match="Invalid URL"):
        load_source_from_url("not a url")


def test_url_timeout(monkeypatch):
    def raise_timeout(url, timeout):
        raise requests.exceptions.Timeout()

    monkeypatch.setattr(requests, "get", raise_timeout)
    with pytest.raises(SourceLoadError, match="timeout"):
        load_source_from_url("https://example.com/tasks.py")


def test_url_success(monkeypatch):
    class Response:
        text = "class Task:\n    pass\n"
        headers = {"content-type": "text/x-python"}

        def raise_for_status(self):
            pass

    monkeypatch.setattr(requests, "get", lambda url, timeout: Response())
    assert load_source_from_url("https://example.com/tasks.py") == (
        "https://example.com/tasks.py",
        Response.text,
    )


def test_get_logger_nests_under_package():
    assert get_logger("localized_date.cli").name == "localized_date.cli"
    assert get_logger("plugins").name == "localized_date.plugins"


def test_setup_logging_installs_rich_handler(tmp_path):
    log_file = tmp_path / "run.log"
    logger = setup_logging(level=logging.DEBUG, log_file=log_file)
    try:
        assert logger.level == logging.DEBUG
        assert any(isinstance(h, RichHandler) for h in logger.handlers)
        assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)

        get_logger("tests").debug("hello from tests")
        for handler in logger.handlers:
            handler.flush()
        assert "hello from tests" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
        logger.propagate = True
