import io
import json
import logging

import pytest

from csvrows import config
from csvrows.config import Settings, get_settings
from csvrows.errors import ConfigurationError
from csvrows.logging_setup import setup_logging
from csvrows.rules import DEFAULT_CHUNK_SIZE


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_default_settings(monkeypatch, fresh_settings):
    monkeypatch.delenv("CSVROWS_CHUNK_SIZE", raising=False)
    assert get_settings().chunk_size == DEFAULT_CHUNK_SIZE
    assert get_settings() is get_settings()
    assert DEFAULT_CHUNK_SIZE == 64 * 1024


def test_chunk_size_must_be_positive():
    with pytest.raises(ValueError):
        Settings(chunk_size=0)


@pytest.mark.parametrize("raw, expected", [("1", True), ("true", True), ("On", True), ("0", False), ("no", False), ("", False)])
def test_env_flag(monkeypatch, raw, expected):
    monkeypatch.setenv("CSVROWS_TEST_FLAG", raw)
    assert config._env_flag("CSVROWS_TEST_FLAG", False) is expected


def test_env_int_falls_back_when_unset(monkeypatch):
    monkeypatch.delenv("CSVROWS_TEST_INT", raising=False)
    assert config._env_int("CSVROWS_TEST_INT", 7) == 7
    monkeypatch.setenv("CSVROWS_TEST_INT", " 12 ")
    assert config._env_int("CSVROWS_TEST_INT", 7) == 12


def test_non_integer_chunk_size_names_the_variable(monkeypatch, fresh_settings):
    monkeypatch.setenv("CSVROWS_CHUNK_SIZE", "64k")
    with pytest.raises(ConfigurationError, match="CSVROWS_CHUNK_SIZE must be an integer"):
        get_settings()


def test_plain_text_logging(restore_root_logger):
    stream = io.StringIO()
    setup_logging("INFO", stream=stream, fmt="[x] %(message)s")
    logging.getLogger("csvrows.test").info("rows=%d", 3)
    assert stream.getvalue() == "[x] rows=3\n"


def test_json_logging(restore_root_logger):
    stream = io.StringIO()
    setup_logging("DEBUG", json_format=True, stream=stream)
    logging.getLogger("csvrows.test").debug("converted")
    record = json.loads(stream.getvalue().strip())
    assert record["message"] == "converted"
    assert record["levelname"] == "DEBUG"
    assert record["name"] == "csvrows.test"
    assert "timestamp" in record
