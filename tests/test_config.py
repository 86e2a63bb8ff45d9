"""
Tests for Configuration, Logging and Errors
===========================================
"""

import asyncio
import json
import logging

import pytest

from inline_suggest import config, get_status
from inline_suggest.config import EngineConfig, LanguageToolConfig, LoggingConfig, load_config
from inline_suggest.config_logging import (
    InvalidRule,
    JsonFormatter,
    OutOfRange,
    SourceUnavailable,
    StructuredLogger,
)
from tests.conftest import run


class TestConfig:
    """Tests for the configuration layer."""

    def test_defaults(self):
        """Test default values."""
        assert config.get('languagetool.language') == "en-US"
        assert config.get('pov.ai_window') == 15
        assert config.get('cache.capacity') == 256
        assert config.get('nope.missing', 'fallback') == 'fallback'

    def test_set(self):
        """Test setting a value."""
        config.set('pov.ai_window', 20)
        assert config.get_config().pov.ai_window == 20

    def test_set_rejects_unknown_keys(self):
        """Test that unknown keys are rejected."""
        with pytest.raises(ValueError):
            config.set('pov.unknown', 1)
        with pytest.raises(ValueError):
            config.set('nosection.key', 1)
        with pytest.raises(ValueError):
            config.set('flat', 1)

    def test_disabled_categories(self):
        """Test disabled category parsing."""
        cfg = LanguageToolConfig(typos=False, punctuation=False)
        assert cfg.disabled_categories() == ["TYPOS", "PUNCTUATION"]
        assert LanguageToolConfig().disabled_categories() == []

    def test_load_from_file(self, tmp_path):
        """Test loading from a JSON file."""
        path = tmp_path / "inline_suggest_config.json"
        path.write_text(json.dumps({
            'languagetool': {'enabled': False, 'language': 'en-GB'},
            'local_rules': {'disabled_rules': ['CAP001']},
            'unknown_section': {'x': 1},
        }))
        loaded = load_config(path)
        assert loaded.languagetool.enabled is False
        assert loaded.languagetool.language == 'en-GB'
        assert loaded.local_rules.disabled_rules == ['CAP001']

    def test_malformed_file_keeps_defaults(self, tmp_path):
        """Test that a malformed file keeps defaults."""
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        assert load_config(path).languagetool.enabled is True

    def test_env_overrides(self, tmp_path, monkeypatch):
        """Test environment overrides."""
        monkeypatch.setenv("INLINE_SUGGEST_LANGUAGETOOL_ENABLED", "false")
        monkeypatch.setenv("INLINE_SUGGEST_LOCAL_RULES_DISABLED", "SPC001, CAP001")
        monkeypatch.setenv("INLINE_SUGGEST_AI_TIMEOUT", "2.5")
        monkeypatch.setenv("INLINE_SUGGEST_CACHE_CAPACITY", "not-a-number")
        loaded = load_config(tmp_path / "absent.json")
        assert loaded.languagetool.enabled is False
        assert loaded.local_rules.disabled_rules == ["SPC001", "CAP001"]
        assert loaded.ai.request_timeout == 2.5
        assert loaded.cache.capacity == 256

    def test_save_round_trip(self, tmp_path):
        """Test saving and reloading."""
        path = tmp_path / "saved.json"
        config.set('pov.ai_window', 9)
        config.save_config(path)
        assert load_config(path).pov.ai_window == 9

    def test_status(self):
        """Test status reporting."""
        status = get_status()
        assert status['sources']['languagetool']['enabled'] is True
        assert 'api_key_present' in status['sources']['ai']


class TestErrors:
    """Tests for the exception hierarchy."""

    def test_out_of_range_to_dict(self):
        """Test error serialization."""
        error = OutOfRange(12, 11)
        assert error.to_dict() == {
            'code': "OUT_OF_RANGE",
            'message': "Offset 12 outside block of length 11",
            'details': {'offset': 12, 'total': 11},
        }

    def test_source_unavailable(self):
        """Test SourceUnavailable details."""
        error = SourceUnavailable("down", source="gemini")
        assert error.code == "SOURCE_UNAVAILABLE"
        assert error.details['source'] == "gemini"

    def test_invalid_rule_details(self):
        """Test InvalidRule details."""
        error = InvalidRule("bad", pattern="(", rule_id="USR1")
        assert error.details == {'pattern': "(", 'rule_id': "USR1"}


class TestStructuredLogger:
    """Tests for structured logging."""

    def test_json_records(self, caplog):
        """Test JSON log records."""
        log_config = LoggingConfig(to_console=False, propagate=True, level="DEBUG")
        logger = StructuredLogger('inline_suggest.test', log_config)
        StructuredLogger.set_correlation_id("corr-1")
        with caplog.at_level(logging.DEBUG, logger='inline_suggest.test'):
            logger.info("Pass finished", block_id=3)
        record = json.loads(caplog.records[-1].getMessage())
        assert record['message'] == "Pass finished"
        assert record['block_id'] == 3
        assert record['correlation_id'] == "corr-1"

    def test_correlation_id_per_async_task(self):
        """Test that concurrent passes on one thread keep separate correlation ids."""
        async def one_pass():
            mine = StructuredLogger.new_correlation_id()
            await asyncio.sleep(0)
            return mine, StructuredLogger.get_correlation_id()

        async def both():
            return await asyncio.gather(one_pass(), one_pass())

        results = run(both())
        assert all(mine == seen for mine, seen in results)
        assert results[0][0] != results[1][0]

    def test_log_operation_reraises(self, caplog):
        """Test that log_operation re-raises after logging."""
        logger = StructuredLogger('inline_suggest.test_op',
                                  LoggingConfig(to_console=False, propagate=True))
        with caplog.at_level(logging.INFO, logger='inline_suggest.test_op'):
            with pytest.raises(RuntimeError):
                with logger.log_operation('analysis_pass'):
                    raise RuntimeError("boom")
        assert any('"status": "failed"' in r.getMessage() for r in caplog.records)

    def test_formatter_wraps_plain_records(self):
        """Test formatting of plain records."""
        record = logging.LogRecord("other", logging.INFO, __file__, 1, "plain", None, None)
        data = json.loads(JsonFormatter().format(record))
        assert data['message'] == "plain"
        assert data['logger'] == "other"

    def test_text_format(self, caplog):
        """Test text log format."""
        logger = StructuredLogger('inline_suggest.test_text',
                                  LoggingConfig(to_console=False, propagate=True, format='text'))
        with caplog.at_level(logging.INFO, logger='inline_suggest.test_text'):
            logger.info("hello", extra_field=1)
        assert caplog.records[-1].getMessage() == "hello"


def test_engine_config_sections():
    """Test that every configuration section is present."""
    cfg = EngineConfig()
    assert {'languagetool', 'local_rules', 'pov', 'ai', 'cache', 'logging'} <= set(vars(cfg))
