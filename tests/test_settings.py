# tests/test_settings.py
"""Tests for docrelay.config.settings"""

import pytest

from docrelay.config.settings import BotSettings, DEFAULT_NO_TRANSLATION_PLACEHOLDER
from docrelay.services.exceptions import ConfigMissingError


class TestBotSettings:
    """Tests for BotSettings dataclass"""

    def test_default_values(self):
        settings = BotSettings()
        assert settings.bot_token is None
        assert settings.webhook_url is None
        assert settings.port == 8080
        assert settings.ocr_languages == "eng"
        assert settings.ocr_engine_mode == 1
        assert settings.ocr_page_segmentation_mode == 6
        assert settings.render_zoom == 3.0
        assert settings.target_language == "ar"
        assert settings.max_chunk_chars == 3500
        assert settings.max_reply_chars == 3500
        assert settings.max_page_chars is None
        assert settings.translation_workers == 1
        assert settings.no_text_placeholder == "(No text found on this page)"
        assert settings.image_no_text_placeholder == "(No text found)"
        assert settings.no_translation_placeholder == DEFAULT_NO_TRANSLATION_PLACEHOLDER

    def test_reply_document_name_follows_target_language(self):
        assert BotSettings().reply_document_name == "translation_ar.txt"
        assert BotSettings(target_language="fa").reply_document_name == "translation_fa.txt"

    def test_conversion_enabled(self):
        assert BotSettings().conversion_enabled is False
        assert BotSettings(start_task_url="https://api.example.com/start").conversion_enabled is True


class TestRequireBotToken:
    """Tests for the startup token check"""

    def test_missing_token_raises(self):
        with pytest.raises(ConfigMissingError) as exc:
            BotSettings().require_bot_token()
        assert exc.value.setting == "BOT_TOKEN"
        assert str(exc.value) == "BOT_TOKEN is missing!"

    def test_token_returned(self):
        assert BotSettings(bot_token="123:abc").require_bot_token() == "123:abc"


class TestFromEnv:
    """Tests for BotSettings.from_env with an explicit mapping"""

    def test_empty_environment_gives_defaults(self):
        settings = BotSettings.from_env({})
        assert settings == BotSettings()

    def test_reads_values(self):
        settings = BotSettings.from_env({
            "BOT_TOKEN": "123:abc",
            "WEBHOOK_URL": "https://bot.example.com/",
            "PORT": "9000",
            "TESS_LANGS": "eng+ara",
            "RENDER_ZOOM": "2.5",
            "TARGET_LANGUAGE": "fa",
            "MAX_CHUNK_CHARS": "2000",
            "MAX_PAGE_CHARS": "1500",
            "TRANSLATION_WORKERS": "3",
            "START_TASK_URL": "https://api.example.com/v1/start/officepdf",
            "LOG_LEVEL": "debug",
        })
        assert settings.bot_token == "123:abc"
        # Trailing slash stripped so "<base>/<token>" is well-formed
        assert settings.webhook_url == "https://bot.example.com"
        assert settings.port == 9000
        assert settings.ocr_languages == "eng+ara"
        assert settings.render_zoom == 2.5
        assert settings.target_language == "fa"
        assert settings.max_chunk_chars == 2000
        assert settings.max_page_chars == 1500
        assert settings.translation_workers == 3
        assert settings.conversion_enabled is True
        assert settings.log_level == "DEBUG"

    def test_arabic_font_takes_precedence(self):
        settings = BotSettings.from_env({"ARABIC_FONT": "a.ttf", "RTL_FONT": "b.ttf"})
        assert settings.rtl_font_path == "a.ttf"
        settings = BotSettings.from_env({"RTL_FONT": "b.ttf"})
        assert settings.rtl_font_path == "b.ttf"

    def test_blank_values_use_defaults(self):
        settings = BotSettings.from_env({"PORT": "  ", "TESS_LANGS": ""})
        assert settings.port == 8080
        assert settings.ocr_languages == "eng"

    def test_non_numeric_values_use_defaults(self):
        settings = BotSettings.from_env({"PORT": "http", "RENDER_ZOOM": "high", "MAX_PAGE_CHARS": "x"})
        assert settings.port == 8080
        assert settings.render_zoom == 3.0
        assert settings.max_page_chars is None


class TestValidation:
    """Out-of-range values are reset to defaults"""

    def test_out_of_range_values_reset(self):
        settings = BotSettings.from_env({
            "PORT": "70000",
            "RENDER_ZOOM": "12",
            "MAX_CHUNK_CHARS": "9000",
            "MAX_REPLY_CHARS": "5000",
            "MAX_PAGE_CHARS": "0",
            "TRANSLATION_WORKERS": "0",
            "WORKER_THREADS": "-1",
            "REQUEST_TIMEOUT": "1",
            "LOG_LEVEL": "verbose",
        })
        assert settings.port == 8080
        assert settings.render_zoom == 3.0
        assert settings.max_chunk_chars == 3500
        assert settings.max_reply_chars == 3500
        assert settings.max_page_chars is None
        assert settings.translation_workers == 1
        assert settings.worker_threads == 4
        assert settings.request_timeout == 120
        assert settings.log_level == "INFO"

    def test_request_timeout_upper_bound(self):
        assert BotSettings.from_env({"REQUEST_TIMEOUT": "3600"}).request_timeout == 120
        assert BotSettings.from_env({"REQUEST_TIMEOUT": "600"}).request_timeout == 600

    def test_constructor_does_not_validate(self):
        """Tests build small settings directly; only from_env normalizes."""
        settings = BotSettings(max_reply_chars=3, max_chunk_chars=10)
        assert settings.max_reply_chars == 3
        assert settings.max_chunk_chars == 10
