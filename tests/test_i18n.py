"""Tests for the i18n module."""

import logging

import pytest

import i18n as i18n_mod
from i18n import _, get_available_locales, get_locale, set_locale, t
from i18n.en_US import STRINGS as EN
from i18n.zh_CN import STRINGS as ZH


@pytest.fixture(autouse=True)
def _reset_locale():
    """Reset locale after each test."""
    original = get_locale()
    yield
    set_locale(original)


class TestSetLocale:
    def test_default_locale(self):
        assert get_locale() == "en_US"

    def test_switch_to_zh(self):
        set_locale("zh_CN")
        assert get_locale() == "zh_CN"

    def test_invalid_locale(self):
        with pytest.raises(ValueError, match="Unsupported locale"):
            set_locale("ja_JP")

    def test_invalid_locale_keeps_current(self):
        set_locale("zh_CN")
        with pytest.raises(ValueError):
            set_locale("ja_JP")
        assert get_locale() == "zh_CN"

    def test_available_locales(self):
        assert get_available_locales() == ["en_US", "zh_CN"]


class TestTranslation:
    def test_basic_key_en(self):
        set_locale("en_US")
        assert t("exc.transport_error") == "Transport error"

    def test_basic_key_zh(self):
        set_locale("zh_CN")
        assert t("exc.transport_error") == "传输层错误"

    def test_format_params(self):
        result = t("cli.connecting", url="ws://127.0.0.1:9000/bob")
        assert "ws://127.0.0.1:9000/bob" in result

    def test_missing_format_param_returns_template(self, caplog):
        with caplog.at_level(logging.WARNING, logger="i18n"):
            result = t("cli.connecting", other="x")
        assert result == EN["cli.connecting"]
        assert any("format error" in r.getMessage() for r in caplog.records)

    def test_missing_key(self, caplog):
        with caplog.at_level(logging.WARNING, logger="i18n"):
            assert t("no.such.key") == "[no.such.key]"
        assert any("missing key" in r.getMessage() for r in caplog.records)

    def test_fallback_to_english(self, monkeypatch):
        set_locale("zh_CN")
        monkeypatch.delitem(i18n_mod._tables["zh_CN"], "cli.bye")
        assert t("cli.bye") == EN["cli.bye"]

    def test_alias(self):
        assert _ is t


class TestTables:
    def test_same_keys(self):
        assert set(EN) == set(ZH)

    @pytest.mark.parametrize("key", sorted(EN))
    def test_placeholders_match(self, key):
        import string

        def fields(s):
            return {f for _, f, _, _ in string.Formatter().parse(s) if f}

        assert fields(EN[key]) == fields(ZH[key])
