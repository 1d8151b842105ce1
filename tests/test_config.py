"""Tests for ValidatorConfig."""

import pytest

from fieldscope.config import ValidatorConfig


class TestValidatorConfig:
    def test_defaults(self):
        config = ValidatorConfig()
        assert config.stop_on_first_failure is False
        assert config.locale == "en"
        assert config.fallback_locale == "en"
        assert config.validate_empty_fields is False

    def test_from_dict_snake_case(self):
        config = ValidatorConfig.from_dict({"stop_on_first_failure": True, "locale": "pt-BR"})
        assert config.stop_on_first_failure is True
        assert config.locale == "pt-BR"

    def test_from_dict_camel_case(self):
        config = ValidatorConfig.from_dict({
            "stopOnFirstFailure": True,
            "validateEmptyFields": True,
            "fallbackLocale": "pt-BR",
        })
        assert config.stop_on_first_failure is True
        assert config.validate_empty_fields is True
        assert config.fallback_locale == "pt-BR"

    def test_from_dict_empty(self):
        assert ValidatorConfig.from_dict(None) == ValidatorConfig()
        assert ValidatorConfig.from_dict({}) == ValidatorConfig()

    def test_from_dict_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown validator option 'debounce'"):
            ValidatorConfig.from_dict({"debounce": 300})

    def test_with_changes_keeps_other_fields(self):
        config = ValidatorConfig(locale="fr", stop_on_first_failure=True)

        changed = config.with_changes(validateEmptyFields=True)

        assert changed.locale == "fr"
        assert changed.stop_on_first_failure is True
        assert changed.validate_empty_fields is True
        assert config.validate_empty_fields is False

    def test_immutable(self):
        with pytest.raises(AttributeError):
            ValidatorConfig().locale = "fr"


class TestFromEnv:
    def test_defaults_when_unset(self, monkeypatch):
        for name in (
            "FIELDSCOPE_LOCALE",
            "FIELDSCOPE_FALLBACK_LOCALE",
            "FIELDSCOPE_STOP_ON_FIRST_FAILURE",
            "FIELDSCOPE_VALIDATE_EMPTY_FIELDS",
        ):
            monkeypatch.delenv(name, raising=False)

        assert ValidatorConfig.from_env() == ValidatorConfig()

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("FIELDSCOPE_LOCALE", "pt-BR")
        monkeypatch.setenv("FIELDSCOPE_FALLBACK_LOCALE", "es")
        monkeypatch.setenv("FIELDSCOPE_STOP_ON_FIRST_FAILURE", "yes")
        monkeypatch.setenv("FIELDSCOPE_VALIDATE_EMPTY_FIELDS", "0")

        config = ValidatorConfig.from_env()

        assert config.locale == "pt-BR"
        assert config.fallback_locale == "es"
        assert config.stop_on_first_failure is True
        assert config.validate_empty_fields is False

    @pytest.mark.parametrize("raw", ["1", "true", "TRUE", "on", " yes "])
    def test_truthy_flags(self, monkeypatch, raw):
        monkeypatch.setenv("FIELDSCOPE_STOP_ON_FIRST_FAILURE", raw)
        assert ValidatorConfig.from_env().stop_on_first_failure is True
