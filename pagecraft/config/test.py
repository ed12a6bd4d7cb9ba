"""Tests for configuration management."""

import pytest

from .lib import (
    EnvConfig,
    EnvVar,
    get_available_llm_providers,
    get_default_llm_model,
    get_environment,
    get_environment_info,
    list_environment_variables,
)


@pytest.fixture
def clean_llm_env(monkeypatch):
    """Remove every LLM selection variable from the environment."""
    for name in ("ANTHROPIC_API_KEY", "OPENAI_API_KEY", "LLM_PROVIDER", "LLM_MODEL"):
        monkeypatch.delenv(name, raising=False)


# =============================================================================
# Tests for get_environment (main interface)
# =============================================================================


class TestGetEnvironment:
    """Tests for the unified get_environment interface."""

    @pytest.mark.unit
    def test_returns_default_when_not_set(self, monkeypatch):
        """Returns default value when env var is not set."""
        monkeypatch.delenv("MCP_PORT", raising=False)
        assert get_environment(EnvVar.MCP_PORT) == 18080

    @pytest.mark.unit
    def test_override_takes_priority(self, monkeypatch):
        """Override parameter takes highest priority."""
        monkeypatch.setenv("MCP_PORT", "9999")
        assert get_environment(EnvVar.MCP_PORT, override=5000) == 5000

    @pytest.mark.unit
    def test_int_type_conversion(self, monkeypatch):
        """Integer type conversion from string."""
        monkeypatch.setenv("LLM_MAX_TOKENS", "8192")
        result = get_environment(EnvVar.LLM_MAX_TOKENS)
        assert result == 8192
        assert isinstance(result, int)

    @pytest.mark.unit
    def test_float_type_conversion(self, monkeypatch):
        """Float type conversion from string."""
        monkeypatch.setenv("LLM_TEMPERATURE", "0.25")
        assert get_environment(EnvVar.LLM_TEMPERATURE) == 0.25

    @pytest.mark.unit
    def test_invalid_float_returns_default(self, monkeypatch):
        """Invalid float value returns default."""
        monkeypatch.setenv("LLM_TEMPERATURE", "warm")
        assert get_environment(EnvVar.LLM_TEMPERATURE) == 0.0

    @pytest.mark.unit
    def test_bool_type_conversion(self, monkeypatch):
        """Boolean conversion for recognised spellings."""
        for value in ("true", "1", "yes", "TRUE"):
            monkeypatch.setenv("LAYOUT_CONCURRENT_ELEMENTS", value)
            assert get_environment(EnvVar.LAYOUT_CONCURRENT_ELEMENTS) is True
        for value in ("false", "0", "no"):
            monkeypatch.setenv("LAYOUT_CONCURRENT_ELEMENTS", value)
            assert get_environment(EnvVar.LAYOUT_CONCURRENT_ELEMENTS) is False

    @pytest.mark.unit
    def test_unrecognised_bool_returns_default(self, monkeypatch):
        monkeypatch.setenv("LAYOUT_CONCURRENT_ELEMENTS", "maybe")
        assert get_environment(EnvVar.LAYOUT_CONCURRENT_ELEMENTS) is False

    @pytest.mark.unit
    def test_invalid_int_returns_default(self, monkeypatch):
        """Invalid integer value returns default."""
        monkeypatch.setenv("MCP_PORT", "not-a-number")
        assert get_environment(EnvVar.MCP_PORT) == 18080

    @pytest.mark.unit
    def test_none_default_for_api_keys(self, clean_llm_env):
        """API keys default to None when not set."""
        assert get_environment(EnvVar.ANTHROPIC_API_KEY) is None


class TestGetEnvironmentInfo:
    """Tests for environment variable metadata."""

    @pytest.mark.unit
    def test_returns_env_config(self):
        info = get_environment_info(EnvVar.LLM_MAX_TOKENS)
        assert isinstance(info, EnvConfig)
        assert info.name == "LLM_MAX_TOKENS"
        assert info.default == 4096
        assert info.var_type is int
        assert info.category == "generation"

    @pytest.mark.unit
    def test_all_names_match_members(self):
        """Every member's EnvConfig name equals the member name."""
        for var in EnvVar:
            assert var.value.name == var.name


class TestListEnvironmentVariables:
    """Tests for listing environment variables."""

    @pytest.mark.unit
    def test_lists_all_without_category(self):
        assert list_environment_variables() == list(EnvVar)

    @pytest.mark.unit
    def test_filters_by_category(self):
        llm_vars = list_environment_variables("llm")
        assert EnvVar.ANTHROPIC_API_KEY in llm_vars
        assert EnvVar.MCP_PORT not in llm_vars

    @pytest.mark.unit
    def test_unknown_category_is_empty(self):
        assert list_environment_variables("nonexistent") == []


class TestModelSelection:
    """Tests for provider discovery and default model resolution."""

    @pytest.mark.unit
    def test_no_providers_without_keys(self, clean_llm_env):
        assert get_available_llm_providers() == []

    @pytest.mark.unit
    def test_providers_follow_keys(self, clean_llm_env, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        assert get_available_llm_providers() == ["openai"]

    @pytest.mark.unit
    def test_explicit_model_wins(self, clean_llm_env, monkeypatch):
        monkeypatch.setenv("LLM_MODEL", "gpt-4.1")
        monkeypatch.setenv("LLM_PROVIDER", "anthropic")
        assert get_default_llm_model() == "gpt-4.1"

    @pytest.mark.unit
    def test_provider_preference(self, clean_llm_env, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "openai")
        assert get_default_llm_model() == "gpt-4.1-mini"

    @pytest.mark.unit
    def test_first_available_provider(self, clean_llm_env, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        assert get_default_llm_model() == "gpt-4.1-mini"

    @pytest.mark.unit
    def test_global_default(self, clean_llm_env):
        assert get_default_llm_model() == "claude-sonnet-4-5"
