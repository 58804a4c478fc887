"""Tests for environment-driven CLI settings."""

import pytest
from pydantic import ValidationError

from jwtctl.core.settings import CliSettings


class TestCliSettings:
    """Tests for CliSettings."""

    def test_defaults(self) -> None:
        settings = CliSettings()
        assert settings.log_level == "warning"
        assert settings.output_format == "standard"
        assert settings.pem_password is None

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("JWTCTL_LOG_LEVEL", "info")
        monkeypatch.setenv("JWTCTL_PEM_PASSWORD", "changeit")
        settings = CliSettings()
        assert settings.log_level == "info"
        assert settings.pem_password.get_secret_value() == "changeit"
        assert "changeit" not in repr(settings)

    def test_invalid_format(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("JWTCTL_OUTPUT_FORMAT", "yaml")
        with pytest.raises(ValidationError):
            CliSettings()

    @pytest.mark.parametrize(
        "verbose,debug,expected",
        [(False, False, "warning"), (True, False, "info"), (True, True, "debug")],
    )
    def test_effective_log_level(self, verbose: bool, debug: bool, expected: str) -> None:
        assert CliSettings().effective_log_level(verbose=verbose, debug=debug) == expected
