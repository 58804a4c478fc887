"""Command-line settings loaded from environment variables."""

from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVEL_DEFAULT = "warning"
OUTPUT_FORMAT_DEFAULT = "standard"


class CliSettings(BaseSettings):
    """Defaults for jwtctl that may be overridden from the environment."""

    model_config = SettingsConfigDict(env_prefix="JWTCTL_")

    log_level: Literal["debug", "info", "warning", "error"] = LOG_LEVEL_DEFAULT
    output_format: Literal["standard", "json"] = OUTPUT_FORMAT_DEFAULT
    pem_password: SecretStr | None = None

    def effective_log_level(self, *, verbose: bool, debug: bool) -> str:
        """Resolve the log level once command-line flags are known."""
        if debug:
            return "debug"
        if verbose:
            return "info"
        return self.log_level
