"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is driven by environment variables."""

    # Organization
    fbcli_org: str = "Far-Beyond-Dev"
    fbcli_git_host: str = "github.com"
    fbcli_github_token: str = ""
    fbcli_public_hosts: list[str] = Field(
        default_factory=lambda: [
            "github.com",
            "gitlab.com",
            "bitbucket.org",
            "codeberg.org",
        ],
    )

    # External tools
    fbcli_git_executable: str = "git"
    fbcli_build_executable: str = "cargo"
    fbcli_process_timeout_seconds: float = Field(default=120.0, gt=0)
    fbcli_build_timeout_seconds: float = Field(default=1800.0, gt=0)

    # Plugin host
    fbcli_host_name: str = "Horizon"

    # Logging
    fbcli_log_level: str = "INFO"
    fbcli_log_json: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


# Default instance; services accept an explicit Settings for tests
settings = Settings()
