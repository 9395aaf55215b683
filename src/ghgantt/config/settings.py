"""Process-level settings read from GHGANTT_* environment variables.

Project configuration (owner, repo, field mapping) lives in
``.gantt/config.yml`` and is handled by ``ConfigService``; these settings
only cover how the command line itself runs.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Command-line settings, overridable by flags."""

    model_config = SettingsConfigDict(env_prefix="GHGANTT_")

    project_root: Path = Field(
        default=Path(),
        description="Directory holding the .gantt/ task repository",
    )
    verbose: int = Field(default=0, ge=0, description="Log verbosity: 1 for INFO, 2 for DEBUG")
    log_file: Path | None = Field(default=None, description="File that logs are appended to")
    assume_yes: bool = Field(
        default=False,
        description="Answer yes to the push confirmation (for CI jobs)",
    )
