from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for the menu engine and its terminal front end.

    Values are loaded from environment variables and `.env`.

    Notes:
    - Logs go to a file by default; the terminal belongs to the renderer.
    - GRIDMENU_POLL_TIMEOUT_MS bounds how long each input queue is waited on
      per loop iteration.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Engine
    GRIDMENU_POLL_TIMEOUT_MS: int = Field(default=10, ge=1)
    GRIDMENU_REPORT_FOCUS: bool = Field(default=False)

    # Renderer selection: "auto" probes for a usable backend.
    GRIDMENU_RENDERER: str = Field(default="auto")

    # Logging
    GRIDMENU_LOG_DIR: Path = Field(default=Path("_logs"))
    GRIDMENU_LOG_LEVEL: str = Field(default="INFO")
    GRIDMENU_LOG_BACKUP_COUNT: int = Field(default=14)
    # Mirror logs to stderr. Garbles the screen while a terminal UI runs.
    GRIDMENU_LOG_CONSOLE: bool = Field(default=False)

    @property
    def poll_timeout(self) -> float:
        """Poll timeout in seconds."""
        return self.GRIDMENU_POLL_TIMEOUT_MS / 1000.0


def load_settings() -> Settings:
    s = Settings()
    s.GRIDMENU_RENDERER = s.GRIDMENU_RENDERER.strip().lower() or "auto"
    return s
