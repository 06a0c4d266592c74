from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from automagik_forge.version import __version__
from automagik_forge.core.constants import DEFAULT_BACKEND_PORT, DEFAULT_EXTRACT_LOCK_TIMEOUT

_PACKAGE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FORGE_LAUNCHER_",
        case_sensitive=True,
        extra="ignore",
    )

    VERSION: str = __version__
    # Directory containing dist/<platform>/*.zip; defaults to the package itself.
    INSTALL_DIR: Optional[str] = None
    DEFAULT_PORT: str = DEFAULT_BACKEND_PORT
    EXTRACT_LOCK_TIMEOUT: float = DEFAULT_EXTRACT_LOCK_TIMEOUT

    # --- LOGGING ---
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    @property
    def install_dir(self) -> Path:
        if self.INSTALL_DIR:
            return Path(self.INSTALL_DIR).expanduser()
        return _PACKAGE_DIR


def load_settings() -> Settings:
    return Settings()
