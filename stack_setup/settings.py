from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.models import DEFAULT_TLD

BUNDLED_STUBS_DIR = Path(__file__).resolve().parent / "stubs"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STACK_SETUP_", case_sensitive=False)

    stubs_dir: Path = BUNDLED_STUBS_DIR
    # Relative to a service directory, as composer and pnpm receive it.
    packages_dir: str = "../../packages"
    herd_bin: str = "herd"
    tld: str = DEFAULT_TLD

    def stub(self, name: str) -> Path:
        return self.stubs_dir / name

    def package_path(self, package: str) -> str:
        return f"{self.packages_dir.rstrip('/')}/{package}"
