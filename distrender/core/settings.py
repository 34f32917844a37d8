from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DISTRENDER_", case_sensitive=False)

    manifest_path: Path = Path("distrender.yaml")
    dest_root: Path = Path("build")
    include_dotfiles: bool = False
