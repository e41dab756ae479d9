"""
Settings loading helpers (tool locations, logging, config lookup).
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


def _load_dotenv() -> None:
    cwd_env = Path.cwd() / ".env"
    if cwd_env.exists():
        load_dotenv(dotenv_path=cwd_env, override=True)


_load_dotenv()


class ToolSettings(BaseModel):
    """
    Values read from environment variables.

    Attributes:
        cargo: Cargo executable (cargo itself exports CARGO to build scripts).
        wasm_pack: wasm-pack executable.
        log_level: Overrides the `--log-level` CLI option.
        config_path: Config file used when `--config` is not given.
    """
    cargo: str = Field(default="cargo", alias="CARGO")
    wasm_pack: str = Field(default="wasm-pack", alias="WASM_PACK")
    log_level: Optional[str] = Field(default=None, alias="DOCPAGES_LOG_LEVEL")
    config_path: Optional[Path] = Field(default=None, alias="DOCPAGES_CONFIG")

    model_config = {
        "populate_by_name": True,
    }


@lru_cache(maxsize=1)
def get_settings() -> ToolSettings:
    """
    Load settings from environment/.env exactly once.
    """
    values = {field.alias: os.getenv(field.alias) for field in ToolSettings.model_fields.values()}
    return ToolSettings(**{alias: value for alias, value in values.items() if value})
