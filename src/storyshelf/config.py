"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "STORYSHELF_"


class Settings(BaseModel):
    db_url:              str = "sqlite:///storyshelf.db"
    default_account:     str = Field(default="default", min_length=1, description="Owner account used by the CLI")
    default_language:    str = Field(default="en-GB", min_length=1, description="Language tag when none is given")
    parser_config:       str = Field(default="gfm-like", description="MarkdownIt parser preset name")
    query_timeout:       float = Field(default=3.0, gt=0, description="Deadline in seconds for each storage transaction")
    contributor_linking: str = Field(default="strict", pattern="^(strict|best-effort)$",
                                     description="strict: link failures abort the ingest; best-effort: logged only")
    log_level:           str = Field(default="INFO", description="Root log level for CLI runs")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then STORYSHELF_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
