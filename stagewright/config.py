from __future__ import annotations

import os
from typing import Optional

import yaml
from pydantic import BaseModel


class EventsConfig(BaseModel):
    """Configuration for the in-process event bus."""

    workers: int = 2
    queue_size: int = 0
    timeline_size: int = 100


class StagewrightConfig(BaseModel):
    """Top-level configuration model."""

    database_url: Optional[str] = None
    events: EventsConfig = EventsConfig()
    log_level: str = "INFO"


def load_config(path: Optional[str] = None) -> StagewrightConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to STAGEWRIGHT_CONFIG env
            variable or 'stagewright.yaml' in the current directory.
    """

    config_path = path or os.getenv("STAGEWRIGHT_CONFIG", "stagewright.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = StagewrightConfig(**data)
    else:
        config = StagewrightConfig()

    env_db_url = os.getenv("STAGEWRIGHT_DATABASE_URL") or os.getenv("DATABASE_URL")
    if env_db_url:
        config.database_url = env_db_url

    env_log_level = os.getenv("STAGEWRIGHT_LOG_LEVEL")
    if env_log_level:
        config.log_level = env_log_level
    return config
