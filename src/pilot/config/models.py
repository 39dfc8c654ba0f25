"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, pilot.toml only contains overrides.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    entry_point_group: str = "pilot.plugins"
    local_dir: Path | None = None
    disabled: list[str] = Field(default_factory=list)


class EnvironmentConfig(BaseModel):
    """[environment] section: variables seeded into the root environment."""

    model_config = {"frozen": True}

    variables: dict[str, Any] = Field(default_factory=dict)


class PilotConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)
