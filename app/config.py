from __future__ import annotations

import os
import re
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from domain.models import GenerationConfig
from domain.styles import (
    ARROW_COLOR,
    DEFAULT_NODE_HEIGHT,
    DEFAULT_NODE_WIDTH,
    HORIZONTAL_SPACING,
    NODE_COLOR,
    VERTICAL_SPACING,
)

DEFAULT_CONFIG_PATH = Path("config/planviz.yaml")
CONFIG_PATH_ENV = "PLANVIZ_CONFIG_PATH"

_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


class DiagramSettings(BaseModel):
    node_width: float = Field(DEFAULT_NODE_WIDTH, gt=0)
    node_height: float = Field(DEFAULT_NODE_HEIGHT, gt=0)
    vertical_spacing: float = Field(VERTICAL_SPACING, ge=0)
    horizontal_spacing: float = Field(HORIZONTAL_SPACING, ge=0)
    font_size: int = Field(16, gt=0)
    operator_font_size: int | None = None
    details_font_size: int | None = None
    node_color: str = NODE_COLOR
    arrow_color: str = ARROW_COLOR

    @field_validator("node_color", "arrow_color", mode="before")
    @classmethod
    def normalize_color(cls, value: object) -> str:
        color = str(value or "").strip()
        if color and not color.startswith("#"):
            color = f"#{color}"
        if not _HEX_COLOR_RE.match(color):
            msg = f"expected a hex color such as #1e1e1e, got {value!r}"
            raise ValueError(msg)
        return color.lower()

    def to_generation_config(self) -> GenerationConfig:
        return GenerationConfig.model_validate(self.model_dump())


class OutputSettings(BaseModel):
    input_dir: Path = Path("examples/plans")
    output_dir: Path = Path("data/excalidraw")


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PLANVIZ_", env_nested_delimiter="__")

    diagram: DiagramSettings = DiagramSettings()
    output: OutputSettings = OutputSettings()

    _yaml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv(CONFIG_PATH_ENV)
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
