from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from adapters.layout.metrics import NodeMetrics
from adapters.layout.stacked import LayoutConfig

DEFAULT_CONFIG_PATH = Path("config/planviz.yaml")

DiagramFormat = Literal["svg", "excalidraw"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LayoutSettings(BaseModel):
    origin_x: float = 140.0
    origin_y: float = 160.0
    column_width: float = Field(320.0, gt=0)
    branch_gap: float = Field(140.0, ge=0)
    vertical_pad: float = Field(200.0, ge=0)
    row_height: float = Field(120.0, gt=0)
    block_gap: float = Field(40.0, ge=0)
    branch_wire_offset: float = 70.0
    sequential_wire_offset: float = 60.0

    def to_layout_config(self) -> LayoutConfig:
        return LayoutConfig(**self.model_dump())


class RenderSettings(BaseModel):
    format: DiagramFormat = "svg"
    output_dir: Path = Path("data/diagrams")
    excalidraw_base_url: str = "https://excalidraw.com/"
    margin: float = Field(40.0, ge=0)
    curve_segments: int = Field(16, ge=1)
    node_min_width: float = Field(200.0, gt=0)
    node_max_width: float = Field(320.0, gt=0)
    node_height: float = Field(64.0, gt=0)
    title_char_width: float = Field(8.5, gt=0)

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, value: object) -> str:
        return str(value).strip().lower() if value else "svg"

    def to_node_metrics(self) -> NodeMetrics:
        return NodeMetrics(
            title_char_width=self.title_char_width,
            min_width=self.node_min_width,
            max_width=max(self.node_min_width, self.node_max_width),
            height=self.node_height,
        )


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PLANVIZ_", env_nested_delimiter="__")

    log_level: LogLevel = "WARNING"
    layout: LayoutSettings = LayoutSettings()
    render: RenderSettings = RenderSettings()

    _yaml_path: ClassVar[Path | None] = None

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> str:
        return str(value).strip().upper() if value else "WARNING"

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
    env_path = os.getenv("PLANVIZ_CONFIG_PATH")
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
