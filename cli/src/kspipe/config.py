from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from kspipe.schema import (
    NAMESPACE_RESOURCE,
    PIPELINE_GROUP,
    PIPELINE_RESOURCE,
    PIPELINE_VERSION,
    ResourceSchema,
    namespace_schema,
    pipeline_schema,
)

CONFIG_FILE_ENV = "KSPIPE_CONFIG_FILE"
DEFAULT_CONFIG_FILE = Path.home() / ".config" / "kspipe" / "config.yaml"
DEFAULT_NAMESPACE_LABEL_SELECTOR = "kubesphere.io/devopsproject"


def _normalize_optional_text(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        return None
    normalized = value.strip()
    if normalized:
        return normalized
    return None


class KspipeSettings(BaseSettings):
    """
    Runtime configuration for the kspipe command line.

    Every option can be set through `KSPIPE_*` environment variables or the
    YAML config file; environment variables take precedence over the file.
    """

    model_config = SettingsConfigDict(
        env_prefix="KSPIPE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Cluster access.
    kubeconfig: Path | None = Field(
        default=None,
        description="Kubeconfig path. Falls back to the default loading rules, then in-cluster config.",
    )
    context: str | None = Field(
        default=None,
        description="Kubeconfig context name. Uses the current context when unset.",
    )

    # Resource types.
    pipeline_group: str = Field(
        default=PIPELINE_GROUP,
        description="API group of the pipeline custom resource.",
    )
    pipeline_version: str = Field(
        default=PIPELINE_VERSION,
        description="API version of the pipeline custom resource.",
    )
    pipeline_resource: str = Field(
        default=PIPELINE_RESOURCE,
        description="Plural resource name of the pipeline custom resource.",
    )
    namespace_resource: str = Field(
        default=NAMESPACE_RESOURCE,
        description="Plural resource name of the namespace type used for enumeration.",
    )
    namespace_label_selector: str = Field(
        default=DEFAULT_NAMESPACE_LABEL_SELECTOR,
        description="Label selector marking namespaces that host pipelines.",
    )

    # Interactive editing.
    editor: str | None = Field(
        default=None,
        description="Editor command for `edit`. Defaults to $VISUAL / $EDITOR handling in click.",
    )

    # Logging.
    log_level: str = Field(
        default="WARNING",
        description="Console log level (stderr).",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional JSON log file receiving DEBUG and above.",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @field_validator("context", "editor", mode="before")
    @classmethod
    def _normalize_optional_strings(cls, value: Any) -> str | None:
        return _normalize_optional_text(value)

    @field_validator("kubeconfig", "log_file", mode="before")
    @classmethod
    def _normalize_paths(cls, value: Any) -> Path | None:
        if isinstance(value, Path):
            return value.expanduser().resolve()
        text = _normalize_optional_text(value)
        if text is None:
            return None
        return Path(text).expanduser().resolve()

    @field_validator("pipeline_group", mode="before")
    @classmethod
    def _normalize_group(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("KSPIPE_PIPELINE_GROUP must be a string.")
        return value.strip()

    @field_validator(
        "pipeline_version",
        "pipeline_resource",
        "namespace_resource",
        "namespace_label_selector",
        mode="before",
    )
    @classmethod
    def _require_text(cls, value: Any) -> str:
        normalized = _normalize_optional_text(value)
        if normalized is None:
            raise ValueError("resource type settings must be non-empty strings.")
        return normalized

    def pipeline_schema(self) -> ResourceSchema:
        return pipeline_schema(
            group=self.pipeline_group,
            version=self.pipeline_version,
            resource=self.pipeline_resource,
        )

    def namespace_schema(self) -> ResourceSchema:
        return namespace_schema(resource=self.namespace_resource)


def resolve_config_file() -> Path:
    override = _normalize_optional_text(os.environ.get(CONFIG_FILE_ENV))
    if override is not None:
        return Path(override).expanduser()
    return DEFAULT_CONFIG_FILE


def read_config_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return {str(key): value for key, value in data.items()}


def load_settings(config_file: Path | None = None) -> KspipeSettings:
    path = config_file if config_file is not None else resolve_config_file()
    return KspipeSettings(**read_config_file(path))
