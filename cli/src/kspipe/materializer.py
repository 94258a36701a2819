"""Fetch, render, parse, and commit pipeline resources."""

from __future__ import annotations

import json
import logging
from typing import Any

import yaml

from kspipe.cluster import ResourceClient
from kspipe.errors import (
    CommitError,
    ConflictError,
    DecodeError,
    DeleteError,
    FetchError,
    StoreError,
)
from kspipe.schema import ResourceSchema

LOGGER = logging.getLogger("kspipe.materializer")

JSON_INDENT = 4
HTTP_CONFLICT = 409
YAML_WIDTH = 4096
# Line breaks a YAML loader folds or normalizes unless they are escaped.
FOLDED_BREAKS = ("\r", "\x85", "\u2028", "\u2029")


class _BlockDumper(yaml.SafeDumper):
    pass


def _represent_str(dumper: yaml.SafeDumper, value: str) -> yaml.ScalarNode:
    if any(char in value for char in FOLDED_BREAKS):
        return dumper.represent_scalar("tag:yaml.org,2002:str", value, style='"')
    if "\n" in value:
        return dumper.represent_scalar("tag:yaml.org,2002:str", value, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", value)


_BlockDumper.add_representer(str, _represent_str)


def to_text(instance: dict[str, Any]) -> str:
    """Render an instance as block YAML via a sorted, indented JSON encoding.

    Multi-line strings (Jenkinsfiles, scripts) are emitted as literal blocks so
    they stay editable.
    """
    encoded = json.dumps(instance, indent=JSON_INDENT, sort_keys=True, ensure_ascii=False)
    return yaml.dump(
        json.loads(encoded),
        Dumper=_BlockDumper,
        default_flow_style=False,
        sort_keys=True,
        allow_unicode=True,
        width=YAML_WIDTH,
    )


def from_text(text: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DecodeError(f"cannot parse pipeline, error: {exc}") from exc
    if not isinstance(data, dict):
        raise DecodeError(
            f"cannot parse pipeline, error: expected a mapping, got {type(data).__name__}"
        )
    # YAML-only scalars (timestamps, dates) become strings, as in a YAML-to-JSON conversion.
    try:
        return json.loads(json.dumps(data, default=str))
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"cannot parse pipeline, error: {exc}") from exc


class ResourceMaterializer:
    def __init__(self, client: ResourceClient, *, schema: ResourceSchema) -> None:
        self._client = client
        self._schema = schema

    def fetch(self, namespace: str, name: str) -> dict[str, Any]:
        try:
            return self._client.get(self._schema, namespace, name)
        except StoreError as exc:
            raise FetchError(f"cannot get pipeline, error: {exc}") from exc

    def to_text(self, instance: dict[str, Any]) -> str:
        return to_text(instance)

    def from_text(self, text: str) -> dict[str, Any]:
        return from_text(text)

    def commit(self, namespace: str, instance: dict[str, Any]) -> dict[str, Any]:
        name = (instance.get("metadata") or {}).get("name")
        try:
            updated = self._client.update(self._schema, namespace, instance)
        except StoreError as exc:
            if exc.status == HTTP_CONFLICT:
                raise ConflictError(
                    f"cannot update pipeline {namespace}/{name}, "
                    f"it was modified since it was fetched, error: {exc}"
                ) from exc
            raise CommitError(f"cannot update pipeline {namespace}/{name}, error: {exc}") from exc
        LOGGER.info(
            "pipeline updated namespace=%s name=%s resource_version=%s",
            namespace,
            name,
            (updated.get("metadata") or {}).get("resourceVersion"),
        )
        return updated

    def delete(self, namespace: str, name: str) -> None:
        try:
            self._client.delete(self._schema, namespace, name)
        except StoreError as exc:
            raise DeleteError(f"cannot delete pipeline {namespace}/{name}, error: {exc}") from exc
        LOGGER.info("pipeline deleted namespace=%s name=%s", namespace, name)
