"""Resource client contract and its Kubernetes implementation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol, TypeVar

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.dynamic import DynamicClient
from kubernetes.dynamic.exceptions import (
    DynamicApiError,
    ResourceNotFoundError,
    ResourceNotUniqueError,
)
from urllib3.exceptions import HTTPError

from kspipe.errors import StoreError
from kspipe.schema import ResourceSchema

LOGGER = logging.getLogger("kspipe.cluster")

_T = TypeVar("_T")


class ResourceClient(Protocol):
    def list(
        self,
        schema: ResourceSchema,
        namespace: str | None = None,
        label_selector: str | None = None,
    ) -> list[dict[str, Any]]:
        ...

    def get(self, schema: ResourceSchema, namespace: str, name: str) -> dict[str, Any]:
        ...

    def update(
        self,
        schema: ResourceSchema,
        namespace: str,
        instance: dict[str, Any],
    ) -> dict[str, Any]:
        ...

    def delete(self, schema: ResourceSchema, namespace: str, name: str) -> None:
        ...


class KubernetesResourceClient:
    """Thin wrapper around the dynamic client for untyped resources."""

    def __init__(self, dynamic: DynamicClient) -> None:
        self._dynamic = dynamic

    def list(
        self,
        schema: ResourceSchema,
        namespace: str | None = None,
        label_selector: str | None = None,
    ) -> list[dict[str, Any]]:
        api = self._resource(schema)
        kwargs: dict[str, Any] = {}
        if namespace:
            kwargs["namespace"] = namespace
        if label_selector:
            kwargs["label_selector"] = label_selector
        payload = _call_api(f"list {schema}", lambda: api.get(**kwargs).to_dict())
        return list(payload.get("items") or [])

    def get(self, schema: ResourceSchema, namespace: str, name: str) -> dict[str, Any]:
        api = self._resource(schema)
        return _call_api(
            f"get {schema} {namespace}/{name}",
            lambda: api.get(name=name, namespace=namespace).to_dict(),
        )

    def update(
        self,
        schema: ResourceSchema,
        namespace: str,
        instance: dict[str, Any],
    ) -> dict[str, Any]:
        api = self._resource(schema)
        name = (instance.get("metadata") or {}).get("name")
        return _call_api(
            f"update {schema} {namespace}/{name}",
            lambda: api.replace(body=instance, namespace=namespace).to_dict(),
        )

    def delete(self, schema: ResourceSchema, namespace: str, name: str) -> None:
        api = self._resource(schema)
        _call_api(
            f"delete {schema} {namespace}/{name}",
            lambda: api.delete(name=name, namespace=namespace),
        )

    def _resource(self, schema: ResourceSchema) -> Any:
        try:
            return _call_api(
                f"discover {schema}",
                lambda: self._dynamic.resources.get(
                    api_version=schema.api_version,
                    name=schema.resource,
                ),
            )
        except (ResourceNotFoundError, ResourceNotUniqueError) as exc:
            raise StoreError(
                f"resource type {schema} ({schema.api_version}) is not served by the cluster"
            ) from exc


def _call_api(action: str, fn: Callable[[], _T]) -> _T:
    LOGGER.debug("kubernetes call action=%s", action)
    try:
        return fn()
    except (DynamicApiError, ApiException) as exc:
        status = getattr(exc, "status", None)
        LOGGER.debug("kubernetes call failed action=%s status=%s", action, status)
        raise StoreError(_describe_api_error(exc), status=status) from exc
    except HTTPError as exc:
        raise StoreError(f"cannot reach the cluster: {exc}") from exc


def _describe_api_error(exc: Exception) -> str:
    summary = getattr(exc, "summary", None)
    if callable(summary):
        return str(summary())
    reason = getattr(exc, "reason", None)
    status = getattr(exc, "status", None)
    if reason and status:
        return f"{status} {reason}"
    return str(exc)


def build_resource_client(
    *,
    kubeconfig: Path | None = None,
    context: str | None = None,
) -> KubernetesResourceClient:
    """Load kubeconfig (or in-cluster config) and wrap a dynamic client.

    This is the single place where cluster credentials are loaded.
    """

    try:
        _load_credentials(kubeconfig=kubeconfig, context=context)
    except config.ConfigException as exc:
        raise StoreError(f"cannot load cluster credentials: {exc}") from exc

    dynamic = _call_api("discover api groups", lambda: DynamicClient(client.ApiClient()))
    return KubernetesResourceClient(dynamic)


def _load_credentials(*, kubeconfig: Path | None, context: str | None) -> None:
    try:
        config.load_kube_config(
            config_file=str(kubeconfig) if kubeconfig else None,
            context=context,
        )
    except config.ConfigException:
        if kubeconfig or context:
            raise
        LOGGER.debug("kubeconfig unavailable; falling back to in-cluster config")
        config.load_incluster_config()
