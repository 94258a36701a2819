from __future__ import annotations

import logging

from kspipe.cluster import ResourceClient
from kspipe.errors import StoreError
from kspipe.schema import ResourceSchema, namespace_schema

LOGGER = logging.getLogger("kspipe.namespaces")


def item_name(item: dict[str, object]) -> str | None:
    metadata = item.get("metadata")
    if not isinstance(metadata, dict):
        return None
    name = metadata.get("name")
    return name if isinstance(name, str) and name else None


class NamespaceEnumerator:
    """Lists namespaces carrying the pipeline membership label."""

    def __init__(
        self,
        client: ResourceClient,
        *,
        label_selector: str,
        schema: ResourceSchema | None = None,
    ) -> None:
        self._client = client
        self._label_selector = label_selector
        self._schema = schema or namespace_schema()

    def list_namespaces(self) -> list[str]:
        # Failures collapse into "no eligible namespaces".
        try:
            items = self._client.list(self._schema, label_selector=self._label_selector)
        except StoreError:
            LOGGER.warning(
                "namespace listing failed selector=%s",
                self._label_selector,
                exc_info=True,
            )
            return []
        names = [name for name in (item_name(item) for item in items) if name]
        LOGGER.debug("namespaces listed selector=%s count=%s", self._label_selector, len(names))
        return names
