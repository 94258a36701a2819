"""Turns positional arguments into a namespace plus the pipeline names to act on."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from kspipe.cluster import ResourceClient
from kspipe.errors import InputAborted, NotFoundError, ResolutionError, StoreError
from kspipe.namespaces import NamespaceEnumerator, item_name
from kspipe.prompts import Prompter
from kspipe.schema import ResourceSchema

LOGGER = logging.getLogger("kspipe.locator")

NAMESPACE_PROMPT = "Please select the namespace which you want to check:"
PIPELINE_PROMPT = "Please select the pipelines that you want to check:"


@dataclass(frozen=True)
class Target:
    namespace: str
    names: list[str] = field(default_factory=list)


class ResourceLocator:
    def __init__(
        self,
        client: ResourceClient,
        prompter: Prompter,
        namespaces: NamespaceEnumerator,
        *,
        schema: ResourceSchema,
    ) -> None:
        self._client = client
        self._prompter = prompter
        self._namespaces = namespaces
        self._schema = schema

    def resolve(self, args: Sequence[str], *, confirm: bool = True) -> Target:
        """Resolve `(namespace, names)` from zero, one, or many arguments.

        Two or more arguments are taken literally. With fewer, the missing
        parts are listed from the cluster and, when `confirm` is set, the
        operator picks the pipelines to act on.
        """
        if len(args) >= 2:
            return Target(namespace=args[0], names=list(args[1:]))

        namespace = args[0] if args else self._select_namespace()
        candidates = self.list_pipelines(namespace)
        if not confirm:
            return Target(namespace=namespace, names=candidates)
        if not candidates:
            LOGGER.info("no pipelines found namespace=%s", namespace)
            return Target(namespace=namespace)
        return Target(
            namespace=namespace,
            names=self._prompter.select_many(PIPELINE_PROMPT, candidates),
        )

    def list_pipelines(self, namespace: str) -> list[str]:
        try:
            items = self._client.list(self._schema, namespace=namespace)
        except StoreError as exc:
            raise ResolutionError(
                f"cannot list pipelines in namespace {namespace}, error: {exc}"
            ) from exc
        return [name for name in (item_name(item) for item in items) if name]

    def _select_namespace(self) -> str:
        candidates = self._namespaces.list_namespaces()
        if not candidates:
            raise NotFoundError("no pipeline namespace found in this cluster")
        namespace = self._prompter.select_one(NAMESPACE_PROMPT, candidates)
        if not namespace:
            raise InputAborted("no namespace selected")
        return namespace
