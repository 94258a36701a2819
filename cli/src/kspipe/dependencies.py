from __future__ import annotations

import click

from kspipe.cluster import ResourceClient, build_resource_client
from kspipe.config import KspipeSettings
from kspipe.executor import OperationExecutor, Output
from kspipe.locator import ResourceLocator
from kspipe.materializer import ResourceMaterializer
from kspipe.namespaces import NamespaceEnumerator
from kspipe.prompts import ConsolePrompter, Prompter


def build_client(settings: KspipeSettings) -> ResourceClient:
    return build_resource_client(kubeconfig=settings.kubeconfig, context=settings.context)


def build_namespace_enumerator(
    settings: KspipeSettings,
    client: ResourceClient,
) -> NamespaceEnumerator:
    return NamespaceEnumerator(
        client,
        label_selector=settings.namespace_label_selector,
        schema=settings.namespace_schema(),
    )


def build_executor(
    settings: KspipeSettings,
    *,
    client: ResourceClient | None = None,
    prompter: Prompter | None = None,
    output: Output = click.echo,
) -> OperationExecutor:
    resource_client = client if client is not None else build_client(settings)
    operator_prompter = prompter if prompter is not None else ConsolePrompter(editor=settings.editor)
    pipeline_schema = settings.pipeline_schema()

    locator = ResourceLocator(
        resource_client,
        operator_prompter,
        build_namespace_enumerator(settings, resource_client),
        schema=pipeline_schema,
    )
    return OperationExecutor(
        locator,
        ResourceMaterializer(resource_client, schema=pipeline_schema),
        operator_prompter,
        output=output,
    )
