"""Pipeline commands for the kspipe CLI."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

import click
from click.shell_completion import CompletionItem
from rich.console import Console

from ..config import KspipeSettings, load_settings
from ..dependencies import build_client, build_executor, build_namespace_enumerator
from ..errors import InputAborted, KspipeError
from ..executor import OperationExecutor, OperationReport

LOGGER = logging.getLogger("kspipe.commands")
LIST_ARGS_KEY = "kspipe.pipeline_args"

console = Console(stderr=True)


class PipelineGroup(click.Group):
    """Group whose bare invocation takes namespace/pipeline arguments.

    Anything that is not a subcommand name is handed to the group callback,
    so `kspipe pipeline team-a` lists the pipelines of `team-a`.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        if args and args[0] not in self.commands and not args[0].startswith("-"):
            ctx.meta[LIST_ARGS_KEY] = list(args)
            args = []
        return super().parse_args(ctx, args)


def _settings(ctx: click.Context) -> KspipeSettings:
    obj = ctx.ensure_object(dict)
    settings = obj.get("settings")
    if settings is None:
        settings = load_settings()
        obj["settings"] = settings
    return settings


def _run(
    ctx: click.Context,
    args: Sequence[str],
    operation: Callable[[OperationExecutor], Callable[[Sequence[str]], OperationReport]],
) -> None:
    obj = ctx.ensure_object(dict)
    try:
        executor = build_executor(
            _settings(ctx),
            client=obj.get("client"),
            prompter=obj.get("prompter"),
        )
        operation(executor)(list(args))
    except InputAborted:
        console.print("[yellow]Aborted.[/yellow]")
        ctx.exit(1)
    except KspipeError as exc:
        LOGGER.debug("command failed", exc_info=True)
        console.print(f"Error: {exc}", style="red", markup=False, highlight=False, soft_wrap=True)
        ctx.exit(1)


def complete_namespace(ctx: click.Context, param: click.Parameter, incomplete: str) -> list[CompletionItem]:
    """Suggest pipeline namespaces for the first positional argument."""
    if ctx.params.get(param.name or "args"):
        return []
    obj: dict[str, Any] = ctx.find_root().ensure_object(dict)
    try:
        settings = _settings(ctx)
        client = obj.get("client") or build_client(settings)
    except (KspipeError, ValueError):
        return []
    namespaces = build_namespace_enumerator(settings, client).list_namespaces()
    return [CompletionItem(name) for name in namespaces if name.startswith(incomplete)]


@click.group(cls=PipelineGroup, invoke_without_command=True)
@click.pass_context
def pipeline(ctx: click.Context):
    """List pipelines: [NAMESPACE [PIPELINE...]]."""
    if ctx.invoked_subcommand is not None:
        return
    _run(ctx, ctx.meta.get(LIST_ARGS_KEY, []), lambda executor: executor.list_names)


@click.command()
@click.argument("args", nargs=-1, shell_complete=complete_namespace)
@click.pass_context
def view(ctx: click.Context, args: tuple[str, ...]):
    """Print pipelines as YAML: [NAMESPACE [PIPELINE...]]."""
    _run(ctx, args, lambda executor: executor.view)


@click.command()
@click.argument("args", nargs=-1, shell_complete=complete_namespace)
@click.pass_context
def delete(ctx: click.Context, args: tuple[str, ...]):
    """Delete pipelines: [NAMESPACE [PIPELINE...]]."""
    _run(ctx, args, lambda executor: executor.delete)


@click.command()
@click.argument("args", nargs=-1, shell_complete=complete_namespace)
@click.pass_context
def edit(ctx: click.Context, args: tuple[str, ...]):
    """Edit pipelines in your editor and apply them: [NAMESPACE [PIPELINE...]]."""
    _run(ctx, args, lambda executor: executor.edit)


pipeline.add_command(view)
pipeline.add_command(delete)
pipeline.add_command(delete, name="del")
pipeline.add_command(delete, name="remove")
pipeline.add_command(delete, name="rm")
pipeline.add_command(edit)
pipeline.add_command(edit, name="e")
