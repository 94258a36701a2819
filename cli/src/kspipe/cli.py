"""Main CLI entry point for kspipe."""

import click

from .commands import pipeline
from .config import load_settings
from .logging_config import configure_logging


@click.group()
@click.version_option(version="0.1.0")
@click.pass_context
def main(ctx: click.Context):
    """kspipe - Manage KubeSphere DevOps pipelines from the terminal."""
    obj = ctx.ensure_object(dict)
    if "settings" not in obj:
        try:
            obj["settings"] = load_settings()
        except ValueError as exc:
            raise click.ClickException(f"invalid configuration: {exc}") from exc
    configure_logging(obj["settings"])


# Pipeline commands
main.add_command(pipeline.pipeline)
main.add_command(pipeline.pipeline, name="pip")


if __name__ == "__main__":
    main()
