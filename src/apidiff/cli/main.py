"""apidiff CLI - apidiff command."""

from typing import Any

import click

from apidiff import __version__
from apidiff.cli.compare import compare_command
from apidiff.cli.exit_codes import ExitCode
from apidiff.core.logging import configure_logging


class ApiDiffGroup(click.Group):
    """Command group that reports usage errors with the invalid-arguments exit code."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = ExitCode.INVALID_ARGUMENTS
            raise

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = ExitCode.INVALID_ARGUMENTS
            raise


@click.group(cls=ApiDiffGroup)
@click.version_option(version=__version__, prog_name="apidiff")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """apidiff - Detect breaking changes between two versions of an API surface."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(compare_command, name="compare")


if __name__ == "__main__":
    cli()
