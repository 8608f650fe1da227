"""apidiff compare command - diff two API surfaces."""

from pathlib import Path

import click
from pydantic import ValidationError

from apidiff.cli.exit_codes import ExitCode, exit_code_for_error, exit_code_for_result
from apidiff.compare import build_comparer
from apidiff.config import ComparisonConfig, load_config
from apidiff.core.errors import ConfigError
from apidiff.core.logging import clear_run_id, configure_logging, get_logger, set_run_id
from apidiff.report import ReportGenerator, default_formatters
from apidiff.surface import load_surface

log = get_logger(__name__)


def apply_cli_overrides(
    config: ComparisonConfig,
    *,
    namespaces: tuple[str, ...] = (),
    exclude_patterns: tuple[str, ...] = (),
    output_format: str | None = None,
    output_file: Path | None = None,
    no_fail_on_breaking: bool = False,
) -> ComparisonConfig:
    """Layer command-line options over a loaded configuration.

    The merged result is validated again, so blank filters given on the
    command line fail the same way they would in a config file.
    """
    data = config.model_dump()
    data["filters"]["include_namespaces"].extend(namespaces)
    data["exclusions"]["excluded_type_patterns"].extend(exclude_patterns)
    if output_format is not None:
        data["output_format"] = output_format
    if output_file is not None:
        data["output_path"] = str(output_file)
    if no_fail_on_breaking:
        data["fail_on_breaking_changes"] = False
    try:
        return ComparisonConfig.model_validate(data)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e


def run_comparison(
    baseline: Path,
    candidate: Path,
    config: ComparisonConfig,
    *,
    color: bool = True,
) -> ExitCode:
    """Load both surfaces, compare them and emit the report."""
    log.info("surface_loading", baseline=str(baseline), candidate=str(candidate))
    old_surface = load_surface(baseline, strict=False)
    new_surface = load_surface(candidate, strict=False)

    comparer = build_comparer(config)
    result = comparer.compare_assemblies(old_surface, new_surface)

    generator = ReportGenerator(default_formatters(color=color))
    if config.output_path:
        target = generator.save_report(result, config.output_format, config.output_path)
        click.echo(f"Report written to {target}", err=True)
    else:
        click.echo(generator.generate_report(result, config.output_format), nl=False)

    code = exit_code_for_result(result, fail_on_breaking=config.fail_on_breaking_changes)
    if result.has_breaking_changes:
        log.warning(
            "breaking_changes_detected",
            count=result.summary.breaking_changes_count,
            exit_code=int(code),
        )
    return code


@click.command()
@click.argument("baseline", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("candidate", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="JSON or YAML comparison config",
)
@click.option(
    "-o",
    "--output",
    "output_format",
    type=click.Choice(["console", "json", "markdown", "html"], case_sensitive=False),
    default=None,
    help="Report format (default: from config, else console)",
)
@click.option(
    "--output-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the report to a file instead of stdout",
)
@click.option(
    "-f",
    "--filter",
    "namespaces",
    multiple=True,
    help="Only compare types in this namespace (repeatable)",
)
@click.option(
    "-e",
    "--exclude",
    "exclude_patterns",
    multiple=True,
    help="Exclude types matching this wildcard pattern (repeatable)",
)
@click.option("--no-color", is_flag=True, help="Disable colored console output")
@click.option(
    "--no-fail-on-breaking",
    is_flag=True,
    help="Exit 0 even when breaking changes are detected",
)
@click.pass_context
def compare_command(
    ctx: click.Context,
    baseline: Path,
    candidate: Path,
    config_path: Path | None,
    output_format: str | None,
    output_file: Path | None,
    namespaces: tuple[str, ...],
    exclude_patterns: tuple[str, ...],
    no_color: bool,
    no_fail_on_breaking: bool,
) -> None:
    """Compare the API surface of BASELINE against CANDIDATE.

    Both arguments are surface documents (JSON or YAML) describing the
    exported types of one build.
    """
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    set_run_id()
    try:
        config = load_config(config_path)
        config = apply_cli_overrides(
            config,
            namespaces=namespaces,
            exclude_patterns=exclude_patterns,
            output_format=output_format.lower() if output_format else None,
            output_file=output_file,
            no_fail_on_breaking=no_fail_on_breaking,
        )
        if not verbose:
            configure_logging(config=config.logging)
        log.debug("compare_started", config=str(config_path) if config_path else None)
        code = run_comparison(baseline, candidate, config, color=not no_color)
    except Exception as e:
        code = exit_code_for_error(e)
        log.error("compare_failed", error=str(e), exit_code=int(code))
        click.echo(f"Error: {e}", err=True)
    finally:
        clear_run_id()

    ctx.exit(int(code))
