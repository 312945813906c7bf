"""CLI interface for templint."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from templint.config import LintSettings, RulesSettings, SyntaxSettings, get_settings, set_settings
from templint.formatters import format_as_json, format_as_sarif, format_as_text
from templint.models.diagnostic import Diagnostic, LintStatus, Severity
from templint.models.lint import LintRunResult
from templint.pipeline.categories import describe_tree
from templint.pipeline.parse import read_template
from templint.pipeline.pipeline import create_environment, run_pipeline
from templint.pipeline.rules import RuleConfigurationError
from templint.pipeline.rules_factory import build_rule_table_from_settings, describe_rule_table

console = Console()
log_console = Console(stderr=True)

EXIT_PASSED = 0
EXIT_WARNING = 1
EXIT_FATAL = 2

_SEVERITY_STYLES = {
    Severity.LOG: "dim",
    Severity.WARN: "yellow",
    Severity.FATAL: "bold red",
}


def setup_logging(log_level: str) -> None:
    """Configure logging with rich handler."""
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[RichHandler(console=log_console, rich_tracebacks=True)],
    )


def _display_diagnostic(diagnostic: Diagnostic) -> None:
    style = _SEVERITY_STYLES[diagnostic.severity]
    line = diagnostic.line if diagnostic.line is not None else "?"
    console.print(
        f"  [{style}]{diagnostic.severity.label}[/{style}] line {line} "
        f"[cyan]{escape(diagnostic.rule)}[/cyan] {escape(diagnostic.message)}"
    )
    if diagnostic.source:
        console.print(f"    [dim]{escape(diagnostic.source)}[/dim]")


def display_reports(result: LintRunResult) -> None:
    """Display every report that recorded something, grouped by document."""
    reports = [report for report in result.reports if report.diagnostics]
    if not reports:
        console.print("\n[green]No lint findings.[/green]")
        return

    for report in reports:
        console.print(f"\n[bold]{escape(report.filename)}[/bold] ({report.status.value})")
        for diagnostic in [*report.logs, *report.failures]:
            _display_diagnostic(diagnostic)


def display_failed_files(result: LintRunResult) -> None:
    """Display templates that could not be linted."""
    if not result.failed_files:
        return

    console.print("\n[bold red]Failed Files:[/bold red]")
    for file_path, error in result.failed_files.items():
        console.print(f"  [red]✗[/red] {file_path}")
        console.print(f"    [dim]{escape(error)}[/dim]")


def display_summary_table(result: LintRunResult) -> None:
    """Display a summary of document outcomes."""
    table = Table(title="\n[bold cyan]Summary[/bold cyan]", show_header=True, header_style="bold")
    table.add_column("Status", style="cyan")
    table.add_column("Documents", justify="right")

    for status in LintStatus:
        table.add_row(status.value, str(result.count(status)))
    table.add_row("unreadable files", str(result.failure_count))

    console.print(table)


def _write_output(text: str, output_path: Path | None) -> None:
    """Write output text to file or stdout."""
    if output_path:
        output_path.write_text(text)
    else:
        print(text)


def _handle_output(result: LintRunResult, output_format: str, output_path: Path | None) -> None:
    """Handle formatting and outputting results."""
    fmt = output_format.lower()
    if fmt == "sarif":
        _write_output(format_as_sarif(result, pretty=True), output_path)
    elif fmt == "json":
        _write_output(format_as_json(result, pretty=True), output_path)
    elif fmt == "text":
        _write_output(format_as_text(result), output_path)
    else:  # console
        display_reports(result)
        display_failed_files(result)
        display_summary_table(result)
        console.print()


def exit_code_for(result: LintRunResult) -> int:
    """0 when everything passed, 1 for warnings only, 2 for fatals or unreadable files."""
    if result.failed_files or result.status is LintStatus.FATAL:
        return EXIT_FATAL
    if result.status is LintStatus.WARNING:
        return EXIT_WARNING
    return EXIT_PASSED


def _parse_patterns(pattern_string: str) -> list[str]:
    """Parse comma-separated pattern string into list."""
    return [p.strip() for p in pattern_string.split(",") if p.strip()]


def _configure_settings(
    ctx: click.Context,
    mode: str = "block",
    ignore: str = "",
    ignore_files: str = "**/.templintignore",
    trim_blocks: bool = False,
    lstrip_blocks: bool = False,
) -> LintSettings:
    """Configure lint settings from the group options and the command options."""
    settings = LintSettings(
        rules=RulesSettings(rules_dir=ctx.obj["rules_dir"], app=ctx.obj["app"]),
        syntax=SyntaxSettings(trim_blocks=trim_blocks, lstrip_blocks=lstrip_blocks),
        mode=mode,
        ignore_patterns=_parse_patterns(ignore),
        ignore_file_patterns=_parse_patterns(ignore_files),
    )
    set_settings(settings)
    return settings


def _abort_on_rule_error(error: RuleConfigurationError) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    sys.exit(EXIT_FATAL)


@click.group(invoke_without_command=True)
@click.pass_context
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="WARNING",
    help="Set the logging level",
)
@click.option(
    "--rules-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory of rule modules, loaded in file name order",
)
@click.option(
    "--app",
    type=str,
    default=None,
    help="Application name made available to rules",
)
def main(ctx: click.Context, log_level: str, rules_dir: Path | None, app: str | None) -> None:
    """Rule-based static analysis for Jinja2 templates."""
    setup_logging(log_level.upper())

    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    ctx.obj["rules_dir"] = rules_dir
    ctx.obj["app"] = app

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.pass_context
@click.option(
    "--mode",
    type=click.Choice(["block", "template"], case_sensitive=False),
    default="block",
    help="Lint {% lint %} blocks only, or whole templates (default: block)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["console", "text", "json", "sarif"], case_sensitive=False),
    default="console",
    help="Output format (default: console)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output file path (default: stdout)",
)
@click.option(
    "--ignore",
    type=str,
    default="",
    help="Comma-separated list of glob patterns to ignore files (e.g., 'vendor/**,*.txt')",
)
@click.option(
    "--ignore-files",
    type=str,
    default="**/.templintignore",
    help="Comma-separated list of glob patterns to find ignore files (default: '**/.templintignore')",
)
@click.option("--trim-blocks", is_flag=True, default=False, help="Parse with trim_blocks enabled")
@click.option("--lstrip-blocks", is_flag=True, default=False, help="Parse with lstrip_blocks enabled")
def lint(
    ctx: click.Context,
    path: Path,
    mode: str,
    output_format: str,
    output: Path | None,
    ignore: str,
    ignore_files: str,
    trim_blocks: bool,
    lstrip_blocks: bool,
) -> None:
    """Lint a template or a directory of templates."""
    _configure_settings(ctx, mode.lower(), ignore, ignore_files, trim_blocks, lstrip_blocks)

    try:
        if output_format.lower() == "console":
            console.print(f"\nLinting: [cyan]{path}[/cyan]\n")
            with console.status("[bold green]Running rules..."):
                result = run_pipeline(path)
        else:
            result = run_pipeline(path)
    except RuleConfigurationError as e:
        _abort_on_rule_error(e)
        return

    _handle_output(result, output_format, output)
    sys.exit(exit_code_for(result))


@main.command()
@click.pass_context
def rules(ctx: click.Context) -> None:
    """List the loaded rules and the categories they handle."""
    settings = _configure_settings(ctx)
    try:
        rule_table = build_rule_table_from_settings(settings)
    except RuleConfigurationError as e:
        _abort_on_rule_error(e)
        return

    if rule_table.is_empty:
        console.print("[yellow]No rules loaded.[/yellow]")
        return

    console.print(f"\n[bold blue]Rules ({len(rule_table.rule_names)}):[/bold blue]\n")
    for rule_name, keys in describe_rule_table(rule_table).items():
        console.print(f"  [cyan]•[/cyan] {rule_name}")
        console.print(f"    [dim]{', '.join(keys) or 'no callbacks'}[/dim]")
    console.print()


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def inspect(ctx: click.Context, file: Path) -> None:
    """Show the categories every node of a template matches.

    Rules key their callbacks by these category names.
    """
    from jinja2 import TemplateSyntaxError

    from templint.pipeline.rules import build_rule_table

    _configure_settings(ctx, mode="template")
    environment = create_environment(get_settings(), build_rule_table([]))
    try:
        tree = environment.parse(read_template(file), file.name, str(file))
    except (ValueError, TemplateSyntaxError) as e:
        console.print(f"[bold red]Error:[/bold red] Failed to parse template: {escape(str(e))}")
        sys.exit(EXIT_FATAL)

    for line in describe_tree(tree):
        console.print(escape(line), highlight=False)


if __name__ == "__main__":
    main()
