"""SARIF (Static Analysis Results Interchange Format) formatter for templint.

SARIF is a standard format for static analysis tool output.
Specification: https://docs.oasis-open.org/sarif/sarif/v2.1.0/sarif-v2.1.0.html
"""

from sarif_pydantic import (  # type: ignore[import-untyped]
    ArtifactLocation,
    Level,
    Location,
    Message,
    PhysicalLocation,
    Region,
    ReportingDescriptor,
    Result,
    Run,
    Sarif,
    Tool,
    ToolDriver,
)

from templint import __version__
from templint.models.diagnostic import Diagnostic, Severity
from templint.models.lint import LintRunResult

_LEVELS = {
    Severity.LOG: Level.NOTE,
    Severity.WARN: Level.WARNING,
    Severity.FATAL: Level.ERROR,
}


def format_as_sarif(result: LintRunResult, *, pretty: bool = True) -> str:
    """Format lint results as SARIF JSON.

    Every diagnostic becomes a result whose ``ruleId`` is the rule module name.

    Args:
        result: The lint run result to format
        pretty: If True, format with indentation for readability

    Returns:
        SARIF-formatted JSON string
    """
    sarif_log = Sarif(
        version="2.1.0",
        schema_uri="https://json.schemastore.org/sarif-2.1.0.json",
        runs=[_create_run(result)],
    )

    if pretty:
        json_output: str = sarif_log.model_dump_json(indent=2, exclude_none=True, by_alias=True)
        return json_output
    json_output = sarif_log.model_dump_json(exclude_none=True, by_alias=True)
    return json_output


def _create_run(result: LintRunResult) -> Run:
    diagnostics = [d for report in result.reports for d in report.diagnostics]
    return Run(
        tool=_create_tool(sorted({d.rule for d in diagnostics})),
        results=[_create_result(d) for d in diagnostics],
    )


def _create_tool(rule_names: list[str]) -> Tool:
    """Create the SARIF tool descriptor, with one reporting descriptor per rule that fired."""
    return Tool(
        driver=ToolDriver(
            name="templint",
            version=__version__,
            semanticVersion=__version__,
            rules=[
                ReportingDescriptor(
                    id=name,
                    name=name,
                    shortDescription=Message(text=f"Template lint rule {name}"),
                )
                for name in rule_names
            ],
        )
    )


def _create_result(diagnostic: Diagnostic) -> Result:
    region = Region(startLine=diagnostic.line, startColumn=1) if diagnostic.line else None
    return Result(
        ruleId=diagnostic.rule,
        level=_LEVELS[diagnostic.severity],
        message=Message(text=diagnostic.message),
        locations=[
            Location(
                physicalLocation=PhysicalLocation(
                    artifactLocation=ArtifactLocation(
                        uri=diagnostic.filename,
                        uriBaseId="%SRCROOT%",
                    ),
                    region=region,
                )
            )
        ],
        properties={"severity": diagnostic.severity.value, "source": diagnostic.source},
    )
