from __future__ import annotations

from pathlib import Path

import typer

app = typer.Typer(name="testsupport", help="Recording assertions and polling expectations")


@app.command()
def validate(
    config: str = typer.Argument(help="Path to testsupport.yaml"),
):
    """Load a config file and print the resolved settings."""
    import yaml
    from pydantic import ValidationError

    from testsupport.config import load_config

    config_path = Path(config)
    if not config_path.exists():
        typer.echo(f"Error: config file not found: {config}", err=True)
        raise typer.Exit(1)

    try:
        support_config = load_config(config_path)
    except (ValidationError, ValueError, yaml.YAMLError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(yaml.safe_dump(support_config.model_dump(), sort_keys=False).rstrip())


@app.command()
def schema(
    out: str = typer.Option(
        "schemas/testsupport.schema.json", help="Output path for JSON Schema"
    ),
    doc: str | None = typer.Option(None, help="Optional output path for a Markdown summary"),
):
    """Generate JSON Schema (and optionally docs) for testsupport.yaml."""
    from testsupport.schema import write_json_schema, write_schema_doc

    out_path = Path(out)
    write_json_schema(out_path)
    typer.echo(f"Wrote schema: {out_path}")
    if doc is not None:
        doc_path = Path(doc)
        write_schema_doc(doc_path)
        typer.echo(f"Wrote docs: {doc_path}")


@app.command()
def report(
    junit: str = typer.Argument(help="Path to a junit.xml written by the pytest plugin"),
):
    """Summarize recorded failures from a JUnit XML file."""
    from testsupport.reporting.junit import summarize_junit

    junit_path = Path(junit)
    if not junit_path.exists():
        typer.echo(f"Error: junit file not found: {junit}", err=True)
        raise typer.Exit(1)

    summary = summarize_junit(junit_path)
    typer.echo(f"{summary.failed_tests}/{summary.tests} test(s) with failures")
    for test, message in summary.failures:
        typer.echo(f"  {test}: {message}")

    if summary.failed_tests:
        raise typer.Exit(1)
