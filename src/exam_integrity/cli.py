"""Console script for exam_integrity."""

import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .config import ConfigLoader, IntegrityConfig
from .processing import ExtractionError, extract_archive, list_files
from .submissions import create_client
from .utils import setup_logging
from .violations import (
    InMemoryKeywordStore,
    InMemoryViolationStore,
    ViolationDetector,
    YamlKeywordSource,
    sort_by_severity,
)

load_dotenv()

app = typer.Typer(help="Exam submission integrity tools.")
console = Console()

SEVERITY_STYLES = {
    "Critical": "bold red",
    "High": "red",
    "Medium": "yellow",
    "Low": "green",
}


def _load_config(config_file: Path | None) -> IntegrityConfig:
    if config_file is None:
        return IntegrityConfig()
    return ConfigLoader().load(config_file)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this file"),
):
    """Exam submission integrity tools."""
    setup_logging(level=logging.DEBUG if verbose else logging.INFO, log_file=log_file)


@app.command()
def extract(
    archive: Path = typer.Argument(..., exists=True, dir_okay=False, help="Archive to extract"),
    dest: Path = typer.Argument(..., file_okay=False, help="Destination directory"),
):
    """Extract a submission archive and list the files it produced."""
    try:
        with open(archive, "rb") as stream:
            result = extract_archive(stream, dest)
    except ExtractionError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    table = Table(title=f"{archive.name} ({result.reader})")
    table.add_column("File")
    table.add_column("Type", no_wrap=True)
    table.add_column("Size", justify="right")

    for descriptor in list_files(dest):
        table.add_row(
            str(descriptor.path.relative_to(dest)),
            descriptor.file_type.value,
            f"{descriptor.size_bytes:,}",
        )

    console.print(table)
    console.print(f"[green]Extracted {result.file_count} files[/green]")
    for name in result.skipped:
        console.print(f"[yellow]Rejected entry:[/yellow] {name}")


@app.command()
def scan(
    directory: Path = typer.Argument(..., exists=True, file_okay=False, help="Extracted submission directory"),
    exam_id: int = typer.Option(0, "--exam-id", help="Exam to compare against"),
    submission_id: int = typer.Option(0, "--submission-id", help="Submission being checked"),
    keywords: Optional[Path] = typer.Option(None, "--keywords", help="Keyword YAML file"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="Configuration YAML file"),
):
    """Screen an extracted submission directory for violations."""
    config = _load_config(config_file)

    keywords_file = keywords or config.scan.keywords_file
    keyword_source = YamlKeywordSource(keywords_file) if keywords_file else InMemoryKeywordStore()

    submissions = None
    service = config.submission_service
    if service.enabled:
        submissions = create_client(service.url, token_env_var=service.token_env_var, timeout=service.timeout)

    detector = ViolationDetector(
        keywords=keyword_source,
        store=InMemoryViolationStore(),
        submissions=submissions,
        max_content_bytes=config.scan.max_content_bytes,
    )

    files = list_files(directory)
    try:
        violations = detector.check_violations(
            submission_id,
            exam_id,
            [f.name for f in files],
            [str(f.path) for f in files],
        )
    finally:
        if submissions is not None:
            submissions.close()

    if not violations:
        console.print(f"[green]No violations found in {len(files)} files[/green]")
        return

    table = Table(title=f"Violations ({len(violations)})")
    table.add_column("Severity", no_wrap=True)
    table.add_column("Type", no_wrap=True)
    table.add_column("Description")

    for violation in sort_by_severity(violations):
        style = SEVERITY_STYLES.get(violation.severity, "")
        table.add_row(f"[{style}]{violation.severity}[/{style}]" if style else violation.severity,
                      violation.type, violation.description)

    console.print(table)
    raise typer.Exit(code=2)


if __name__ == "__main__":
    app()
