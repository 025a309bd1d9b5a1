"""
Command line interface for the interview Q&A corpus builder.

Commands:
  interview-qa build --input docs/ --output corpus.json
  interview-qa search --corpus corpus.json middleware
"""

import asyncio
import sys

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from interview_qa import __version__
from interview_qa.config.settings import get_settings
from interview_qa.corpus.export import dump_corpus, load_corpus
from interview_qa.ingestion.extractor import RecordExtractor
from interview_qa.ingestion.loader import MarkdownLoader
from interview_qa.ingestion.pipeline import BuildResult, IngestionPipeline
from interview_qa.utils.exceptions import CorpusError, InvalidConfigurationError, get_exit_code
from interview_qa.utils.logging import setup_logging

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@click.group()
@click.version_option(version=__version__, prog_name="interview-qa")
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), default=None,
              help="Log level (default from LOG_LEVEL)")
@click.option("--log-format", type=click.Choice(["json", "console"]), default=None,
              help="Log format (default from LOG_FORMAT)")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None, log_format: str | None, no_color: bool) -> None:
    """
    Build a deduplicated Q&A corpus from Markdown interview documents.

    Examples:
      interview-qa build --input docs/ --output corpus.json
      interview-qa build --input docs/ --output corpus.jsonl --format jsonl
      interview-qa search --corpus corpus.json "event loop"
    """
    try:
        settings = get_settings()
    except ValidationError as e:
        error = InvalidConfigurationError(
            "Invalid configuration",
            details={"errors": e.error_count()},
            cause=e,
        )
        click.echo(f"Error: {error.message}\n{e}", err=True)
        ctx.exit(get_exit_code(error))
        return

    setup_logging(
        log_level=(log_level or settings.logging.log_level).upper(),
        log_format=log_format or settings.logging.log_format,
        app_name=settings.app_name,
    )

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["console"] = Console(no_color=no_color, highlight=False)
    ctx.obj["err_console"] = Console(stderr=True, no_color=no_color, highlight=False)


@cli.command()
@click.option("--input", "-i", "input_dir", required=True,
              type=click.Path(file_okay=False, path_type=str),
              help="Directory containing Markdown documents")
@click.option("--output", "-o", "output_path", required=True,
              type=click.Path(dir_okay=False, path_type=str),
              help="File to write the corpus to")
@click.option("--format", "-f", "export_format", type=click.Choice(["json", "jsonl"]), default=None,
              help="Array JSON or line-delimited JSON")
@click.option("--pattern", default=None, help="Glob pattern for input files")
@click.option("--recursive/--no-recursive", default=None, help="Search subdirectories")
@click.option("--html", "include_html", is_flag=True, default=None,
              help="Include the answer rendered as HTML")
@click.option("--workers", type=click.IntRange(1, 64), default=None,
              help="Documents processed concurrently")
@click.pass_context
def build(
    ctx: click.Context,
    input_dir: str,
    output_path: str,
    export_format: str | None,
    pattern: str | None,
    recursive: bool | None,
    include_html: bool | None,
    workers: int | None,
) -> None:
    """
    Build the corpus from a directory and write it as JSON.

    Exits with 0 on success and non-zero if the input directory cannot be
    read or the output cannot be written.
    """
    console: Console = ctx.obj["console"]
    settings = ctx.obj["settings"]

    loader = MarkdownLoader(
        encodings=settings.ingestion.encodings,
        max_file_size_mb=settings.ingestion.max_file_size_mb,
    )
    extractor = RecordExtractor(
        numbered_headings=settings.extraction.numbered_headings,
        min_heading_level=settings.extraction.min_heading_level,
        max_heading_level=settings.extraction.max_heading_level,
    )
    pipeline = IngestionPipeline(
        loader=loader,
        extractor=extractor,
        max_workers=workers or settings.ingestion.max_workers,
    )

    try:
        result = asyncio.run(
            pipeline.build_from_directory(
                input_dir,
                recursive=settings.ingestion.recursive if recursive is None else recursive,
                pattern=pattern or settings.ingestion.pattern,
            )
        )
        written = dump_corpus(
            result.corpus,
            output_path,
            format=export_format or settings.export.format,
            indent=settings.export.indent,
            include_html=include_html or settings.export.include_html,
        )
    except CorpusError as e:
        ctx.obj["err_console"].print(f"[red]Error: {escape(e.message)}[/red]")
        ctx.exit(get_exit_code(e))
        return

    _print_summary(console, result)
    console.print(f"[green]✓ Wrote {len(result.corpus)} records to {escape(str(written))}[/green]")


@cli.command()
@click.option("--corpus", "-c", "corpus_path", required=True,
              type=click.Path(dir_okay=False, path_type=str),
              help="Exported corpus file")
@click.option("--limit", "-n", type=click.IntRange(min=1), default=None,
              help="Maximum number of matches to show")
@click.option("--show-answer", is_flag=True, help="Print answers below questions")
@click.argument("keyword")
@click.pass_context
def search(
    ctx: click.Context,
    corpus_path: str,
    limit: int | None,
    show_answer: bool,
    keyword: str,
) -> None:
    """Search an exported corpus for KEYWORD in questions and answers."""
    console: Console = ctx.obj["console"]

    try:
        corpus = load_corpus(corpus_path)
    except CorpusError as e:
        ctx.obj["err_console"].print(f"[red]Error: {escape(e.message)}[/red]")
        ctx.exit(get_exit_code(e))
        return

    shown = 0
    for record in corpus.by_topic(keyword):
        if limit is not None and shown >= limit:
            break
        console.print(f"[bold]{escape(record.question)}[/bold] [dim]({escape(record.source_document)})[/dim]")
        if show_answer:
            console.print(record.answer, markup=False)
            console.print()
        shown += 1

    if not shown:
        console.print(f"[yellow]No records match '{escape(keyword)}'[/yellow]")


def _print_summary(console: Console, result: BuildResult) -> None:
    table = Table(title="Corpus build summary", show_header=False)
    table.add_column("Metric")
    table.add_column("Count", justify="right")

    labels = {
        "documents_found": "Documents found",
        "documents_loaded": "Documents loaded",
        "documents_skipped": "Documents skipped",
        "records_extracted": "Records extracted",
        "records_inserted": "Records kept",
        "duplicates_discarded": "Duplicates discarded",
    }
    summary = result.summary()
    for key, label in labels.items():
        table.add_row(label, str(summary[key]))

    console.print(table)

    for document_result in result.results:
        if not document_result.success:
            console.print(f"[yellow]{escape(str(document_result))}[/yellow]")


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("Operation interrupted by user", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
