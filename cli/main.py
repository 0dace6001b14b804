"""faqsmith CLI: entry-point for crawling, generating and managing FAQs.

Usage:
    python cli/main.py --help

Command groups:
    db        → database initialisation
    crawl     → fetch a page and print its extracted content
    generate  → generate FAQs from a URL (stored) or raw text (printed)
    faqs      → list, publish and export stored FAQs
    serve     → run the HTTP API
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from faqsmith.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import json
from typing import Optional

import typer

from faqsmith.config import settings
from faqsmith.db import faqs as faq_store
from faqsmith.db import get_connection, init_db
from faqsmith.errors import FaqsmithError
from faqsmith.faq import FAQSynthesizer, SynthesizerConfig
from faqsmith.log import configure_logging
from faqsmith.pipeline import crawl, export_faqs_csv, export_faqs_json, generate_for_url

app = typer.Typer(
    name="faqsmith",
    help="Turn web pages into reviewed, exportable FAQs.",
    no_args_is_help=True,
)


@app.callback()
def main(
    log_level: str = typer.Option(settings.log_level, "--log-level", help="Logging level."),
) -> None:
    configure_logging(log_level)


def _fail(prefix: str, exc: FaqsmithError) -> None:
    typer.echo(f"[{prefix}] ✗ {exc.detail}", err=True)
    raise typer.Exit(1)


# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Initialise the SQLite database (create tables if they do not exist)."""
    conn = get_connection()
    init_db(conn)
    conn.close()
    typer.echo(f"[db init] Database ready at {settings.db_path}")


# ---------------------------------------------------------------------------
# Crawl
# ---------------------------------------------------------------------------
@app.command("crawl")
def crawl_cmd(
    url: str = typer.Argument(..., help="URL to crawl (scheme defaults to https)."),
    show_text: bool = typer.Option(False, "--text", help="Print the cleaned text."),
) -> None:
    """Crawl a URL, record it, and print a summary of the extracted content."""
    conn = get_connection()
    init_db(conn)
    typer.echo(f"[crawl] Fetching {url!r} …")
    try:
        doc, _page = crawl(conn, url)
    except FaqsmithError as exc:
        _fail("crawl", exc)
    finally:
        conn.close()

    typer.echo(f"[crawl] Title      : {doc.title}")
    typer.echo(f"[crawl] Headings   : {doc.metadata.total_headings}")
    typer.echo(f"[crawl] Paragraphs : {doc.metadata.total_paragraphs}")
    typer.echo(f"[crawl] Characters : {doc.metadata.text_length}")
    if show_text:
        typer.echo("")
        typer.echo(doc.cleaned_text)


# ---------------------------------------------------------------------------
# Generate
# ---------------------------------------------------------------------------
@app.command("generate")
def generate_cmd(
    url: Optional[str] = typer.Option(None, help="Crawl this URL and store drafts."),
    text: Optional[str] = typer.Option(None, help="Generate from this text (not stored)."),
    count: int = typer.Option(5, help="Number of FAQs (clamped to 5–10)."),
) -> None:
    """Generate FAQs from a URL or from raw text."""
    if bool(url) == bool(text):
        typer.echo("[generate] Pass exactly one of --url or --text.", err=True)
        raise typer.Exit(1)

    try:
        synthesizer = FAQSynthesizer(SynthesizerConfig.from_settings(settings))
    except FaqsmithError as exc:
        _fail("generate", exc)

    if text:
        try:
            items = synthesizer.generate(text, count)
        except FaqsmithError as exc:
            _fail("generate", exc)
        typer.echo(json.dumps([item.to_dict() for item in items], indent=2))
        return

    conn = get_connection()
    init_db(conn)
    typer.echo(f"[generate] Crawling {url!r} and generating {count} FAQs …")
    try:
        _page, records = generate_for_url(conn, url, synthesizer, count)
    except FaqsmithError as exc:
        _fail("generate", exc)
    finally:
        conn.close()

    for record in records:
        typer.echo(f"  {record.id}  Q: {record.question}")
    typer.echo(f"[generate] Stored {len(records)} draft FAQ(s).")


# ---------------------------------------------------------------------------
# FAQ management
# ---------------------------------------------------------------------------
faqs_app = typer.Typer(help="Manage stored FAQs.", no_args_is_help=True)
app.add_typer(faqs_app, name="faqs")


@faqs_app.command("list")
def faqs_list(
    status: Optional[str] = typer.Option(None, help="Filter: draft | published."),
) -> None:
    """List stored FAQs, newest first."""
    conn = get_connection()
    init_db(conn)
    try:
        records = faq_store.list_faqs(conn, status=status)
    except ValueError as exc:
        typer.echo(f"[faqs list] {exc}", err=True)
        raise typer.Exit(1)
    finally:
        conn.close()

    if not records:
        typer.echo("[faqs list] No FAQs found.")
        return
    for r in records:
        typer.echo(f"  {r.id}  [{r.status}]  {r.question!r}")


@faqs_app.command("publish")
def faqs_publish(faq_id: str = typer.Argument(..., help="FAQ id.")) -> None:
    """Mark a FAQ as published."""
    conn = get_connection()
    init_db(conn)
    try:
        record = faq_store.publish_faq(conn, faq_id)
    except LookupError:
        typer.echo(f"[faqs publish] FAQ not found: {faq_id}", err=True)
        raise typer.Exit(1)
    finally:
        conn.close()
    typer.echo(f"[faqs publish] Published {record.id}")


@faqs_app.command("export")
def faqs_export(
    format: str = typer.Option("json", "--format", help="json | csv"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to file."),
) -> None:
    """Export published FAQs as JSON or CSV."""
    if format not in ("json", "csv"):
        typer.echo(f"[faqs export] Unknown format {format!r}. Use: json | csv", err=True)
        raise typer.Exit(1)

    conn = get_connection()
    init_db(conn)
    try:
        records = faq_store.list_faqs(conn, status="published")
    finally:
        conn.close()

    if format == "csv":
        payload = export_faqs_csv(records)
    else:
        payload = json.dumps(export_faqs_json(records), indent=2)

    if output is None:
        typer.echo(payload)
    else:
        output.write_text(payload, encoding="utf-8")
        typer.echo(f"[faqs export] Wrote {len(records)} FAQ(s) to {output}")


# ---------------------------------------------------------------------------
# Serve
# ---------------------------------------------------------------------------
@app.command("serve")
def serve_cmd(
    host: str = typer.Option("127.0.0.1", help="Bind address."),
    port: int = typer.Option(8000, help="Bind port."),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes."),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("faqsmith.api.app:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
