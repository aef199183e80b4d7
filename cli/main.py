"""OG parser CLI — entry-point for all operations.

Usage:
    python cli/main.py --help

Command groups:
    db      → primary store helpers
    scrape  → fetch one URL and show its Open Graph tags
    run     → one pipeline run over the recent posts
    watch   → run on a fixed interval until interrupted
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from ogparser.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from typing import Optional

import typer

from ogparser.config import Settings, load_settings
from ogparser.db import get_connection, init_db
from ogparser.db.posts import insert_post
from ogparser.exceptions import BootstrapError
from ogparser.logging_config import configure_logging

app = typer.Typer(
    name="ogparser",
    help="Open Graph parser for recently published posts.",
    no_args_is_help=True,
)


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", help="JSON config file layered over the environment."
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL."),
) -> None:
    """Load settings and configure logging for every sub-command."""
    try:
        cfg = load_settings(config)
    except BootstrapError as exc:
        typer.echo(f"[config] {exc}", err=True)
        raise typer.Exit(1)
    if log_level:
        cfg.log_level = log_level
    configure_logging(cfg.log_level)
    ctx.obj = cfg


# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init(ctx: typer.Context) -> None:
    """Initialise the SQLite database (create tables if they do not exist)."""
    cfg = _settings(ctx)
    conn = get_connection(cfg.db_path)
    init_db(conn)
    conn.close()
    typer.echo(f"[db init] Database ready at {cfg.db_path}")


@db_app.command("add-post")
def db_add_post(
    ctx: typer.Context,
    url: str = typer.Option(..., help="External link of the post."),
) -> None:
    """Insert a post so the next run picks it up."""
    cfg = _settings(ctx)
    conn = get_connection(cfg.db_path)
    init_db(conn)
    try:
        post_id = insert_post(conn, url)
    finally:
        conn.close()
    typer.echo(f"[db add-post] Created post {post_id}  link={url!r}")


# ---------------------------------------------------------------------------
# Scrape command
# ---------------------------------------------------------------------------
@app.command("scrape")
def scrape(
    ctx: typer.Context,
    url: str = typer.Option(..., help="URL to scrape."),
) -> None:
    """Fetch a URL and print the Open Graph description and image."""
    from ogparser.scraper import Item, extract_preview_metadata, fetch_item

    cfg = _settings(ctx)
    typer.echo(f"[scrape] Fetching {url!r} …")
    result = fetch_item(
        Item(id=0, url=url),
        timeout=cfg.fetch_timeout,
        user_agent=cfg.user_agent,
        overrides=cfg.user_agent_overrides,
    )
    if not result.ok:
        typer.echo("[scrape] Fetch failed (empty body).")
        raise typer.Exit(1)

    metadata = extract_preview_metadata(result.body)
    typer.echo(f"[scrape] Description : {metadata.description or '(none)'}")
    typer.echo(f"[scrape] Image       : {metadata.featured_image or '(none)'}")
    typer.echo(f"[scrape] Eligible    : {'yes' if metadata.is_complete else 'no'}")


# ---------------------------------------------------------------------------
# Pipeline commands
# ---------------------------------------------------------------------------
@app.command("run")
def run(ctx: typer.Context) -> None:
    """Run the pipeline once over the recent posts."""
    from ogparser.pipeline.runner import run_once

    report = run_once(_settings(ctx))
    if report is None:
        typer.echo("[run] Run aborted, see log for details.", err=True)
        raise typer.Exit(1)
    typer.echo(
        f"[run] {report.total} post(s): {report.fetched} fetched, "
        f"{report.eligible} eligible, {report.updated} updated"
    )


@app.command("watch")
def watch(
    ctx: typer.Context,
    interval: Optional[float] = typer.Option(
        None, help="Seconds between runs (defaults to SCHEDULE_INTERVAL)."
    ),
) -> None:
    """Run the pipeline now and then on a fixed interval."""
    from ogparser.pipeline.runner import run_forever

    cfg = _settings(ctx)
    if interval is not None:
        cfg.schedule_interval = interval
    typer.echo(f"[watch] Parsing posts every {cfg.schedule_interval:g}s (Ctrl+C to stop)")
    try:
        run_forever(cfg)
    except KeyboardInterrupt:
        typer.echo("[watch] Stopped.")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
