"""Keepmark CLI — run the server and manage bookmarks from a terminal.

Usage:
    keepmark serve                                 # Run the API with uvicorn
    keepmark init-db                               # Create tables (dev/SQLite)
    keepmark signup alice@test.io                  # Create an account, print a token
    keepmark signin alice@test.io                  # Sign in, print a token
    export KEEPMARK_TOKEN=<token>
    keepmark list                                  # Your bookmarks
    keepmark add "Docs" https://docs.python.org    # Save a bookmark
    keepmark show 42                               # One bookmark
    keepmark rm 42                                 # Delete a bookmark
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional

import click
import httpx

from keepmark import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("KEEPMARK_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Keepmark backend."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), timeout=30.0, headers=headers)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _token_from_ctx(token: Optional[str]) -> str:
    """Resolve the access token from --token or KEEPMARK_TOKEN env var."""
    tok = token or os.environ.get("KEEPMARK_TOKEN")
    if not tok:
        click.secho(
            "Error: --token required (or set KEEPMARK_TOKEN env var)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return tok


def _check(r: httpx.Response) -> None:
    """Exit with the API's error message on a non-2xx response."""
    if r.is_success:
        return
    try:
        message = r.json().get("message", r.text)
    except ValueError:
        message = r.text
    click.secho(f"Error ({r.status_code}): {message}", fg="red", err=True)
    sys.exit(1)


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _print_bookmark_line(b: dict) -> None:
    click.echo(f"  #{b['id']:<5d} {b['title'][:40]:40s}  {b['link']}")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="keepmark")
def main():
    """Keepmark — personal bookmarks API and client."""


# ---------------------------------------------------------------------------
# Server-side commands
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default from settings)")
@click.option("--port", type=int, default=None, help="Port (default from settings)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server with uvicorn."""
    import uvicorn

    from keepmark.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "keepmark.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command("init-db")
def init_db():
    """Create all tables from the ORM models (use Alembic in production)."""
    from keepmark.config import get_settings

    _run(_init_db_impl(get_settings().database_url))
    click.secho("Database schema created", fg="green")


async def _init_db_impl(database_url: str):
    from keepmark.config import Settings
    from keepmark.db.engine import build_engine
    from keepmark.db.models import Base

    engine = build_engine(Settings(database_url=database_url))
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()


# ---------------------------------------------------------------------------
# keepmark signup / signin
# ---------------------------------------------------------------------------


@main.command()
@click.argument("email")
@click.password_option()
def signup(email: str, password: str):
    """Create an account and print its access token."""
    _run(_auth_impl("/auth/signup", email, password))


@main.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True)
def signin(email: str, password: str):
    """Sign in and print an access token."""
    _run(_auth_impl("/auth/signin", email, password))


async def _auth_impl(path: str, email: str, password: str):
    async with _client() as c:
        r = await c.post(path, json={"email": email, "password": password})
        _check(r)
        click.echo(r.json()["access_token"])


# ---------------------------------------------------------------------------
# keepmark list / add / show / rm
# ---------------------------------------------------------------------------


@main.command("list")
@click.option("--token", help="Access token (or set KEEPMARK_TOKEN)")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
def list_cmd(token: Optional[str], as_json: bool):
    """List your bookmarks."""
    _run(_list_impl(_token_from_ctx(token), as_json))


async def _list_impl(token: str, as_json: bool):
    async with _client(token) as c:
        r = await c.get("/bookmarks")
        _check(r)
        bookmarks = r.json()

    if as_json:
        click.echo(_pretty_json(bookmarks))
        return
    if not bookmarks:
        click.echo("No bookmarks yet.")
        return
    click.secho(f"Bookmarks ({len(bookmarks)}):", bold=True)
    for b in bookmarks:
        _print_bookmark_line(b)


@main.command()
@click.argument("title")
@click.argument("link")
@click.option("--description", "-d", help="Optional description")
@click.option("--token", help="Access token (or set KEEPMARK_TOKEN)")
def add(title: str, link: str, description: Optional[str], token: Optional[str]):
    """Save a bookmark."""
    _run(_add_impl(_token_from_ctx(token), title, link, description))


async def _add_impl(token: str, title: str, link: str, description: Optional[str]):
    body = {"title": title, "link": link}
    if description:
        body["description"] = description
    async with _client(token) as c:
        r = await c.post("/bookmarks", json=body)
        _check(r)
        b = r.json()
    click.secho(f"Saved bookmark #{b['id']}", fg="green")


@main.command()
@click.argument("bookmark_id", type=int)
@click.option("--token", help="Access token (or set KEEPMARK_TOKEN)")
def show(bookmark_id: int, token: Optional[str]):
    """Show one bookmark as JSON."""
    _run(_show_impl(_token_from_ctx(token), bookmark_id))


async def _show_impl(token: str, bookmark_id: int):
    async with _client(token) as c:
        r = await c.get(f"/bookmarks/{bookmark_id}")
        _check(r)
        click.echo(_pretty_json(r.json()))


@main.command()
@click.argument("bookmark_id", type=int)
@click.option("--token", help="Access token (or set KEEPMARK_TOKEN)")
def rm(bookmark_id: int, token: Optional[str]):
    """Delete a bookmark."""
    _run(_rm_impl(_token_from_ctx(token), bookmark_id))


async def _rm_impl(token: str, bookmark_id: int):
    async with _client(token) as c:
        r = await c.delete(f"/bookmarks/{bookmark_id}")
        _check(r)
    click.secho(f"Deleted bookmark #{bookmark_id}", fg="green")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
