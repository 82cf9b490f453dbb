from __future__ import annotations
from contextlib import contextmanager
from typing import Iterator, Optional
import logging

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.table import Table

from .api import ApiClient
from .auth import AuthContext, provide_auth
from .cache import QueryCache
from .config import log_level
from .exceptions import RequestError
from .session import SessionStore
from .ui import ConsoleNotifier, Navigator
from .views import Dashboard, NoteEditor, format_date

app = typer.Typer(help="Jotter — notes client for a REST backend")
console = Console()


def make_http_client() -> httpx.Client:
    return httpx.Client()


def _setup_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else log_level()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@app.callback()
def _boot(
    ctx: typer.Context,
    api_url: Optional[str] = typer.Option(None, "--api-url", envvar="JOTTER_API_URL", help="backend base URL"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    _setup_logging(verbose)
    ctx.obj = {"api_url": api_url}


@contextmanager
def _client(ctx: typer.Context) -> Iterator[tuple[ApiClient, AuthContext]]:
    http = make_http_client()
    session = SessionStore()
    api = ApiClient(session, base_url=ctx.obj["api_url"], http=http)
    try:
        with provide_auth(api) as auth:
            yield api, auth
    finally:
        http.close()
        session.storage.close()


def _fail(message: str) -> None:
    console.print(f"[red]{message}[/]")
    raise typer.Exit(1)


def _require_login(auth: AuthContext) -> None:
    if not auth.is_authenticated:
        _fail("Not logged in. Run `jotter login` first.")


def _views():
    return QueryCache(), ConsoleNotifier(console), Navigator()


@app.command()
def register(
    ctx: typer.Context,
    username: str = typer.Option(..., "--username", "-u", prompt=True),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True, confirmation_prompt=True),
):
    with _client(ctx) as (_, auth):
        try:
            auth.register(username, password)
        except RequestError as e:
            _fail(e.message)
    console.print(f"[green]Registered[/] {username}. You can now log in.")


@app.command()
def login(
    ctx: typer.Context,
    username: str = typer.Option(..., "--username", "-u", prompt=True),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True),
):
    with _client(ctx) as (_, auth):
        try:
            auth.login(username, password)
        except RequestError as e:
            _fail(e.message)
        console.print(f"[green]Logged in[/] as {auth.username}")


@app.command()
def logout(ctx: typer.Context):
    with _client(ctx) as (api, _):
        cache, notifier, navigator = _views()
        Dashboard(api, cache, notifier, navigator).logout()


@app.command()
def whoami(ctx: typer.Context):
    with _client(ctx) as (_, auth):
        if not auth.is_authenticated:
            _fail("Not logged in")
        console.print(auth.username or "[dim]<unknown user>[/]")


@app.command("list")
def _list(ctx: typer.Context, search: str = typer.Option("", "--search", "-s")):
    with _client(ctx) as (api, auth):
        _require_login(auth)
        cache, notifier, navigator = _views()
        dashboard = Dashboard(api, cache, notifier, navigator)
        dashboard.search_query = search
        notes = dashboard.filtered_notes
        if dashboard.load_error:
            _fail(dashboard.load_error.message)
        if not notes:
            console.print(f"[dim]{dashboard.empty_message}[/]")
            return
        table = Table(title=f"{dashboard.username}'s notes")
        table.add_column("ID", justify="right", style="cyan")
        table.add_column("Title", style="bold")
        table.add_column("Content")
        table.add_column("Updated")
        for n in notes:
            table.add_row(str(n.id), n.title, n.content or "No content", format_date(n.updated_at))
        console.print(table)


@app.command()
def show(ctx: typer.Context, note_id: int):
    with _client(ctx) as (api, auth):
        _require_login(auth)
        cache, notifier, navigator = _views()
        editor = NoteEditor(note_id, api, cache, notifier, navigator)
        note = editor.load()
        if note is None:
            _fail(editor.load_error.message if editor.load_error else f"Not found: {note_id}")
        console.rule(f"#{note.id} {note.title}")
        console.print(f"[dim]updated:[/] {format_date(note.updated_at)}")
        console.print(Markdown(note.content or "_<empty>_"))


@app.command()
def add(
    ctx: typer.Context,
    title: str = typer.Option(..., "--title", "-t"),
    content: str = typer.Option("", "--content", "-c"),
):
    with _client(ctx) as (api, auth):
        _require_login(auth)
        cache, notifier, navigator = _views()
        editor = NoteEditor("new", api, cache, notifier, navigator)
        editor.title = title
        editor.content = content
        result = editor.save()
        if not result.ok:
            raise typer.Exit(1)
        console.print(f"[green]Created[/] #{result.data.id}: {result.data.title}")


@app.command()
def edit(
    ctx: typer.Context,
    note_id: int,
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    content: Optional[str] = typer.Option(None, "--content", "-c"),
):
    with _client(ctx) as (api, auth):
        _require_login(auth)
        cache, notifier, navigator = _views()
        editor = NoteEditor(note_id, api, cache, notifier, navigator)
        if editor.load() is None:
            _fail(editor.load_error.message if editor.load_error else f"Not found: {note_id}")
        if title is not None:
            editor.title = title
        if content is not None:
            editor.content = content
        if not editor.save().ok:
            raise typer.Exit(1)


@app.command()
def delete(ctx: typer.Context, note_id: int, yes: bool = typer.Option(False, "--yes", "-y", help="skip confirmation")):
    with _client(ctx) as (api, auth):
        _require_login(auth)
        cache, notifier, navigator = _views()
        dashboard = Dashboard(api, cache, notifier, navigator)
        dashboard.request_delete(note_id)
        if not yes and not typer.confirm(
            "This will permanently delete your note. Are you sure?", default=False
        ):
            dashboard.cancel_delete()
            console.print("[yellow]Cancelled[/]")
            return
        result = dashboard.confirm_delete()
        if result is None or not result.ok:
            raise typer.Exit(1)


def main():
    app()


if __name__ == "__main__":
    main()
