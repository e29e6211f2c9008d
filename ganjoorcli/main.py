"""Main entry point for the ganjoorcli application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
import sys
from typing import Any, Awaitable, Callable, Dict, Optional

import typer
from typing_extensions import Annotated

# --- Core Layer ---
from ganjoorcli.core.command_handler import CommandHandler
from ganjoorcli.core.services.catalog_service import CatalogService
from ganjoorcli.core.services.collection_crawler import CollectionCrawler
from ganjoorcli.core.services.verse_layout import VerseLayoutEngine
from ganjoorcli.domain.interfaces.session_store import SessionStore
from ganjoorcli.domain.models.catalog import Century

# --- Infrastructure Layer ---
from ganjoorcli.infrastructure.api.ganjoor_api import GanjoorApi
from ganjoorcli.infrastructure.cli.display import ConsoleDisplay
from ganjoorcli.infrastructure.config.settings import (
    get_api_base_url, get_config, get_crawl_max_pages, get_crawl_page_delay,
    get_env_auth_token, get_read_backoff, get_request_timeout, get_session_file,
    get_write_backoff, load_configuration, set_config,
)
from ganjoorcli.infrastructure.http.httpx_transport import HttpxTransport
from ganjoorcli.infrastructure.monitoring.logger_setup import level_from_name, setup_logging
from ganjoorcli.infrastructure.resilience.resilient_client import ResilientClient
from ganjoorcli.infrastructure.resilience.retry_policy import RetryPolicy
from ganjoorcli.infrastructure.session.token_store import FileSessionStore, InMemorySessionStore

logger = logging.getLogger(__name__)


def create_session_store() -> SessionStore:
    """Token from the session file, else GANJOOR_AUTH_TOKEN held in memory."""
    file_store = FileSessionStore(get_session_file())
    if file_store.get_token() is None:
        env_token = get_env_auth_token()
        if env_token:
            logger.debug("Using auth token from environment.")
            return InMemorySessionStore(env_token)
    return file_store


# --- Dependency Injection Container (Manual) ---

def create_dependencies() -> Dict[str, Any]:
    """Creates and wires up all dependencies for the application.

    This acts as the Composition Root. Called once per command so the httpx
    client lives inside the event loop that uses it.
    """
    logger.debug("Initializing application dependencies...")
    dependencies: Dict[str, Any] = {}

    dependencies['ui'] = ConsoleDisplay()
    dependencies['session_store'] = create_session_store()
    dependencies['transport'] = HttpxTransport.create(get_api_base_url(), get_request_timeout())
    dependencies['client'] = ResilientClient(
        transport=dependencies['transport'],
        session_store=dependencies['session_store'],
        read_policy=RetryPolicy.from_config(get_read_backoff()),
        write_policy=RetryPolicy.from_config(get_write_backoff()),
    )
    dependencies['api'] = GanjoorApi(dependencies['client'])
    dependencies['crawler'] = CollectionCrawler(
        page_delay_s=get_crawl_page_delay(),
        max_pages=get_crawl_max_pages(),
    )
    dependencies['catalog_service'] = CatalogService(
        api=dependencies['api'],
        crawler=dependencies['crawler'],
        layout_engine=VerseLayoutEngine(),
    )
    dependencies['command_handler'] = CommandHandler(
        catalog_service=dependencies['catalog_service'],
        session_store=dependencies['session_store'],
        ui=dependencies['ui'],
    )
    logger.debug("All dependencies initialized successfully.")
    return dependencies


# --- Typer App Definition ---
app = typer.Typer(
    name="ganjoorcli",
    help="Browse the Ganjoor poetry archive from the terminal.",
    add_completion=False,
)
token_app = typer.Typer(help="Manage the stored bearer token.")
app.add_typer(token_app, name="token")


# --- Helper for Running Async Commands ---
def run_async(command: Callable[[CommandHandler], Awaitable[None]]) -> None:
    """Builds the dependencies, runs one handler coroutine and closes the transport."""

    async def _runner() -> None:
        dependencies = create_dependencies()
        try:
            await command(dependencies['command_handler'])
        finally:
            await dependencies['client'].aclose()

    try:
        asyncio.run(_runner())
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
        raise typer.Exit(code=130)


# --- CLI Commands ---

@app.callback()
def main_callback(
    log_level: Annotated[
        Optional[str], typer.Option("--log-level", help="Logging level (debug, info, warning, error).")
    ] = None,
    base_url: Annotated[
        Optional[str], typer.Option("--base-url", help="API base URL, overrides configuration and environment.")
    ] = None,
):
    """Loads configuration and logging before any command runs."""
    load_configuration()
    level = level_from_name(log_level or get_config('logging.level'))
    setup_logging(log_level=level, log_file=get_config('logging.file'))
    if base_url:
        set_config('api.base_url', base_url)
    logger.debug(f"API base URL: {get_api_base_url()}")


@app.command()
def poets(
    search: Annotated[Optional[str], typer.Option("--search", "-s", help="Case-insensitive name filter.")] = None,
    century: Annotated[Optional[Century], typer.Option("--century", "-c", help="Only poets of this era.")] = None,
    page: Annotated[int, typer.Option("--page", min=1, help="Display page.")] = 1,
    per_page: Annotated[int, typer.Option("--per-page", min=1, max=200, help="Poets per display page.")] = 20,
):
    """List every poet, filtered locally."""
    century_value = century.value if century else None
    run_async(lambda handler: handler.handle_poets(search, century_value, page, per_page))


@app.command()
def poet(poet_id: Annotated[int, typer.Argument(help="Poet id.", min=1)]):
    """Show a poet and their works."""
    run_async(lambda handler: handler.handle_poet(poet_id))


@app.command()
def categories(
    poet: Annotated[Optional[int], typer.Option("--poet", help="Only categories of this poet.")] = None,
    parent: Annotated[Optional[int], typer.Option("--parent", help="Only children of this category.")] = None,
):
    """List categories."""
    run_async(lambda handler: handler.handle_categories(poet, parent))


@app.command()
def category(category_id: Annotated[int, typer.Argument(help="Category id.", min=1)]):
    """Show a category with its poems and sections."""
    run_async(lambda handler: handler.handle_category(category_id))


@app.command()
def poem(
    poem_id: Annotated[int, typer.Argument(help="Poem id.", min=1)],
    numbers: Annotated[
        Optional[bool],
        typer.Option("--numbers/--no-numbers", help="Show verse numbers (defaults to your reader setting)."),
    ] = None,
):
    """Read a poem."""
    run_async(lambda handler: handler.handle_poem(poem_id, numbers))


@app.command()
def verses(
    poem_id: Annotated[int, typer.Option("--poem", help="Poem id.", min=1)],
    page: Annotated[Optional[int], typer.Option("--page", min=1)] = None,
):
    """List the raw verse records of a poem."""
    run_async(lambda handler: handler.handle_verses(poem_id, page))


@app.command()
def audios(poem_id: Annotated[int, typer.Option("--poem", help="Poem id.", min=1)]):
    """List recitations of a poem."""
    run_async(lambda handler: handler.handle_audios(poem_id))


@app.command()
def favorites():
    """List your favorite verses (requires a token)."""
    run_async(lambda handler: handler.handle_favorites())


@app.command(name="favorite-toggle")
def favorite_toggle(
    poem_id: Annotated[int, typer.Argument(help="Poem id.", min=1)],
    verse_id: Annotated[int, typer.Argument(help="Verse id.", min=1)],
):
    """Add or remove a verse from your favorites (requires a token)."""
    run_async(lambda handler: handler.handle_toggle_favorite(poem_id, verse_id))


@app.command(name="favorite-add")
def favorite_add(
    poem_id: Annotated[int, typer.Argument(help="Poem id.", min=1)],
    verse_id: Annotated[int, typer.Argument(help="Verse id.", min=1)],
):
    """Add a verse to your favorites (requires a token)."""
    run_async(lambda handler: handler.handle_add_favorite(poem_id, verse_id))


@app.command(name="favorite-delete")
def favorite_delete(favorite_id: Annotated[int, typer.Argument(help="Favorite id (see 'favorites').", min=1)]):
    """Delete one of your favorites (requires a token)."""
    run_async(lambda handler: handler.handle_delete_favorite(favorite_id))


@app.command()
def settings():
    """Show your reader settings (requires a token)."""
    run_async(lambda handler: handler.handle_settings())


@app.command(name="settings-set")
def settings_set(
    key: Annotated[str, typer.Argument(help="Setting name, e.g. show_line_numbers or font_size.")],
    value: Annotated[str, typer.Argument(help="New value; true/false and numbers are converted.")],
):
    """Change one of your reader settings (requires a token)."""
    run_async(lambda handler: handler.handle_update_setting(key, value))


@token_app.command("set")
def token_set(token: Annotated[str, typer.Argument(help="Bearer token.")]):
    """Store a bearer token for authenticated requests."""
    store = FileSessionStore(get_session_file())
    CommandHandler(catalog_service=None, session_store=store, ui=ConsoleDisplay()).handle_set_token(token)


@token_app.command("clear")
def token_clear():
    """Forget the stored bearer token."""
    store = FileSessionStore(get_session_file())
    CommandHandler(catalog_service=None, session_store=store, ui=ConsoleDisplay()).handle_clear_token()


# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    if sys.platform == "win32":
        # Persian text on cp1252 consoles
        sys.stdout.reconfigure(encoding="utf-8")
    app()


if __name__ == "__main__":
    cli_entry_point()
