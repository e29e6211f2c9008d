import pytest
from unittest.mock import MagicMock

from conftest import make_verses

from ganjoorcli.core.command_handler import (
    LOGIN_REQUIRED_MESSAGE, RATE_LIMIT_MESSAGE, UNAVAILABLE_MESSAGE, CommandHandler, describe_failure,
)
from ganjoorcli.core.services.catalog_service import CatalogService
from ganjoorcli.core.services.verse_layout import layout_verses
from ganjoorcli.domain.errors import NotFound, RetriesExhausted, ServerError, TransportError, Unauthorized
from ganjoorcli.domain.interfaces.session_store import SessionStore
from ganjoorcli.domain.interfaces.user_interface import UserInterface
from ganjoorcli.domain.models.catalog import (
    Category, CategoryDetail, Favorite, Page, PoemAudio, PoemDetail, PoetDetail, UserSetting,
)
from ganjoorcli.domain.models.views import CategoryView, PoemView, PoetListing, PoetView


@pytest.fixture
def mock_catalog_service():
    # Coroutine methods of CatalogService come back as AsyncMocks
    return MagicMock(spec=CatalogService)

@pytest.fixture
def mock_session_store():
    store = MagicMock(spec=SessionStore)
    store.get_token.return_value = None
    return store

@pytest.fixture
def mock_ui():
    return MagicMock(spec=UserInterface)

@pytest.fixture
def command_handler(mock_catalog_service, mock_session_store, mock_ui):
    """Fixture to create CommandHandler with mocked collaborators."""
    return CommandHandler(
        catalog_service=mock_catalog_service,
        session_store=mock_session_store,
        ui=mock_ui,
    )


@pytest.mark.parametrize("error, expected", [
    (RetriesExhausted(attempts=5, method="GET", path="/poets/"), RATE_LIMIT_MESSAGE),
    (NotFound("gone", 404), "Poem 3 was not found."),
    (Unauthorized("no", 401), LOGIN_REQUIRED_MESSAGE),
    (ServerError("down", 503), UNAVAILABLE_MESSAGE),
    (TransportError("refused"), f"{UNAVAILABLE_MESSAGE} Could not reach the server."),
])
def test_describe_failure(error, expected):
    assert describe_failure(error, "Poem 3") == expected


@pytest.mark.asyncio
async def test_handle_poets(command_handler: CommandHandler, mock_catalog_service: MagicMock, mock_ui: MagicMock):
    """Test that handle_poets passes filters through and displays the listing."""
    listing = PoetListing(poets=[], total_matches=0, crawled=40, server_count=40)
    mock_catalog_service.list_poets.return_value = listing

    await command_handler.handle_poets(query="hafez", century="classical", page=2)

    mock_catalog_service.list_poets.assert_awaited_once_with(
        query="hafez", century="classical", page=2, per_page=20,
    )
    mock_ui.display_poets.assert_called_once_with(listing)
    mock_ui.display_warning.assert_not_called()


@pytest.mark.asyncio
async def test_handle_poets_warns_when_incomplete(command_handler, mock_catalog_service, mock_ui):
    """Test that a truncated crawl is surfaced next to the partial results."""
    listing = PoetListing(poets=[], total_matches=0, crawled=200, server_count=250)
    mock_catalog_service.list_poets.return_value = listing

    await command_handler.handle_poets()

    mock_ui.display_warning.assert_called_once_with("Loaded 200 of 250 poets; results may be incomplete.")
    mock_ui.display_poets.assert_called_once_with(listing)


@pytest.mark.asyncio
async def test_handle_poets_rate_limited(command_handler, mock_catalog_service, mock_ui):
    """Test that exhausted retries show the rate limit message instead of a listing."""
    mock_catalog_service.list_poets.side_effect = RetriesExhausted(attempts=5, method="GET", path="/poets/")

    await command_handler.handle_poets()

    mock_ui.display_error.assert_called_once_with(RATE_LIMIT_MESSAGE)
    mock_ui.display_poets.assert_not_called()


@pytest.mark.asyncio
async def test_handle_poet(command_handler, mock_catalog_service, mock_ui):
    view = PoetView(poet=PoetDetail(id=7, name="Rumi", century="classical"))
    mock_catalog_service.get_poet_view.return_value = view

    await command_handler.handle_poet(7)

    mock_catalog_service.get_poet_view.assert_awaited_once_with(7)
    mock_ui.display_poet.assert_called_once_with(view)


@pytest.mark.asyncio
async def test_handle_poet_not_found(command_handler, mock_catalog_service, mock_ui):
    mock_catalog_service.get_poet_view.side_effect = NotFound("missing", 404)

    await command_handler.handle_poet(7)

    mock_ui.display_error.assert_called_once_with("Poet 7 was not found.")


@pytest.mark.asyncio
async def test_unexpected_error_is_reported(command_handler, mock_catalog_service, mock_ui):
    """Test that non-API errors are displayed rather than raised."""
    mock_catalog_service.get_poet_view.side_effect = RuntimeError("boom")

    await command_handler.handle_poet(7)

    mock_ui.display_error.assert_called_once_with("Command failed: boom")


@pytest.mark.asyncio
async def test_handle_categories(command_handler, mock_catalog_service, mock_ui):
    categories = [Category(id=1, title="Ghazals", poet=2)]
    mock_catalog_service.list_categories.return_value = Page(count=1, results=categories)

    await command_handler.handle_categories(poet=2)

    mock_catalog_service.list_categories.assert_awaited_once_with(poet=2, parent=None)
    mock_ui.display_categories.assert_called_once_with(categories)


@pytest.mark.asyncio
async def test_handle_category_warns_on_poems_error(command_handler, mock_catalog_service, mock_ui):
    """Test that a category renders even when its poems could not be fetched."""
    view = CategoryView(category=CategoryDetail(id=5, title="Ghazals", poet=2), poems_error=True)
    mock_catalog_service.get_category_view.return_value = view

    await command_handler.handle_category(5)

    mock_ui.display_warning.assert_called_once_with("Poems of this category are temporarily unavailable.")
    mock_ui.display_category.assert_called_once_with(view)


@pytest.mark.asyncio
async def test_handle_poem(command_handler, mock_catalog_service, mock_ui):
    verses = make_verses([0, 1])
    view = PoemView(poem=PoemDetail(id=10, title="G1", category=5, verses=verses), groups=layout_verses(verses))
    mock_catalog_service.get_poem_view.return_value = view

    await command_handler.handle_poem(10)

    mock_ui.display_poem.assert_called_once_with(view)


@pytest.mark.asyncio
async def test_handle_poem_without_text(command_handler, mock_catalog_service, mock_ui):
    mock_catalog_service.get_poem_view.return_value = PoemView(poem=PoemDetail(id=10, title="G1", category=5))

    await command_handler.handle_poem(10)

    mock_ui.display_info.assert_called_once_with("The text of this poem is not available.")
    mock_ui.display_poem.assert_not_called()


@pytest.mark.asyncio
async def test_handle_audios_empty(command_handler, mock_catalog_service, mock_ui):
    mock_catalog_service.get_audio.return_value = ([], [])

    await command_handler.handle_audios(10)

    mock_ui.display_info.assert_called_once_with("No recitations for this poem.")
    mock_ui.display_audios.assert_not_called()


@pytest.mark.asyncio
async def test_handle_audios(command_handler, mock_catalog_service, mock_ui):
    audios = [PoemAudio(id=8, poem=10)]
    mock_catalog_service.get_audio.return_value = (audios, [])

    await command_handler.handle_audios(10)

    mock_ui.display_audios.assert_called_once_with(audios, [])


@pytest.mark.asyncio
async def test_handle_favorites_requires_login(command_handler, mock_catalog_service, mock_ui):
    mock_catalog_service.list_favorites.side_effect = Unauthorized("no", 401)

    await command_handler.handle_favorites()

    mock_ui.display_error.assert_called_once_with(LOGIN_REQUIRED_MESSAGE)
    mock_ui.display_favorites.assert_not_called()


@pytest.mark.asyncio
async def test_handle_toggle_favorite(command_handler, mock_catalog_service, mock_ui):
    mock_catalog_service.toggle_favorite.return_value = Favorite(id=3, poem=10, verse=1)

    await command_handler.handle_toggle_favorite(10, 1)

    mock_catalog_service.toggle_favorite.assert_awaited_once_with(10, 1)
    mock_ui.display_info.assert_called_once_with("Verse 1 added to favorites.")


@pytest.mark.asyncio
async def test_handle_toggle_favorite_removed(command_handler, mock_catalog_service, mock_ui):
    mock_catalog_service.toggle_favorite.return_value = None

    await command_handler.handle_toggle_favorite(10, 1)

    mock_ui.display_info.assert_called_once_with("Verse 1 removed from favorites.")


@pytest.mark.asyncio
async def test_handle_settings(command_handler, mock_catalog_service, mock_ui):
    settings = UserSetting(id=1, username="reza")
    mock_catalog_service.get_settings.return_value = settings

    await command_handler.handle_settings()

    mock_ui.display_settings.assert_called_once_with(settings)


def test_handle_set_token(command_handler, mock_session_store, mock_ui):
    command_handler.handle_set_token("  abc  ")

    mock_session_store.set_token.assert_called_once_with("abc")
    mock_ui.display_info.assert_called_once_with("Token stored.")


def test_handle_set_token_rejects_empty(command_handler, mock_session_store, mock_ui):
    command_handler.handle_set_token("   ")

    mock_session_store.set_token.assert_not_called()
    mock_ui.display_error.assert_called_once_with("Token must not be empty.")


def test_handle_clear_token(command_handler, mock_session_store, mock_ui):
    command_handler.handle_clear_token()

    mock_session_store.clear_token.assert_called_once()
    mock_ui.display_info.assert_called_once_with("Token cleared.")


@pytest.mark.asyncio
async def test_handle_poem_anonymous_shows_numbers(command_handler, mock_catalog_service):
    """Test that no settings request is made without a token."""
    mock_catalog_service.get_poem_view.return_value = PoemView(poem=PoemDetail(id=10, title="G1", category=5))

    await command_handler.handle_poem(10)

    mock_catalog_service.get_settings.assert_not_awaited()
    mock_catalog_service.get_poem_view.assert_awaited_once_with(10, show_numbers=True)


@pytest.mark.asyncio
async def test_handle_poem_follows_reader_setting(command_handler, mock_catalog_service, mock_session_store):
    """Test that a signed-in reader's show_line_numbers setting reaches the poem view."""
    mock_session_store.get_token.return_value = "abc"
    mock_catalog_service.get_settings.return_value = UserSetting(id=1, show_line_numbers=False)
    mock_catalog_service.get_poem_view.return_value = PoemView(poem=PoemDetail(id=10, title="G1", category=5))

    await command_handler.handle_poem(10)

    mock_catalog_service.get_poem_view.assert_awaited_once_with(10, show_numbers=False)


@pytest.mark.asyncio
async def test_handle_poem_explicit_flag_skips_settings(command_handler, mock_catalog_service, mock_session_store):
    mock_session_store.get_token.return_value = "abc"
    mock_catalog_service.get_poem_view.return_value = PoemView(poem=PoemDetail(id=10, title="G1", category=5))

    await command_handler.handle_poem(10, show_numbers=True)

    mock_catalog_service.get_settings.assert_not_awaited()
    mock_catalog_service.get_poem_view.assert_awaited_once_with(10, show_numbers=True)


@pytest.mark.asyncio
async def test_handle_poem_settings_failure_keeps_numbers(command_handler, mock_catalog_service, mock_session_store, mock_ui):
    """Test that an unavailable settings record does not block reading the poem."""
    mock_session_store.get_token.return_value = "abc"
    mock_catalog_service.get_settings.side_effect = ServerError("down", 503)
    verses = make_verses([0, 1])
    view = PoemView(poem=PoemDetail(id=10, title="G1", category=5, verses=verses), groups=layout_verses(verses))
    mock_catalog_service.get_poem_view.return_value = view

    await command_handler.handle_poem(10)

    mock_catalog_service.get_poem_view.assert_awaited_once_with(10, show_numbers=True)
    mock_ui.display_poem.assert_called_once_with(view)
    mock_ui.display_error.assert_not_called()


@pytest.mark.asyncio
async def test_handle_add_favorite(command_handler, mock_catalog_service, mock_ui):
    mock_catalog_service.add_favorite.return_value = Favorite(id=4, poem=10, verse=2)

    await command_handler.handle_add_favorite(10, 2)

    mock_catalog_service.add_favorite.assert_awaited_once_with(10, 2)
    mock_ui.display_info.assert_called_once_with("Verse 2 added to favorites (favorite 4).")


@pytest.mark.asyncio
async def test_handle_delete_favorite(command_handler, mock_catalog_service, mock_ui):
    await command_handler.handle_delete_favorite(4)

    mock_catalog_service.delete_favorite.assert_awaited_once_with(4)
    mock_ui.display_info.assert_called_once_with("Favorite 4 deleted.")


@pytest.mark.asyncio
async def test_handle_delete_favorite_not_found(command_handler, mock_catalog_service, mock_ui):
    mock_catalog_service.delete_favorite.side_effect = NotFound("gone", 404)

    await command_handler.handle_delete_favorite(4)

    mock_ui.display_error.assert_called_once_with("Favorite 4 was not found.")


@pytest.mark.asyncio
async def test_handle_update_setting_converts_value(command_handler, mock_catalog_service, mock_ui):
    """Test that 'false' from the command line is sent as a boolean."""
    updated = UserSetting(id=1, show_line_numbers=False)
    mock_catalog_service.update_setting.return_value = updated

    await command_handler.handle_update_setting("show_line_numbers", "false")

    mock_catalog_service.update_setting.assert_awaited_once_with("show_line_numbers", False)
    mock_ui.display_settings.assert_called_once_with(updated)


@pytest.mark.asyncio
async def test_handle_update_setting_rejects_empty_key(command_handler, mock_catalog_service, mock_ui):
    await command_handler.handle_update_setting("  ", "1")

    mock_catalog_service.update_setting.assert_not_awaited()
    mock_ui.display_error.assert_called_once_with("Setting name must not be empty.")
