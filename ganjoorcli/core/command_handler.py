"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), delegates the work to
the CatalogService and hands the results to the UserInterface. Failures of
primary content are turned into friendly messages here, never raw tracebacks.
"""

import logging
from typing import Optional

from ganjoorcli.core.services.catalog_service import CatalogService
from ganjoorcli.domain.errors import ApiError, NotFound, RetriesExhausted, TransportError, Unauthorized
from ganjoorcli.domain.interfaces.session_store import SessionStore
from ganjoorcli.domain.interfaces.user_interface import UserInterface
from ganjoorcli.domain.models.common import AuthToken, ResourceId, SearchQuery
from ganjoorcli.infrastructure.config.settings import coerce_value

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "The archive is rate limiting requests right now. Please try again in a minute."
UNAVAILABLE_MESSAGE = "The archive is temporarily unavailable."
LOGIN_REQUIRED_MESSAGE = "This requires a valid token. Set one with 'ganjoorcli token set <TOKEN>'."


def describe_failure(error: ApiError, what: str) -> str:
    """User-facing text for a failed primary fetch."""
    if isinstance(error, RetriesExhausted):
        return RATE_LIMIT_MESSAGE
    if isinstance(error, NotFound):
        return f"{what} was not found."
    if isinstance(error, Unauthorized):
        return LOGIN_REQUIRED_MESSAGE
    if isinstance(error, TransportError):
        return f"{UNAVAILABLE_MESSAGE} Could not reach the server."
    return UNAVAILABLE_MESSAGE


class CommandHandler:
    """Handles incoming commands and delegates to the catalog service."""

    def __init__(
        self,
        catalog_service: CatalogService,
        session_store: SessionStore,
        ui: UserInterface,
    ):
        self.catalog_service = catalog_service
        self.session_store = session_store
        self.ui = ui

    def _report(self, error: Exception, what: str) -> None:
        if isinstance(error, ApiError):
            logger.warning(f"Fetching {what} failed: {type(error).__name__}: {error}")
            self.ui.display_error(describe_failure(error, what))
        else:
            logger.error(f"Unexpected failure while fetching {what}: {error}", exc_info=True)
            self.ui.display_error(f"Command failed: {error}")

    async def handle_poets(
        self,
        query: Optional[str] = None,
        century: Optional[str] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> None:
        logger.info(f"Handling 'poets' command: query={query!r}, century={century}, page={page}")
        try:
            listing = await self.catalog_service.list_poets(
                query=SearchQuery(query) if query else None, century=century, page=page, per_page=per_page,
            )
        except Exception as e:
            self._report(e, "The poet list")
            return
        if listing.may_be_incomplete:
            self.ui.display_warning(
                f"Loaded {listing.crawled} of {listing.server_count} poets; results may be incomplete."
            )
        self.ui.display_poets(listing)

    async def handle_poet(self, poet_id: int) -> None:
        logger.info(f"Handling 'poet' command for id {poet_id}")
        try:
            view = await self.catalog_service.get_poet_view(ResourceId(poet_id))
        except Exception as e:
            self._report(e, f"Poet {poet_id}")
            return
        self.ui.display_poet(view)

    async def handle_categories(self, poet: Optional[int] = None, parent: Optional[int] = None) -> None:
        logger.info(f"Handling 'categories' command: poet={poet}, parent={parent}")
        try:
            page = await self.catalog_service.list_categories(poet=poet, parent=parent)
        except Exception as e:
            self._report(e, "The category list")
            return
        self.ui.display_categories(page.results)

    async def handle_category(self, category_id: int) -> None:
        logger.info(f"Handling 'category' command for id {category_id}")
        try:
            view = await self.catalog_service.get_category_view(ResourceId(category_id))
        except Exception as e:
            self._report(e, f"Category {category_id}")
            return
        if view.poems_error:
            self.ui.display_warning("Poems of this category are temporarily unavailable.")
        self.ui.display_category(view)

    async def _line_numbers_preference(self) -> bool:
        """The signed-in reader's show_line_numbers setting; True when anonymous or unknown."""
        if not self.session_store.get_token():
            return True
        try:
            settings = await self.catalog_service.get_settings()
        except ApiError as e:
            logger.info(f"Reader settings unavailable, showing line numbers: {e}")
            return True
        return settings.show_line_numbers

    async def handle_poem(self, poem_id: int, show_numbers: Optional[bool] = None) -> None:
        logger.info(f"Handling 'poem' command for id {poem_id}")
        if show_numbers is None:
            show_numbers = await self._line_numbers_preference()
        try:
            view = await self.catalog_service.get_poem_view(ResourceId(poem_id), show_numbers=show_numbers)
        except Exception as e:
            self._report(e, f"Poem {poem_id}")
            return
        if view.is_empty:
            self.ui.display_info("The text of this poem is not available.")
            return
        self.ui.display_poem(view)

    async def handle_verses(self, poem_id: int, page: Optional[int] = None) -> None:
        try:
            result = await self.catalog_service.list_verses(ResourceId(poem_id), page=page)
        except Exception as e:
            self._report(e, f"Verses of poem {poem_id}")
            return
        self.ui.display_verses(result.results)

    async def handle_audios(self, poem_id: int) -> None:
        try:
            audios, syncs = await self.catalog_service.get_audio(ResourceId(poem_id))
        except Exception as e:
            self._report(e, f"Recitations of poem {poem_id}")
            return
        if not audios:
            self.ui.display_info("No recitations for this poem.")
            return
        self.ui.display_audios(audios, syncs)

    async def handle_favorites(self) -> None:
        try:
            favorites = await self.catalog_service.list_favorites()
        except Exception as e:
            self._report(e, "Your favorites")
            return
        self.ui.display_favorites(favorites)

    async def handle_toggle_favorite(self, poem_id: int, verse_id: int) -> None:
        try:
            favorite = await self.catalog_service.toggle_favorite(ResourceId(poem_id), ResourceId(verse_id))
        except Exception as e:
            self._report(e, "The favorite")
            return
        if favorite is None:
            self.ui.display_info(f"Verse {verse_id} removed from favorites.")
        else:
            self.ui.display_info(f"Verse {verse_id} added to favorites.")

    async def handle_add_favorite(self, poem_id: int, verse_id: int) -> None:
        try:
            favorite = await self.catalog_service.add_favorite(ResourceId(poem_id), ResourceId(verse_id))
        except Exception as e:
            self._report(e, "The favorite")
            return
        self.ui.display_info(f"Verse {verse_id} added to favorites (favorite {favorite.id}).")

    async def handle_delete_favorite(self, favorite_id: int) -> None:
        try:
            await self.catalog_service.delete_favorite(ResourceId(favorite_id))
        except Exception as e:
            self._report(e, f"Favorite {favorite_id}")
            return
        self.ui.display_info(f"Favorite {favorite_id} deleted.")

    async def handle_settings(self) -> None:
        try:
            settings = await self.catalog_service.get_settings()
        except Exception as e:
            self._report(e, "Your settings")
            return
        self.ui.display_settings(settings)

    async def handle_update_setting(self, key: str, value: str) -> None:
        key = key.strip()
        if not key:
            self.ui.display_error("Setting name must not be empty.")
            return
        try:
            settings = await self.catalog_service.update_setting(key, coerce_value(value))
        except Exception as e:
            self._report(e, "Your settings")
            return
        self.ui.display_settings(settings)

    def handle_set_token(self, token: str) -> None:
        token = token.strip()
        if not token:
            self.ui.display_error("Token must not be empty.")
            return
        self.session_store.set_token(AuthToken(token))
        self.ui.display_info("Token stored.")

    def handle_clear_token(self) -> None:
        self.session_store.clear_token()
        self.ui.display_info("Token cleared.")
