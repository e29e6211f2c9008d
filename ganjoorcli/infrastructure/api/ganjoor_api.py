"""Typed bindings for the Ganjoor REST routes.

Every call goes through the ResilientClient; this module only knows route
shapes, query parameter names and how to parse payloads into models.
"""

import logging
from typing import Any, Optional

from ganjoorcli.domain.models.catalog import (
    AudioSync, Category, CategoryDetail, Favorite, Page, Poem, PoemAudio,
    PoemDetail, Poet, PoetDetail, UserSetting, Verse,
)
from ganjoorcli.domain.models.common import ApiPath, ResourceId, clean_params
from ganjoorcli.infrastructure.resilience.resilient_client import ResilientClient

logger = logging.getLogger(__name__)


class GanjoorApi:
    """One coroutine per route of the archive service."""

    def __init__(self, client: ResilientClient):
        self.client = client

    async def _get(self, path: str, **params: Any) -> Any:
        return await self.client.get(ApiPath(path), clean_params(params))

    # --- Poets ---

    async def list_poets(
        self,
        page: Optional[int] = None,
        search: Optional[str] = None,
        century: Optional[str] = None,
        ordering: Optional[str] = None,
    ) -> Page[Poet]:
        data = await self._get("/poets/", page=page, search=search, century=century, ordering=ordering)
        return Page.from_api(data, Poet.from_api)

    async def get_poet(self, poet_id: ResourceId) -> PoetDetail:
        return PoetDetail.from_api(await self._get(f"/poets/{poet_id}/"))

    # --- Categories ---

    async def list_categories(
        self,
        page: Optional[int] = None,
        parent: Optional[ResourceId] = None,
        poet: Optional[ResourceId] = None,
        search: Optional[str] = None,
        ordering: Optional[str] = None,
    ) -> Page[Category]:
        data = await self._get(
            "/categories/", page=page, parent=parent, poet=poet, search=search, ordering=ordering,
        )
        return Page.from_api(data, Category.from_api)

    async def get_category(self, category_id: ResourceId) -> CategoryDetail:
        return CategoryDetail.from_api(await self._get(f"/categories/{category_id}/"))

    async def list_category_poems(self, category_id: ResourceId, page: Optional[int] = None) -> Page[Poem]:
        data = await self._get(f"/categories/{category_id}/poems/", page=page)
        return Page.from_api(data, Poem.from_api)

    # --- Poems & Verses ---

    async def list_poems(
        self,
        page: Optional[int] = None,
        category: Optional[ResourceId] = None,
        search: Optional[str] = None,
        ordering: Optional[str] = None,
    ) -> Page[Poem]:
        data = await self._get("/poems/", page=page, category=category, search=search, ordering=ordering)
        return Page.from_api(data, Poem.from_api)

    async def get_poem(self, poem_id: ResourceId) -> PoemDetail:
        return PoemDetail.from_api(await self._get(f"/poems/{poem_id}/"))

    async def list_verses(
        self,
        page: Optional[int] = None,
        poem: Optional[ResourceId] = None,
        position: Optional[int] = None,
        search: Optional[str] = None,
        ordering: Optional[str] = None,
    ) -> Page[Verse]:
        data = await self._get(
            "/verses/", page=page, poem=poem, position=position, search=search, ordering=ordering,
        )
        return Page.from_api(data, Verse.from_api)

    # --- Audio ---

    async def list_audios(
        self,
        page: Optional[int] = None,
        poem: Optional[ResourceId] = None,
        ordering: Optional[str] = None,
    ) -> Page[PoemAudio]:
        data = await self._get("/audios/", page=page, poem=poem, ordering=ordering)
        return Page.from_api(data, PoemAudio.from_api)

    async def list_audio_syncs(
        self,
        page: Optional[int] = None,
        audio: Optional[ResourceId] = None,
        poem: Optional[ResourceId] = None,
        ordering: Optional[str] = None,
    ) -> Page[AudioSync]:
        data = await self._get("/audio-syncs/", page=page, audio=audio, poem=poem, ordering=ordering)
        return Page.from_api(data, AudioSync.from_api)

    # --- Favorites (require a token) ---

    async def list_favorites(self, page: Optional[int] = None, ordering: Optional[str] = None) -> Page[Favorite]:
        data = await self._get("/favorites/", page=page, ordering=ordering)
        return Page.from_api(data, Favorite.from_api)

    async def create_favorite(self, poem: ResourceId, verse: ResourceId) -> Favorite:
        data = await self.client.post(ApiPath("/favorites/"), {"poem": poem, "verse": verse})
        return Favorite.from_api(data)

    async def toggle_favorite(self, poem: ResourceId, verse: ResourceId) -> Optional[Favorite]:
        """Adds or removes a favorite. Returns None when the toggle removed it."""
        data = await self.client.post(ApiPath("/favorites/toggle/"), {"poem": poem, "verse": verse})
        if isinstance(data, dict) and "id" in data:
            return Favorite.from_api(data)
        return None

    async def delete_favorite(self, favorite_id: ResourceId) -> None:
        await self.client.delete(ApiPath(f"/favorites/{favorite_id}/"))

    # --- Settings ---

    async def get_my_settings(self) -> UserSetting:
        return UserSetting.from_api(await self._get("/settings/me/"))

    async def update_my_settings(self, **fields: Any) -> UserSetting:
        data = await self.client.post(ApiPath("/settings/me/"), fields)
        return UserSetting.from_api(data)
