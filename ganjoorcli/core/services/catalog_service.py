"""Catalog service: assembles what each screen of the CLI shows.

Primary content (the poet, category or poem asked for) propagates failures to
the caller. Secondary content (a poet's categories, a category's
subcategories) degrades silently to an empty list.
"""

import logging
import math
from functools import partial
from typing import Any, List, Optional, Tuple

from ganjoorcli.core.services.collection_crawler import CollectionCrawler
from ganjoorcli.core.services.verse_layout import VerseLayoutEngine
from ganjoorcli.domain.errors import ApiError
from ganjoorcli.domain.models.catalog import (
    AudioSync, Category, CrawlResult, Favorite, Page, Poem, PoemAudio, Poet,
    UserSetting, Verse,
)
from ganjoorcli.domain.models.common import ResourceId, SearchQuery
from ganjoorcli.domain.models.views import CategoryView, PoemView, PoetListing, PoetView
from ganjoorcli.infrastructure.api.ganjoor_api import GanjoorApi

logger = logging.getLogger(__name__)

DEFAULT_POETS_PER_PAGE = 20


def filter_poets(poets: List[Poet], query: Optional[str] = None, century: Optional[str] = None) -> List[Poet]:
    """Naive client-side filter: century equality and case-insensitive name substring."""
    needle = (query or "").strip().lower()
    matches = []
    for poet in poets:
        if century and poet.century != century:
            continue
        if needle and needle not in poet.name.lower():
            continue
        matches.append(poet)
    return matches


class CatalogService:
    """Page-level controller logic for browsing the archive."""

    def __init__(
        self,
        api: GanjoorApi,
        crawler: CollectionCrawler,
        layout_engine: Optional[VerseLayoutEngine] = None,
    ):
        self.api = api
        self.crawler = crawler
        self.layout_engine = layout_engine or VerseLayoutEngine()

    # --- Poets ---

    async def fetch_all_poets(self, century: Optional[str] = None) -> CrawlResult[Poet]:
        """Crawls the poets listing, optionally filtered server-side by century."""
        logger.info(f"Crawling all poets (century={century or 'any'})")
        return await self.crawler.crawl(partial(self._poets_page, century=century))

    async def _poets_page(self, page_number: int, century: Optional[str] = None) -> Page[Poet]:
        return await self.api.list_poets(page=page_number, century=century)

    async def list_poets(
        self,
        query: Optional[SearchQuery] = None,
        century: Optional[str] = None,
        page: int = 1,
        per_page: int = DEFAULT_POETS_PER_PAGE,
    ) -> PoetListing:
        """Crawls every poet, filters locally and slices out one display page.

        The century narrows the crawl server-side as well, so fewer pages are
        spent on poets that would be filtered out anyway.
        """
        crawl = await self.fetch_all_poets(century)
        matches = filter_poets(crawl.items, query, century)
        per_page = max(1, per_page)
        total_pages = max(1, math.ceil(len(matches) / per_page))
        page = min(max(1, page), total_pages)
        start = (page - 1) * per_page
        return PoetListing(
            poets=matches[start:start + per_page],
            total_matches=len(matches),
            crawled=len(crawl.items),
            server_count=crawl.count,
            page=page,
            total_pages=total_pages,
            query=query,
            century=century,
        )

    async def get_poet_view(self, poet_id: ResourceId) -> PoetView:
        poet = await self.api.get_poet(poet_id)
        categories: List[Category] = []
        try:
            categories = (await self.api.list_categories(poet=poet_id)).results
        except ApiError as e:
            logger.warning(f"Could not fetch categories for poet {poet_id}: {e}")
        return PoetView(poet=poet, categories=categories)

    # --- Categories ---

    async def list_categories(
        self,
        poet: Optional[ResourceId] = None,
        parent: Optional[ResourceId] = None,
        search: Optional[str] = None,
        page: Optional[int] = None,
    ) -> Page[Category]:
        return await self.api.list_categories(page=page, parent=parent, poet=poet, search=search)

    async def get_category_view(self, category_id: ResourceId) -> CategoryView:
        """Category detail plus its poems and subcategories.

        Poems come from the dedicated category route, falling back to the
        filtered poems listing; `poems_error` is set if both fail.
        """
        category = await self.api.get_category(category_id)
        view = CategoryView(category=category)

        try:
            view.poems = (await self.api.list_category_poems(category_id)).results
        except ApiError as e:
            logger.warning(f"Category poems route failed for {category_id}: {e}; trying poems listing")
            try:
                view.poems = (await self.api.list_poems(category=category_id)).results
            except ApiError as fallback_error:
                logger.error(f"Could not fetch poems for category {category_id}: {fallback_error}")
                view.poems_error = True

        if category.children:
            view.subcategories = list(category.children)
        else:
            try:
                view.subcategories = (await self.api.list_categories(parent=category_id)).results
            except ApiError as e:
                logger.warning(f"Could not fetch subcategories for category {category_id}: {e}")
        return view

    # --- Poems ---

    async def get_poem_view(self, poem_id: ResourceId, show_numbers: bool = True) -> PoemView:
        poem = await self.api.get_poem(poem_id)
        groups = self.layout_engine.layout(poem.verses)
        logger.debug(f"Poem {poem_id}: {len(poem.verses)} verses laid out in {len(groups)} groups")
        return PoemView(poem=poem, groups=groups, show_numbers=show_numbers)

    async def list_verses(self, poem_id: ResourceId, page: Optional[int] = None) -> Page[Verse]:
        return await self.api.list_verses(page=page, poem=poem_id, ordering="order")

    async def get_audio(self, poem_id: ResourceId) -> Tuple[List[PoemAudio], List[AudioSync]]:
        """Recitations of a poem and the verse timings of the first one."""
        audios: List[PoemAudio] = (await self.api.list_audios(poem=poem_id)).results
        syncs: List[AudioSync] = []
        if audios:
            try:
                syncs = (await self.api.list_audio_syncs(audio=audios[0].id)).results
            except ApiError as e:
                logger.warning(f"Could not fetch audio syncs for audio {audios[0].id}: {e}")
        return audios, syncs

    # --- User data ---

    async def list_favorites(self) -> List[Favorite]:
        return (await self.api.list_favorites()).results

    async def toggle_favorite(self, poem_id: ResourceId, verse_id: ResourceId) -> Optional[Favorite]:
        return await self.api.toggle_favorite(poem_id, verse_id)

    async def add_favorite(self, poem_id: ResourceId, verse_id: ResourceId) -> Favorite:
        return await self.api.create_favorite(poem_id, verse_id)

    async def delete_favorite(self, favorite_id: ResourceId) -> None:
        await self.api.delete_favorite(favorite_id)

    async def get_settings(self) -> UserSetting:
        return await self.api.get_my_settings()

    async def update_setting(self, key: str, value: Any) -> UserSetting:
        """Changes one reader setting and returns the updated record."""
        return await self.api.update_my_settings(**{key: value})
