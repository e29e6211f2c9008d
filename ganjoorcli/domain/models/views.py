"""Aggregates assembled by the catalog service for one screen of output."""

from dataclasses import dataclass, field
from typing import List, Optional

from .catalog import Category, CategoryDetail, Poem, PoemDetail, PoetDetail
from .layout import LayoutGroup


@dataclass
class PoetView:
    poet: PoetDetail
    categories: List[Category] = field(default_factory=list)


@dataclass
class CategoryView:
    """A category with its poems and subcategories.

    `poems_error` is set when neither poem source answered; subcategories
    degrade to an empty list without a flag.
    """
    category: CategoryDetail
    poems: List[Poem] = field(default_factory=list)
    subcategories: List[Category] = field(default_factory=list)
    poems_error: bool = False


@dataclass
class PoemView:
    poem: PoemDetail
    groups: List[LayoutGroup] = field(default_factory=list)
    show_numbers: bool = True

    @property
    def is_empty(self) -> bool:
        return not self.groups


@dataclass
class PoetListing:
    """A filtered, paginated slice of the crawled poet set."""
    poets: list
    total_matches: int
    crawled: int
    server_count: int
    page: int = 1
    total_pages: int = 1
    query: Optional[str] = None
    century: Optional[str] = None

    @property
    def may_be_incomplete(self) -> bool:
        return self.crawled < self.server_count
