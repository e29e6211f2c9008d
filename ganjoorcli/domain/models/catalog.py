"""Domain models for the archive's resources.

Each model is built from the JSON returned by the REST service through its
`from_api` classmethod. Entities are created by a successful fetch and are
never mutated or written back.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from .common import Cursor, ResourceId

T = TypeVar("T")

ApiPayload = Dict[str, Any]


class Century(str, Enum):
    """Era buckets used by the archive to group poets."""
    ANCIENT = "ancient"
    CLASSICAL = "classical"
    CONTEMPORARY = "contemporary"
    MODERN = "modern"


# --- Listings ---

@dataclass
class Page(Generic[T]):
    """One page of a cursor-paginated listing.

    `next` is None only on the last page. `results` keeps server order.
    """
    count: int
    results: List[T]
    next: Optional[Cursor] = None
    previous: Optional[Cursor] = None

    @property
    def has_next(self) -> bool:
        return self.next is not None

    @classmethod
    def from_api(cls, data: ApiPayload, item_parser: Callable[[ApiPayload], T]) -> "Page[T]":
        return cls(
            count=int(data.get("count", 0)),
            results=[item_parser(item) for item in data.get("results", [])],
            next=data.get("next"),
            previous=data.get("previous"),
        )


@dataclass
class CrawlResult(Generic[T]):
    """Every page of a listing the crawler managed to collect.

    `count` is the server-reported total, which may exceed `len(items)` when
    the page ceiling was hit.
    """
    items: List[T]
    count: int
    pages_fetched: int
    truncated: bool = False

    @property
    def is_complete(self) -> bool:
        return len(self.items) >= self.count


# --- Poets ---

@dataclass
class Poet:
    id: ResourceId
    name: str
    century: str
    image: Optional[str] = None
    poems_count: int = 0
    image_slug: Optional[str] = None

    @classmethod
    def from_api(cls, data: ApiPayload) -> "Poet":
        return cls(
            id=ResourceId(data["id"]),
            name=data.get("name", ""),
            century=data.get("century", ""),
            image=data.get("image"),
            poems_count=int(data.get("poems_count") or 0),
            image_slug=data.get("image_slug"),
        )


@dataclass
class PoetDetail(Poet):
    description: str = ""
    century_display: str = ""
    categories_count: int = 0

    @classmethod
    def from_api(cls, data: ApiPayload) -> "PoetDetail":
        base = Poet.from_api(data)
        return cls(
            **vars(base),
            description=data.get("description") or "",
            century_display=data.get("century_display") or "",
            categories_count=int(data.get("categories_count") or 0),
        )


# --- Categories ---

@dataclass
class Category:
    id: ResourceId
    title: str
    poet: ResourceId
    poet_name: str = ""
    parent: Optional[ResourceId] = None
    parent_title: Optional[str] = None
    poems_count: int = 0
    url: Optional[str] = None

    @classmethod
    def from_api(cls, data: ApiPayload) -> "Category":
        return cls(
            id=ResourceId(data["id"]),
            title=data.get("title", ""),
            poet=ResourceId(data.get("poet", 0)),
            poet_name=data.get("poet_name") or "",
            parent=data.get("parent"),
            parent_title=data.get("parent_title"),
            poems_count=int(data.get("poems_count") or 0),
            url=data.get("url"),
        )


@dataclass
class CategoryDetail(Category):
    children: List[Category] = field(default_factory=list)
    breadcrumbs: str = ""

    @classmethod
    def from_api(cls, data: ApiPayload) -> "CategoryDetail":
        base = Category.from_api(data)
        children = [Category.from_api(child) for child in data.get("children") or [] if isinstance(child, dict)]
        return cls(**vars(base), children=children, breadcrumbs=data.get("breadcrumbs") or "")


# --- Poems & Verses ---

@dataclass
class Verse:
    """One line of a poem.

    `position` is kept as the raw integer code so that codes outside the
    known vocabulary still reach the layout engine.
    """
    id: ResourceId
    poem: ResourceId
    order: int
    position: int
    text: str
    position_display: str = ""

    @classmethod
    def from_api(cls, data: ApiPayload) -> "Verse":
        return cls(
            id=ResourceId(data["id"]),
            poem=ResourceId(data.get("poem", 0)),
            order=int(data.get("order", 0)),
            position=int(data.get("position", 0)),
            text=data.get("text", ""),
            position_display=data.get("position_display") or "",
        )


@dataclass
class Poem:
    id: ResourceId
    title: str
    category: ResourceId
    category_title: str = ""
    poet_name: str = ""
    verses_count: int = 0
    url: Optional[str] = None

    @classmethod
    def from_api(cls, data: ApiPayload) -> "Poem":
        return cls(
            id=ResourceId(data["id"]),
            title=data.get("title", ""),
            category=ResourceId(data.get("category", 0)),
            category_title=data.get("category_title") or "",
            poet_name=data.get("poet_name") or "",
            verses_count=int(data.get("verses_count") or 0),
            url=data.get("url"),
        )


@dataclass
class PoemDetail(Poem):
    poet_id: Optional[ResourceId] = None
    verses: List[Verse] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: ApiPayload) -> "PoemDetail":
        base = Poem.from_api(data)
        return cls(
            **vars(base),
            poet_id=data.get("poet_id"),
            verses=[Verse.from_api(v) for v in data.get("verses") or []],
        )


# --- Audio ---

@dataclass
class PoemAudio:
    id: ResourceId
    poem: ResourceId
    poem_title: str = ""
    file_url: str = ""
    download_url: str = ""
    description: Optional[str] = None
    is_direct: bool = False
    is_uploaded: bool = False

    @classmethod
    def from_api(cls, data: ApiPayload) -> "PoemAudio":
        return cls(
            id=ResourceId(data["id"]),
            poem=ResourceId(data.get("poem", 0)),
            poem_title=data.get("poem_title") or "",
            file_url=data.get("file_url") or "",
            download_url=data.get("download_url") or "",
            description=data.get("description"),
            is_direct=bool(data.get("is_direct", False)),
            is_uploaded=bool(data.get("is_uploaded", False)),
        )


@dataclass
class AudioSync:
    id: ResourceId
    poem: ResourceId
    audio: ResourceId
    verse_order: int
    millisec: int
    verse_text: str = ""

    @classmethod
    def from_api(cls, data: ApiPayload) -> "AudioSync":
        return cls(
            id=ResourceId(data["id"]),
            poem=ResourceId(data.get("poem", 0)),
            audio=ResourceId(data.get("audio", 0)),
            verse_order=int(data.get("verse_order", 0)),
            millisec=int(data.get("millisec", 0)),
            verse_text=data.get("verse_text") or "",
        )


# --- User data ---

@dataclass
class Favorite:
    id: ResourceId
    poem: ResourceId
    verse: ResourceId
    poem_title: str = ""
    verse_text: str = ""
    poet_name: str = ""
    created_at: Optional[str] = None

    @classmethod
    def from_api(cls, data: ApiPayload) -> "Favorite":
        return cls(
            id=ResourceId(data["id"]),
            poem=ResourceId(data.get("poem", 0)),
            verse=ResourceId(data.get("verse", 0)),
            poem_title=data.get("poem_title") or "",
            verse_text=data.get("verse_text") or "",
            poet_name=data.get("poet_name") or "",
            created_at=data.get("created_at"),
        )


@dataclass
class UserSetting:
    id: ResourceId
    username: str = ""
    view_mode: str = ""
    font_size: int = 0
    show_line_numbers: bool = True
    last_highlight: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)  # the *_button_visible toggles

    @classmethod
    def from_api(cls, data: ApiPayload) -> "UserSetting":
        known = {"id", "user", "username", "view_mode", "font_size", "show_line_numbers", "last_highlight"}
        return cls(
            id=ResourceId(data["id"]),
            username=data.get("username") or "",
            view_mode=data.get("view_mode") or "",
            font_size=int(data.get("font_size") or 0),
            show_line_numbers=bool(data.get("show_line_numbers", True)),
            last_highlight=data.get("last_highlight"),
            extra={k: v for k, v in data.items() if k not in known},
        )
