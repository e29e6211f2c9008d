"""Interface for interacting with the user (output only).

Defines the contract for displaying archive content, errors, warnings and
informational messages, allowing different UI implementations (e.g., console).
"""

import abc
from typing import Any, Sequence

from ganjoorcli.domain.models.catalog import (
    AudioSync, Category, Favorite, PoemAudio, UserSetting, Verse,
)
from ganjoorcli.domain.models.views import CategoryView, PoemView, PoetListing, PoetView


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user."""
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass

    @abc.abstractmethod
    def display_poets(self, listing: PoetListing) -> None:
        """Displays one page of the (filtered) poet set.

        Args:
            listing: The slice to show, with paging and completeness info.
        """
        pass

    @abc.abstractmethod
    def display_poet(self, view: PoetView) -> None:
        """Displays a poet's details and top-level categories."""
        pass

    @abc.abstractmethod
    def display_categories(self, categories: Sequence[Category], title: str = "Categories") -> None:
        """Displays a list of categories."""
        pass

    @abc.abstractmethod
    def display_category(self, view: CategoryView) -> None:
        """Displays a category with its poems and subcategories."""
        pass

    @abc.abstractmethod
    def display_poem(self, view: PoemView) -> None:
        """Renders a poem from its layout groups.

        Implementations must not re-derive grouping; everything needed is in
        the groups themselves.
        """
        pass

    def display_verses(self, verses: Sequence[Verse]) -> None:
        """Displays a flat verse listing."""
        pass

    def display_audios(self, audios: Sequence[PoemAudio], syncs: Sequence[AudioSync] = ()) -> None:
        """Displays audio recitations and their verse timings."""
        pass

    def display_favorites(self, favorites: Sequence[Favorite]) -> None:
        """Displays the user's favorite verses."""
        pass

    def display_settings(self, settings: UserSetting) -> None:
        """Displays the user's reader settings."""
        pass
