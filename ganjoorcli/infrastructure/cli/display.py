"""Console implementation of the UserInterface using rich.

Listings become tables, details become panels, and poems are drawn straight
from their layout groups: couplets in two columns with the first hemistich on
the right, centered verses centered, annotations dimmed, prose justified.
"""

import logging
from typing import Any, Optional, Sequence

from rich.align import Align
from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ganjoorcli.domain.interfaces.user_interface import UserInterface
from ganjoorcli.domain.models.catalog import (
    AudioSync, Category, Favorite, PoemAudio, UserSetting, Verse,
)
from ganjoorcli.domain.models.layout import Alignment, LayoutGroup, Weight
from ganjoorcli.domain.models.views import CategoryView, PoemView, PoetListing, PoetView

logger = logging.getLogger(__name__)

DIMMED_STYLE = "dim italic"


def render_group(group: LayoutGroup, show_numbers: bool = True) -> RenderableType:
    """Builds the renderable for one layout group from its alignment and weight."""
    style = DIMMED_STYLE if group.weight == Weight.DIMMED else ""
    number = str(group.number) if (show_numbers and group.number is not None) else ""

    if group.alignment == Alignment.SPLIT and len(group.verses) == 2:
        first, second = group.verses
        grid = Table.grid(expand=True, padding=(0, 2))
        grid.add_column(justify="left", ratio=1)
        grid.add_column(justify="right", ratio=1)
        grid.add_column(justify="right", width=4, style="dim")
        # Right-to-left: the first hemistich sits in the right-hand column
        grid.add_row(Text(second.text, style=style), Text(first.text, style=style), number)
        return grid

    text = Text(group.verses[0].text, style=style)
    if group.alignment == Alignment.JUSTIFY:
        text.justify = "full"
        body: RenderableType = text
    else:
        body = Align.center(text)

    grid = Table.grid(expand=True)
    grid.add_column(ratio=1)
    grid.add_column(justify="right", width=4, style="dim")
    grid.add_row(body, number)
    return grid


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console()

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    @console.setter
    def console(self, value: Console) -> None:
        self._console = value

    # --- Messages ---

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style."""
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message."""
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message."""
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    # --- Poets ---

    def display_poets(self, listing: PoetListing) -> None:
        title = f"Poets (page {listing.page}/{listing.total_pages}, {listing.total_matches} matches)"
        table = Table(title=title, box=ROUNDED, border_style="cyan", padding=(0, 1))
        table.add_column("ID", style="cyan", justify="right")
        table.add_column("Name", style="bold")
        table.add_column("Century")
        table.add_column("Poems", justify="right")
        for poet in listing.poets:
            table.add_row(str(poet.id), poet.name, poet.century, str(poet.poems_count))
        self.console.print(table)

    def display_poet(self, view: PoetView) -> None:
        poet = view.poet
        details = Text()
        details.append(f"{poet.century_display or poet.century}\n", style="cyan")
        details.append(f"{poet.poems_count} poems, {poet.categories_count} categories\n", style="dim")
        if poet.description:
            details.append(f"\n{poet.description}")
        self.console.print(Panel(details, title=f"[bold]{poet.name}[/bold]", box=ROUNDED, border_style="cyan"))
        if view.categories:
            self.display_categories(view.categories, title="Works")

    # --- Categories ---

    def display_categories(self, categories: Sequence[Category], title: str = "Categories") -> None:
        table = Table(title=title, box=ROUNDED, border_style="cyan", padding=(0, 1))
        table.add_column("ID", style="cyan", justify="right")
        table.add_column("Title", style="bold")
        table.add_column("Poet")
        table.add_column("Poems", justify="right")
        for category in categories:
            table.add_row(str(category.id), category.title, category.poet_name, str(category.poems_count))
        self.console.print(table)

    def display_category(self, view: CategoryView) -> None:
        category = view.category
        subtitle = category.breadcrumbs or category.poet_name
        self.console.print(Panel(
            Text(f"{category.poems_count} poems", style="dim"),
            title=f"[bold]{category.title}[/bold]",
            subtitle=subtitle or None,
            box=ROUNDED,
            border_style="cyan",
        ))
        if view.subcategories:
            self.display_categories(view.subcategories, title="Sections")
        if view.poems:
            table = Table(title="Poems", box=ROUNDED, border_style="cyan", padding=(0, 1))
            table.add_column("ID", style="cyan", justify="right")
            table.add_column("Title", style="bold")
            table.add_column("Verses", justify="right")
            for poem in view.poems:
                table.add_row(str(poem.id), poem.title, str(poem.verses_count))
            self.console.print(table)

    # --- Poems ---

    def display_poem(self, view: PoemView) -> None:
        poem = view.poem
        logger.debug(f"Rendering poem {poem.id} with {len(view.groups)} groups")
        body = Group(*(render_group(group, view.show_numbers) for group in view.groups))
        self.console.print(Panel(
            body,
            title=f"[bold]{poem.title}[/bold]",
            subtitle=f"{poem.poet_name} · {poem.category_title}",
            box=ROUNDED,
            border_style="cyan",
            padding=(1, 2),
        ))

    def display_verses(self, verses: Sequence[Verse]) -> None:
        table = Table(box=SIMPLE, padding=(0, 1))
        table.add_column("Order", style="cyan", justify="right")
        table.add_column("Position", justify="right")
        table.add_column("Text")
        for verse in verses:
            table.add_row(str(verse.order), verse.position_display or str(verse.position), verse.text)
        self.console.print(table)

    def display_audios(self, audios: Sequence[PoemAudio], syncs: Sequence[AudioSync] = ()) -> None:
        table = Table(title="Recitations", box=ROUNDED, border_style="cyan", padding=(0, 1))
        table.add_column("ID", style="cyan", justify="right")
        table.add_column("Description")
        table.add_column("Download")
        for audio in audios:
            table.add_row(str(audio.id), audio.description or "", audio.download_url or audio.file_url)
        self.console.print(table)
        if syncs:
            timing = Table(title="Verse timings", box=SIMPLE, padding=(0, 1))
            timing.add_column("Verse", style="cyan", justify="right")
            timing.add_column("At", justify="right")
            timing.add_column("Text")
            for sync in syncs:
                seconds = sync.millisec / 1000
                timing.add_row(str(sync.verse_order), f"{seconds:.1f}s", sync.verse_text)
            self.console.print(timing)

    # --- User data ---

    def display_favorites(self, favorites: Sequence[Favorite]) -> None:
        if not favorites:
            self.display_info("You have no favorites yet.")
            return
        table = Table(title="Favorites", box=ROUNDED, border_style="cyan", padding=(0, 1))
        table.add_column("ID", style="cyan", justify="right")
        table.add_column("Poem", style="bold")
        table.add_column("Poet")
        table.add_column("Verse")
        for favorite in favorites:
            table.add_row(str(favorite.id), favorite.poem_title, favorite.poet_name, favorite.verse_text)
        self.console.print(table)

    def display_settings(self, settings: UserSetting) -> None:
        table = Table(show_header=False, box=SIMPLE, padding=(0, 1))
        table.add_column("Setting", style="cyan")
        table.add_column("Value")
        table.add_row("User", settings.username)
        table.add_row("View mode", settings.view_mode)
        table.add_row("Font size", str(settings.font_size))
        table.add_row("Line numbers", "on" if settings.show_line_numbers else "off")
        for key, value in sorted(settings.extra.items()):
            table.add_row(key, str(value))
        self.console.print(table)
