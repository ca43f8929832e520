"""pykill - interactive fuzzy multi-select built on Textual."""

import logging
import re
from collections.abc import Sequence

from rich.color import Color as RichColor
from rich.style import Style
from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.fuzzy import Matcher
from textual.widgets import Input, SelectionList, Static
from textual.widgets.selection_list import Selection

from pykill.options import SelectionOptions, parse_bindings, parse_theme

logger = logging.getLogger(__name__)

_PERCENT_RE = re.compile(r"^(\d{1,3})%$")


def to_css_color(value: int | str) -> str:
    """Convert a 256-colour index or hex value to a CSS colour."""
    if isinstance(value, int):
        return RichColor.from_ansi(value).get_truecolor().hex
    return value


def to_rich_color(value: int | str) -> RichColor:
    if isinstance(value, int):
        return RichColor.from_ansi(value)
    return RichColor.parse(value)


def height_css(height: str) -> str | None:
    """
    Translate a height option into a CSS height.

    Returns None when the selector should take the whole screen.
    """
    height = height.strip()
    match = _PERCENT_RE.match(height)
    if match:
        percent = int(match.group(1))
        if percent >= 100:
            return None
        return f"{max(percent, 1)}vh"
    if height.isdigit() and int(height) > 0:
        return height
    logger.warning("Invalid height %r, using 50%%", height)
    return "50vh"


def parse_margin(margin: str, width: int, height: int) -> tuple[int, int, int, int]:
    """
    Resolve a margin option into (top, right, bottom, left) cells.

    Accepts one to four comma-separated values in the TRBL shorthand, each
    either a cell count or a percentage of the terminal size.
    """
    parts = [part.strip() for part in margin.split(",") if part.strip()]
    if not 1 <= len(parts) <= 4:
        return (0, 0, 0, 0)

    # Expand shorthand the same way CSS does
    if len(parts) == 1:
        parts = parts * 4
    elif len(parts) == 2:
        parts = [parts[0], parts[1], parts[0], parts[1]]
    elif len(parts) == 3:
        parts = [parts[0], parts[1], parts[2], parts[1]]

    cells = []
    for index, part in enumerate(parts):
        total = height if index % 2 == 0 else width
        match = _PERCENT_RE.match(part)
        if match:
            cells.append(total * min(int(match.group(1)), 100) // 100)
        elif part.isdigit():
            cells.append(int(part))
        else:
            logger.warning("Invalid margin %r, ignoring", margin)
            return (0, 0, 0, 0)
    return (cells[0], cells[1], cells[2], cells[3])


def match_positions(query: str, candidate: str) -> list[int]:
    """Return the offsets of a greedy case-insensitive subsequence match."""
    positions = []
    lowered = candidate.lower()
    start = 0
    for char in query.lower():
        if char.isspace():
            continue
        found = lowered.find(char, start)
        if found == -1:
            return []
        positions.append(found)
        start = found + 1
    return positions


def theme_css(theme: dict[str, int | str]) -> str:
    """Build the CSS for the colour regions the selector draws."""
    rules = []
    current = []
    if "current" in theme:
        current.append(f"color: {to_css_color(theme['current'])};")
    if "current_bg" in theme:
        current.append(f"background: {to_css_color(theme['current_bg'])};")
    if current:
        rules.append(
            "#matches > .option-list--option-highlighted { " + " ".join(current) + " }"
        )
    if "info" in theme:
        rules.append(f"#info {{ color: {to_css_color(theme['info'])}; }}")
    if "prompt" in theme:
        rules.append(f"#prompt {{ color: {to_css_color(theme['prompt'])}; }}")
    if "cursor" in theme:
        rules.append(
            f"#query > .input--cursor {{ background: {to_css_color(theme['cursor'])}; }}"
        )
    if "selected" in theme:
        rules.append(
            "#matches > .selection-list--button-selected "
            f"{{ color: {to_css_color(theme['selected'])}; }}"
        )
    return "\n".join(rules)


class Selector(App[list[str]]):
    """
    Fuzzy-filterable multi-select list.

    Exits with the chosen lines verbatim, in the order they were toggled on,
    or with an empty list when the operator aborts.
    """

    ENABLE_COMMAND_PALETTE = False

    CSS = """
    Screen {
        layout: vertical;
    }

    #frame {
        height: 1fr;
    }

    #prompt-row {
        height: 1;
    }

    #prompt {
        width: 2;
    }

    #query {
        border: none;
        height: 1;
        padding: 0;
        width: 1fr;
    }

    #info {
        height: 1;
        width: auto;
    }

    #matches {
        border: none;
        height: 1fr;
        padding: 0;
    }
    """

    BINDINGS = [
        Binding("enter", "accept", "Accept", show=False, priority=True),
        Binding("escape", "abort", "Abort", show=False, priority=True),
        Binding("ctrl+c", "abort", show=False, priority=True),
        Binding("ctrl+g", "abort", show=False, priority=True),
        Binding("ctrl+q", "abort", show=False, priority=True),
        Binding("tab", "toggle_down", "Toggle", show=False, priority=True),
        Binding("shift+tab", "toggle_up", show=False, priority=True),
        Binding("up", "cursor_up", show=False, priority=True),
        Binding("down", "cursor_down", show=False, priority=True),
        Binding("ctrl+p", "cursor_up", show=False, priority=True),
        Binding("ctrl+n", "cursor_down", show=False, priority=True),
    ]

    def __init__(self, lines: Sequence[str], options: SelectionOptions | None = None) -> None:
        """
        Initialize the Selector.

        Args:
            lines: Corpus lines, possibly ANSI coloured.
            options: Resolved selector options.
        """
        super().__init__()
        self._options = options or SelectionOptions()
        self._lines = list(lines)
        self._texts = [Text.from_ansi(line) for line in self._lines]
        self._plain = [text.plain for text in self._texts]
        self._order = list(range(len(self._lines)))
        if self._options.tac:
            self._order.reverse()
        self._matches: list[int] = list(self._order)
        # dict keeps toggle order
        self._chosen: dict[int, None] = {}

        theme = parse_theme(self._options.color)
        self._match_style = Style(
            color=to_rich_color(theme["matched"]) if "matched" in theme else None,
            bgcolor=to_rich_color(theme["matched_bg"]) if "matched_bg" in theme else None,
            bold=True,
        )

    @property
    def matches(self) -> list[str]:
        """Lines matching the current query, in display order."""
        return [self._lines[index] for index in self._matches]

    @property
    def chosen(self) -> list[str]:
        """Lines toggled on, in toggle order."""
        return [self._lines[index] for index in self._chosen]

    def compose(self) -> ComposeResult:
        """Compose the selector layout."""
        prompt_row = Horizontal(
            Static("> ", id="prompt"),
            Input(id="query"),
            *([Static(id="info")] if self._options.inline_info else []),
            id="prompt-row",
        )
        info = [] if self._options.inline_info else [Static(id="info")]
        matches = SelectionList[int](id="matches")
        matches.can_focus = False

        if self._options.effective_layout == "reverse-list":
            yield Vertical(matches, *info, prompt_row, id="frame")
        else:
            yield Vertical(prompt_row, *info, matches, id="frame")

    def on_mount(self) -> None:
        """Apply the margin, focus the query and fill the list."""
        margin = parse_margin(self._options.margin, self.size.width, self.size.height)
        self.query_one("#frame", Vertical).styles.margin = margin
        self.query_one("#query", Input).focus()
        self._refresh_matches()

    def on_input_changed(self, event: Input.Changed) -> None:
        """Re-filter whenever the query changes."""
        self._refresh_matches()

    def _refresh_matches(self) -> None:
        """Re-rank the corpus against the query and rebuild the list."""
        query = self.query_one("#query", Input).value.strip()

        if query:
            matcher = Matcher(query, case_sensitive=False)
            scored = []
            for index in self._order:
                score = matcher.match(self._plain[index])
                if score > 0:
                    scored.append((score, index))
            if not self._options.no_sort:
                # sort() is stable, so ties keep input order
                scored.sort(key=lambda item: item[0], reverse=True)
            self._matches = [index for _, index in scored]
        else:
            self._matches = list(self._order)

        selection_list = self.query_one("#matches", SelectionList)
        selection_list.clear_options()
        selection_list.add_options(
            [
                Selection(self._prompt(index, query), index, index in self._chosen)
                for index in self._matches
            ]
        )
        if self._matches:
            selection_list.highlighted = 0
        self._refresh_info()

    def _prompt(self, index: int, query: str) -> Text:
        text = self._texts[index].copy()
        for offset in match_positions(query, self._plain[index]):
            text.stylize(self._match_style, offset, offset + 1)
        return text

    def _refresh_info(self) -> None:
        info = f"{len(self._matches)}/{len(self._lines)}"
        if self._chosen:
            info += f" ({len(self._chosen)})"
        if self._options.inline_info:
            info = f"  < {info}"
        self.query_one("#info", Static).update(info)

    def _current(self) -> int | None:
        """Corpus index of the highlighted line, if any."""
        selection_list = self.query_one("#matches", SelectionList)
        highlighted = selection_list.highlighted
        if highlighted is None or not self._matches:
            return None
        return selection_list.get_option_at_index(highlighted).value

    def _set_chosen(self, index: int, chosen: bool) -> None:
        selection_list = self.query_one("#matches", SelectionList)
        if chosen:
            self._chosen.setdefault(index, None)
            selection_list.select(index)
        else:
            self._chosen.pop(index, None)
            selection_list.deselect(index)

    def action_toggle(self) -> None:
        """Toggle the highlighted line."""
        index = self._current()
        if index is not None:
            self._set_chosen(index, index not in self._chosen)
            self._refresh_info()

    def action_toggle_down(self) -> None:
        """Toggle the highlighted line and move down."""
        self.action_toggle()
        self.action_cursor_down()

    def action_toggle_up(self) -> None:
        """Toggle the highlighted line and move up."""
        self.action_toggle()
        self.action_cursor_up()

    def action_toggle_all(self) -> None:
        """Invert the selection state of every matching line."""
        for index in self._matches:
            self._set_chosen(index, index not in self._chosen)
        self._refresh_info()

    def action_select_all(self) -> None:
        """Select every matching line."""
        for index in self._matches:
            self._set_chosen(index, True)
        self._refresh_info()

    def action_deselect_all(self) -> None:
        """Deselect every matching line."""
        for index in self._matches:
            self._set_chosen(index, False)
        self._refresh_info()

    def action_cursor_down(self) -> None:
        self.query_one("#matches", SelectionList).action_cursor_down()

    def action_cursor_up(self) -> None:
        self.query_one("#matches", SelectionList).action_cursor_up()

    def action_first(self) -> None:
        if self._matches:
            self.query_one("#matches", SelectionList).highlighted = 0

    def action_last(self) -> None:
        if self._matches:
            self.query_one("#matches", SelectionList).highlighted = len(self._matches) - 1

    def action_clear_query(self) -> None:
        self.query_one("#query", Input).value = ""

    def action_accept(self) -> None:
        """Exit with the chosen lines, or the highlighted line if none are chosen."""
        if self._chosen:
            self.exit(self.chosen)
            return
        index = self._current()
        self.exit([self._lines[index]] if index is not None else [])

    def action_abort(self) -> None:
        """Exit without a selection."""
        self.exit([])


def create_selector(lines: Sequence[str], options: SelectionOptions | None = None) -> Selector:
    """
    Build a Selector carrying the theme and user key bindings from ``options``.

    Textual reads CSS and BINDINGS from the class, so they are attached to a
    per-run subclass.
    """
    options = options or SelectionOptions()
    bindings = [
        Binding(key, action, show=False, priority=True)
        for key, action in parse_bindings(options.bind)
    ]
    css = Selector.CSS + "\n" + theme_css(parse_theme(options.color))
    inline_height = height_css(options.height)
    if inline_height is not None:
        css += f"\nScreen:inline {{ height: {inline_height}; }}"

    selector_class = type("Selector", (Selector,), {"CSS": css, "BINDINGS": bindings})
    return selector_class(lines, options)


def select(lines: Sequence[str], options: SelectionOptions | None = None) -> list[str]:
    """
    Run the interactive selector over ``lines``.

    Blocks until the operator accepts or aborts. Returns the selected lines
    verbatim, or an empty list on abort or when there is nothing to select.
    """
    if not lines:
        return []
    options = options or SelectionOptions()
    app = create_selector(lines, options)
    result = app.run(inline=height_css(options.height) is not None, mouse=False)
    return list(result or [])
