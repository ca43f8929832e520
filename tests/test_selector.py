"""Tests for the interactive selector."""

import pytest
from textual.widgets import Input, SelectionList

from pykill.options import SelectionOptions, resolve_options
from pykill.selector import (
    Selector,
    create_selector,
    height_css,
    match_positions,
    parse_margin,
    select,
    theme_css,
)

LINES = [
    "\x1b[31m bash\x1b[0m  \x1b[32m100\x1b[0m",
    "\x1b[31m  vim\x1b[0m  \x1b[32m200\x1b[0m",
    "\x1b[31m sshd\x1b[0m  \x1b[32m300\x1b[0m",
]


def test_height_css():
    """Test height options translate to CSS heights."""
    assert height_css("50%") == "50vh"
    assert height_css("100%") is None
    assert height_css("20") == "20"
    assert height_css("tall") == "50vh"


def test_parse_margin():
    """Test margin shorthand expands to (top, right, bottom, left)."""
    assert parse_margin("0%", 80, 24) == (0, 0, 0, 0)
    assert parse_margin("1", 80, 24) == (1, 1, 1, 1)
    assert parse_margin("1,2", 80, 24) == (1, 2, 1, 2)
    assert parse_margin("1,2,3", 80, 24) == (1, 2, 3, 2)
    assert parse_margin("50%,10%,0,5", 80, 24) == (12, 8, 0, 5)
    assert parse_margin("wide", 80, 24) == (0, 0, 0, 0)


def test_match_positions():
    """Test subsequence match offsets."""
    assert match_positions("bh", "bash") == [0, 3]
    assert match_positions("VI", "  vim") == [2, 3]
    assert match_positions("xyz", "bash") == []


def test_theme_css():
    """Test theme regions produce CSS rules."""
    css = theme_css({"info": 144, "current_bg": "#101010"})

    assert "#info" in css
    assert "#101010" in css
    assert theme_css({}) == ""


def test_create_selector_adds_user_bindings():
    """Test user bindings are attached to the selector class."""
    app = create_selector(LINES, resolve_options(["--bind=ctrl-a:select-all"]))

    assert isinstance(app, Selector)
    assert any(binding.key == "ctrl+a" for binding in type(app).BINDINGS)


def test_select_without_lines():
    """Test an empty corpus returns immediately with no selection."""
    assert select([], SelectionOptions()) == []


@pytest.mark.asyncio
async def test_selector_compose():
    """Test the selector composes its widgets."""
    app = create_selector(LINES)
    async with app.run_test() as pilot:
        assert pilot.app.query_one("#query", Input) is not None
        assert pilot.app.query_one("#matches", SelectionList).option_count == 3


@pytest.mark.asyncio
async def test_enter_accepts_highlighted_line():
    """Test enter with nothing toggled returns the highlighted line."""
    app = create_selector(LINES)
    async with app.run_test() as pilot:
        await pilot.press("down", "enter")

    assert app.return_value == [LINES[1]]


@pytest.mark.asyncio
async def test_escape_aborts():
    """Test escape exits with an empty selection."""
    app = create_selector(LINES)
    async with app.run_test() as pilot:
        await pilot.press("tab", "escape")

    assert app.return_value == []


@pytest.mark.asyncio
async def test_multi_select_keeps_toggle_order():
    """Test toggled lines are returned verbatim in toggle order."""
    app = create_selector(LINES)
    async with app.run_test() as pilot:
        await pilot.press("down", "tab")  # toggles vim, moves to sshd
        await pilot.press("up", "up", "tab")  # toggles bash
        await pilot.press("enter")

    assert app.return_value == [LINES[1], LINES[0]]


@pytest.mark.asyncio
async def test_toggle_twice_deselects():
    """Test toggling a line again removes it from the selection."""
    app = create_selector(LINES)
    async with app.run_test() as pilot:
        await pilot.press("tab", "shift+tab")  # bash on, vim on, back to bash
        assert pilot.app.chosen == [LINES[0], LINES[1]]
        await pilot.press("tab")  # bash off
        assert pilot.app.chosen == [LINES[1]]


@pytest.mark.asyncio
async def test_query_filters_lines():
    """Test typing narrows the list to fuzzy matches."""
    app = create_selector(LINES)
    async with app.run_test() as pilot:
        await pilot.press("v", "i", "m")
        await pilot.pause()

        assert pilot.app.matches == [LINES[1]]
        await pilot.press("enter")

    assert app.return_value == [LINES[1]]


@pytest.mark.asyncio
async def test_selection_survives_refiltering():
    """Test toggled lines stay chosen when the query changes."""
    app = create_selector(LINES)
    async with app.run_test() as pilot:
        await pilot.press("s", "s", "h")
        await pilot.pause()
        await pilot.press("tab")
        await pilot.press("backspace", "backspace", "backspace")
        await pilot.pause()

        assert len(pilot.app.matches) == 3
        assert pilot.app.query_one("#matches", SelectionList).selected == [2]
        await pilot.press("enter")

    assert app.return_value == [LINES[2]]


@pytest.mark.asyncio
async def test_no_match_accepts_nothing():
    """Test accepting with no matching lines returns an empty selection."""
    app = create_selector(LINES)
    async with app.run_test() as pilot:
        await pilot.press("z", "z", "z")
        await pilot.pause()

        assert pilot.app.matches == []
        await pilot.press("enter")

    assert app.return_value == []


@pytest.mark.asyncio
async def test_tac_reverses_input_order():
    """Test --tac reverses the list order."""
    app = create_selector(LINES, resolve_options(["--tac"]))
    async with app.run_test() as pilot:
        assert pilot.app.matches == list(reversed(LINES))


@pytest.mark.asyncio
async def test_no_sort_keeps_input_order():
    """Test --no-sort keeps input order among matches."""
    lines = ["vimdiff  10", "vim  20"]
    app = create_selector(lines, resolve_options(["--no-sort"]))
    async with app.run_test() as pilot:
        await pilot.press("v", "i", "m")
        await pilot.pause()

        assert pilot.app.matches == lines


@pytest.mark.asyncio
async def test_user_binding_select_all():
    """Test a user binding triggers its action."""
    app = create_selector(LINES, resolve_options(["--bind", "ctrl-a:select-all"]))
    async with app.run_test() as pilot:
        await pilot.press("ctrl+a", "enter")

    assert app.return_value == LINES


@pytest.mark.asyncio
async def test_inline_info_sits_on_prompt_row():
    """Test --inline-info places the info line on the prompt row."""
    app = create_selector(LINES, resolve_options(["--inline-info"]))
    async with app.run_test() as pilot:
        info = pilot.app.query_one("#info")
        assert info.parent.id == "prompt-row"


@pytest.mark.asyncio
async def test_reverse_list_puts_prompt_last():
    """Test the reverse-list layout puts the prompt below the list."""
    app = create_selector(LINES, resolve_options(["--layout=reverse-list"]))
    async with app.run_test() as pilot:
        frame = pilot.app.query_one("#frame")
        assert frame.children[-1].id == "prompt-row"
        assert frame.children[0].id == "matches"


@pytest.mark.asyncio
async def test_default_layout_puts_prompt_first():
    """Test the forced reverse layout puts the prompt above the list."""
    app = create_selector(LINES)
    async with app.run_test() as pilot:
        frame = pilot.app.query_one("#frame")
        assert frame.children[0].id == "prompt-row"
