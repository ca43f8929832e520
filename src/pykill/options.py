"""Selector configuration for pykill."""

import logging
import os
import re
import shlex
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)

OPTIONS_ENV = "PYKILL_DEFAULT_OPTIONS"

DEFAULT_MARGIN = "0%"
DEFAULT_HEIGHT = "50%"
DEFAULT_LAYOUT = "default"
DEFAULT_THEME = (
    "matched:108,matched_bg:0,current:254,current_bg:236,current_match:151,"
    "current_match_bg:236,spinner:148,info:144,prompt:110,cursor:161,"
    "selected:168,header:109,border:59"
)

LAYOUTS = ("default", "reverse", "reverse-list")

# fzf/skim action names -> Selector actions
ACTIONS = {
    "accept": "accept",
    "abort": "abort",
    "cancel": "abort",
    "toggle": "toggle",
    "toggle-up": "toggle_up",
    "toggle+up": "toggle_up",
    "toggle-down": "toggle_down",
    "toggle+down": "toggle_down",
    "toggle-all": "toggle_all",
    "select-all": "select_all",
    "deselect-all": "deselect_all",
    "up": "cursor_up",
    "down": "cursor_down",
    "first": "first",
    "top": "first",
    "last": "last",
    "clear-query": "clear_query",
}

KEY_ALIASES = {
    "esc": "escape",
    "btab": "shift+tab",
    "bspace": "backspace",
    "bs": "backspace",
    "pgup": "pageup",
    "page-up": "pageup",
    "pgdn": "pagedown",
    "page-down": "pagedown",
    "return": "enter",
    "del": "delete",
}

_KEY_RE = re.compile(r"^((ctrl|alt|shift)-)*([a-z0-9]|f[0-9]{1,2}|[a-z]+)$")
_HEX_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


@dataclass(slots=True, frozen=True)
class SelectionOptions:
    """Fully resolved selector configuration."""

    margin: str = DEFAULT_MARGIN
    height: str = DEFAULT_HEIGHT
    layout: str = DEFAULT_LAYOUT
    color: str = DEFAULT_THEME
    bind: tuple[str, ...] = ()
    tac: bool = False
    no_sort: bool = False
    inline_info: bool = False
    # Fixed policy: best match on top, multi-selection always on
    reverse: bool = True
    multi: bool = True

    @property
    def effective_layout(self) -> str:
        """Layout after applying the forced reverse flag."""
        if self.layout == "reverse-list":
            return "reverse-list"
        return "reverse" if self.reverse else self.layout


def _string_option(tokens: Sequence[str], flag: str, default: str, reject=None) -> str:
    """
    Resolve one string-valued option.

    A ``--flag=value`` token wins, then a standalone ``--flag`` followed by
    its value, then the default.
    """
    prefix = flag + "="
    for token in tokens:
        if token.startswith(prefix):
            value = token[len(prefix) :]
            if reject is None or not reject(value):
                return value

    for index, token in enumerate(tokens):
        if token == flag and index + 1 < len(tokens):
            value = tokens[index + 1]
            if reject is None or not reject(value):
                return value
            break

    return default


def _all_values(tokens: Sequence[str], flag: str) -> tuple[str, ...]:
    """Collect the value of every occurrence of ``flag``."""
    prefix = flag + "="
    values = []
    for index, token in enumerate(tokens):
        if token.startswith(prefix):
            values.append(token[len(prefix) :])
        elif token == flag and index + 1 < len(tokens):
            values.append(tokens[index + 1])
    return tuple(values)


def _flag(tokens: Sequence[str], flag: str) -> bool:
    return flag in tokens


def resolve_options(tokens: Sequence[str]) -> SelectionOptions:
    """Resolve selector options from an explicit list of override tokens."""
    tokens = list(tokens)

    layout = _string_option(tokens, "--layout", DEFAULT_LAYOUT)
    if layout not in LAYOUTS:
        logger.warning("Unknown layout %r, using %r", layout, DEFAULT_LAYOUT)
        layout = DEFAULT_LAYOUT

    return SelectionOptions(
        margin=_string_option(tokens, "--margin", DEFAULT_MARGIN),
        height=_string_option(tokens, "--height", DEFAULT_HEIGHT),
        layout=layout,
        color=_string_option(tokens, "--color", DEFAULT_THEME, reject=lambda v: "{}" in v),
        bind=_all_values(tokens, "--bind"),
        tac=_flag(tokens, "--tac"),
        no_sort=_flag(tokens, "--no-sort"),
        inline_info=_flag(tokens, "--inline-info"),
    )


def split_option_string(raw: str) -> list[str]:
    """Split a shell-style option string; unparsable input yields no tokens."""
    try:
        return shlex.split(raw)
    except ValueError as error:
        logger.warning("Ignoring %s: %s", OPTIONS_ENV, error)
        return []


def options_from_env(environ: Mapping[str, str] | None = None) -> SelectionOptions:
    """Resolve selector options from PYKILL_DEFAULT_OPTIONS."""
    if environ is None:
        environ = os.environ
    return resolve_options(split_option_string(environ.get(OPTIONS_ENV, "")))


def parse_theme(spec: str) -> dict[str, int | str]:
    """
    Parse a ``region:colour`` theme string.

    Colours are 256-colour indices or ``#rrggbb`` values. Entries that do not
    fit either form are ignored.
    """
    theme: dict[str, int | str] = {}
    for entry in spec.split(","):
        region, sep, value = entry.strip().partition(":")
        region = region.strip().replace("-", "_")
        value = value.strip()
        if not sep or not region:
            continue
        if value.isdigit() and 0 <= int(value) <= 255:
            theme[region] = int(value)
        elif _HEX_RE.match(value):
            theme[region] = value.lower()
        else:
            logger.debug("Ignoring theme entry %r", entry)
    return theme


def _key_name(key: str) -> str | None:
    """Translate an fzf-style key name into a textual key name."""
    key = key.strip().lower()
    if key in KEY_ALIASES:
        return KEY_ALIASES[key]
    if key == "space":
        return "space"
    if not _KEY_RE.match(key):
        return None
    return key.replace("-", "+")


def parse_bindings(specs: Sequence[str]) -> list[tuple[str, str]]:
    """
    Parse ``key:action`` bindings into ``(textual key, selector action)`` pairs.

    Each spec may hold several comma-separated bindings. Unknown keys and
    actions are dropped.
    """
    bindings: list[tuple[str, str]] = []
    for spec in specs:
        for entry in spec.split(","):
            key, sep, action = entry.partition(":")
            if not sep:
                logger.warning("Ignoring malformed binding %r", entry)
                continue
            key_name = _key_name(key)
            action_name = ACTIONS.get(action.strip().lower())
            if key_name is None or action_name is None:
                logger.warning("Ignoring unsupported binding %r", entry)
                continue
            bindings.append((key_name, action_name))
    return bindings
