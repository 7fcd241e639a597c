"""Keybinding resolution: key notation parsing and the chord matcher.

Keys are plain strings using prompt_toolkit names (``"j"``, ``"c-d"``,
``"escape"``, ``"c-m"`` for Enter). Config files spell them as
``"<j>"``, ``"<ctrl-d>"``, ``"<esc>"``, ``"<enter>"``; a chord is a run
of them, e.g. ``"<g><g>"``.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Set, Tuple, Union

from core.actions import Action, Mode, action_from_name
from core.errors import ConfigError

logger = logging.getLogger("dome.keymap")

KeySequence = Tuple[str, ...]
Keymap = Dict[KeySequence, Action]
Keymaps = Dict[Mode, Keymap]

DEFAULT_SEQUENCE_TIMEOUT = 4  # ticks

_NAMED_KEYS: Dict[str, str] = {
    "enter": "c-m",
    "return": "c-m",
    "tab": "c-i",
    "backtab": "s-tab",
    "backspace": "c-h",
    "esc": "escape",
    "escape": "escape",
    "space": " ",
    "lt": "<",
    "gt": ">",
    "up": "up",
    "down": "down",
    "left": "left",
    "right": "right",
    "home": "home",
    "end": "end",
    "pageup": "pageup",
    "pagedown": "pagedown",
    "delete": "delete",
    "del": "delete",
    "insert": "insert",
}
_MODIFIERS = {"ctrl": "c", "c": "c", "shift": "s", "s": "s"}
_TOKEN_RE = re.compile(r"<([^<>]+)>")

DEFAULT_KEYBINDINGS: Dict[str, Dict[str, str]] = {
    "Global": {
        "<ctrl-c>": "Quit",
        "<q>": "Quit",
        "<ctrl-z>": "Suspend",
        "<ctrl-l>": "ClearScreen",
        "<?>": "Help",
    },
    "Navigation": {
        "<j>": "GoDown",
        "<down>": "GoDown",
        "<k>": "GoUp",
        "<up>": "GoUp",
        "<g><g>": "GoToTop",
        "<home>": "GoToTop",
        "<G>": "GoToBottom",
        "<end>": "GoToBottom",
        "<o>": "AddItemAfter",
        "<O>": "AddItemBefore",
        "<d><d>": "DeleteItem",
        "<delete>": "DeleteItem",
        "<e>": "EditItem",
        "<E>": "EditDescription",
        "<space>": "ToggleCompletion",
        "<+>": "IncreasePriority",
        "<->": "DecreasePriority",
        "<K>": "MoveItemUp",
        "<J>": "MoveItemDown",
        "<g><K>": "MoveItemTop",
        "<g><J>": "MoveItemBottom",
        "<enter>": "Select",
        "<l>": "Select",
        "<esc>": "Cancel",
        "<h>": "Cancel",
        "<s>": "OpenSortMenu",
        "<r>": "ToggleSortDirection",
    },
    "Insert": {},
}


def parse_key(token: str) -> str:
    """Normalize one key token (without angle brackets)."""
    raw = token.strip()
    if not raw:
        raise ConfigError("Empty key in keybinding")
    if len(raw) == 1:
        return raw
    lowered = raw.lower()
    if lowered in _NAMED_KEYS:
        return _NAMED_KEYS[lowered]
    if re.fullmatch(r"f\d{1,2}", lowered):
        return lowered
    if "-" in raw and not raw.endswith("-"):
        modifier, _, base = raw.partition("-")
        prefix = _MODIFIERS.get(modifier.lower())
        if prefix is None:
            raise ConfigError(f"Unknown modifier in key {token!r}")
        if prefix == "s" and len(base) == 1:
            return base.upper()
        base_key = parse_key(base)
        if prefix == "c" and base_key == "c-m":
            return "c-m"
        return f"{prefix}-{base_key.lower() if len(base_key) == 1 else base_key}"
    raise ConfigError(f"Unknown key {token!r}")


def parse_key_sequence(text: str) -> KeySequence:
    """``"<g><g>"`` -> ``("g", "g")``; a bare ``"gg"`` is read char by char."""
    raw = str(text)
    if "<" not in raw or raw == "<":
        if not raw:
            raise ConfigError("Empty key sequence")
        return tuple(raw)
    tokens = _TOKEN_RE.findall(raw)
    if not tokens or "".join(f"<{t}>" for t in tokens) != raw.strip():
        raise ConfigError(f"Malformed key sequence {text!r}")
    return tuple(parse_key(t) for t in tokens)


def build_keymaps(
    config: Mapping[str, Mapping[str, str]],
    overrides: Optional[Mapping[str, Mapping[str, str]]] = None,
) -> Keymaps:
    """Turn ``{"Navigation": {"<j>": "GoDown"}}`` into typed keymaps.

    ``overrides`` (the user config) win over ``config`` per key sequence.
    """
    keymaps: Keymaps = {mode: {} for mode in Mode}
    for source in (config, overrides or {}):
        for mode_name, bindings in source.items():
            try:
                mode = Mode(mode_name)
            except ValueError:
                raise ConfigError(f"Unknown keybinding mode {mode_name!r}") from None
            if not isinstance(bindings, Mapping):
                raise ConfigError(f"Keybindings for {mode_name} must be a mapping")
            for keys, action_name in bindings.items():
                keymaps[mode][parse_key_sequence(keys)] = action_from_name(action_name)
    return keymaps


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Pending:
    buffer: KeySequence
    ticks_left: int


MatcherState = Union[Idle, Pending]
IDLE = Idle()


class KeybindingMatcher:
    """Resolve raw keys into actions, with chords bounded by a tick deadline.

    The buffer is looked up in the global keymap first and the mode keymap
    second. An exact match fires immediately and resets to idle, so a binding
    that is also the start of a longer chord shadows that chord. The buffer
    stays pending only while it has no match but can still grow into one.
    A key that neither matches nor extends the pending chord drops the
    oldest buffered keys until the rest matches, extends a chord, or runs
    out.
    """

    def __init__(self, keymaps: Keymaps, timeout_ticks: int = DEFAULT_SEQUENCE_TIMEOUT):
        if timeout_ticks < 1:
            raise ConfigError("timeout_ticks must be >= 1")
        self.keymaps = keymaps
        self.timeout_ticks = timeout_ticks
        self._state: MatcherState = IDLE
        self._prefixes: Dict[Mode, Set[KeySequence]] = {
            mode: _proper_prefixes(keymap) for mode, keymap in keymaps.items()
        }
        for mode, keymap in keymaps.items():
            for keys in keymap:
                shadow = _shadowing_binding(keys, mode, keymaps)
                if shadow is not None:
                    logger.warning("binding %s in %s is unreachable behind %s", keys, mode.value, shadow)

    @property
    def state(self) -> MatcherState:
        return self._state

    @property
    def pending(self) -> KeySequence:
        return self._state.buffer if isinstance(self._state, Pending) else ()

    def feed(self, key: str, mode: Mode) -> Optional[Action]:
        buffer = self.pending + (key,)
        while buffer:
            action = self._lookup(buffer, mode)
            if action is not None:
                self._state = IDLE
                logger.debug("keys %s -> %s", buffer, action.variant)
                return action
            if self._is_prefix(buffer, mode):
                self._state = Pending(buffer, self.timeout_ticks)
                return None
            buffer = buffer[1:]
        self._state = IDLE
        return None

    def tick(self) -> None:
        state = self._state
        if not isinstance(state, Pending):
            return
        if state.ticks_left <= 1:
            logger.debug("discarding key sequence %s", state.buffer)
            self._state = IDLE
        else:
            self._state = Pending(state.buffer, state.ticks_left - 1)

    def cancel(self) -> None:
        self._state = IDLE

    def _modes(self, mode: Mode) -> Iterable[Mode]:
        if mode is Mode.GLOBAL:
            return (Mode.GLOBAL,)
        return (Mode.GLOBAL, mode)

    def _lookup(self, buffer: KeySequence, mode: Mode) -> Optional[Action]:
        for candidate in self._modes(mode):
            action = self.keymaps.get(candidate, {}).get(buffer)
            if action is not None:
                return action
        return None

    def _is_prefix(self, buffer: KeySequence, mode: Mode) -> bool:
        return any(buffer in self._prefixes.get(candidate, set()) for candidate in self._modes(mode))


def _shadowing_binding(keys: KeySequence, mode: Mode, keymaps: Keymaps) -> Optional[KeySequence]:
    modes = (Mode.GLOBAL,) if mode is Mode.GLOBAL else (Mode.GLOBAL, mode)
    for end in range(1, len(keys)):
        if any(keys[:end] in keymaps.get(candidate, {}) for candidate in modes):
            return keys[:end]
    return None


def _proper_prefixes(keymap: Keymap) -> Set[KeySequence]:
    prefixes: Set[KeySequence] = set()
    for sequence in keymap:
        for end in range(1, len(sequence)):
            prefixes.add(sequence[:end])
    return prefixes


__all__ = [
    "DEFAULT_KEYBINDINGS",
    "DEFAULT_SEQUENCE_TIMEOUT",
    "KeybindingMatcher",
    "Idle",
    "Pending",
    "IDLE",
    "parse_key",
    "parse_key_sequence",
    "build_keymaps",
]
