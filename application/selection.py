"""Where the cursor lands after a list is reloaded from the store.

A list component announces the row it wants selected *before* it sends a
write (``expect``); the reload that follows the write consumes the hint.
Reloads of other scopes leave the hint alone.

Resolution order on ``reload``:

1. pending hint for this scope: the row carrying the hinted name when it is
   present, otherwise the hinted index clamped into range;
2. the selection remembered for the scope, clamped;
3. the first row;
4. nothing, when the list is empty.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional, Sequence

WORKSPACE_SCOPE = "workspaces"


@dataclass(frozen=True)
class SelectionHint:
    scope: Hashable
    index: int
    name: Optional[str] = None


def _clamp(index: int, length: int) -> int:
    return max(0, min(index, length - 1))


def _default_key(item: Any) -> str:
    return item.name


class SelectionTracker:
    def __init__(self):
        self._remembered: Dict[Hashable, int] = {}
        self._hint: Optional[SelectionHint] = None

    def expect(self, scope: Hashable, index: int, name: Optional[str] = None) -> None:
        self._hint = SelectionHint(scope, max(0, int(index)), name)

    def pending_hint(self, scope: Optional[Hashable] = None) -> Optional[SelectionHint]:
        if self._hint is None:
            return None
        if scope is not None and self._hint.scope != scope:
            return None
        return self._hint

    def remembered(self, scope: Hashable) -> Optional[int]:
        return self._remembered.get(scope)

    def navigate(self, scope: Hashable, index: Optional[int]) -> None:
        if index is None:
            self._remembered.pop(scope, None)
        else:
            self._remembered[scope] = index

    def discard_hint(self, scope: Hashable) -> None:
        if self._hint is not None and self._hint.scope == scope:
            self._hint = None

    def forget(self, scope: Hashable) -> None:
        self._remembered.pop(scope, None)
        self.discard_hint(scope)

    def reload(
        self,
        scope: Hashable,
        items: Sequence[Any],
        key: Callable[[Any], str] = _default_key,
    ) -> Optional[int]:
        hint = self.pending_hint(scope)
        if hint is not None:
            self._hint = None
        if not items:
            return None

        if hint is not None:
            index = _clamp(hint.index, len(items))
            if hint.name is not None:
                for position, item in enumerate(items):
                    if key(item) == hint.name:
                        index = position
                        break
        elif scope in self._remembered:
            index = _clamp(self._remembered[scope], len(items))
        else:
            index = 0
        self._remembered[scope] = index
        return index


__all__ = ["SelectionTracker", "SelectionHint", "WORKSPACE_SCOPE"]
