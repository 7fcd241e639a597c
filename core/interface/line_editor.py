"""Single-line text buffer driven by ``SendKeyEvent`` in insert mode."""

from typing import Optional

SUBMIT = "submit"
CANCEL = "cancel"

_BACKSPACE = {"c-h", "backspace"}
_SUBMIT = {"c-m", "c-j", "enter"}


class LineEditor:
    def __init__(self, text: str = ""):
        self.text = text
        self.cursor = len(text)

    def reset(self, text: str = "") -> None:
        self.text = text
        self.cursor = len(text)

    def handle_key(self, key: str, data: str = "") -> Optional[str]:
        """Apply one key; returns ``SUBMIT`` / ``CANCEL`` when editing ends."""
        if key in _SUBMIT:
            return SUBMIT
        if key == "escape":
            return CANCEL
        if key in _BACKSPACE:
            if self.cursor > 0:
                self.text = self.text[: self.cursor - 1] + self.text[self.cursor:]
                self.cursor -= 1
        elif key == "delete":
            self.text = self.text[: self.cursor] + self.text[self.cursor + 1:]
        elif key == "left":
            self.cursor = max(0, self.cursor - 1)
        elif key == "right":
            self.cursor = min(len(self.text), self.cursor + 1)
        elif key in ("home", "c-a"):
            self.cursor = 0
        elif key in ("end", "c-e"):
            self.cursor = len(self.text)
        elif key == "c-u":
            self.text = self.text[self.cursor:]
            self.cursor = 0
        elif key == "c-w":
            head = self.text[: self.cursor].rstrip()
            cut = head.rfind(" ") + 1
            self.text = self.text[:cut] + self.text[self.cursor:]
            self.cursor = cut
        else:
            char = data if data else key
            if len(char) == 1 and char.isprintable():
                self.insert(char)
        return None

    def insert(self, chars: str) -> None:
        self.text = self.text[: self.cursor] + chars + self.text[self.cursor:]
        self.cursor += len(chars)

    def split(self):
        """(before cursor, char under cursor or space, after cursor) for rendering."""
        before = self.text[: self.cursor]
        under = self.text[self.cursor] if self.cursor < len(self.text) else " "
        after = self.text[self.cursor + 1:]
        return before, under, after


__all__ = ["LineEditor", "SUBMIT", "CANCEL"]
