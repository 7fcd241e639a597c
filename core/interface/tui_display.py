"""Text width helpers with proper Unicode width handling."""

from wcwidth import wcwidth

ELLIPSIS = "…"


def display_width(text: str) -> int:
    """Return visual width of text accounting for wide/narrow characters."""
    width = 0
    for ch in text:
        w = wcwidth(ch)
        if w is None:
            w = 0
        width += max(0, w)
    return width


def trim_display(text: str, width: int) -> str:
    """Trim text so visible width doesn't exceed ``width``; marks the cut with an ellipsis."""
    if width <= 0:
        return ""
    if display_width(text) <= width:
        return text
    acc = []
    used = 0
    for ch in text:
        w = max(0, wcwidth(ch) or 0)
        if used + w > width - 1:
            break
        acc.append(ch)
        used += w
    return "".join(acc) + ELLIPSIS


__all__ = ["display_width", "trim_display", "ELLIPSIS"]
