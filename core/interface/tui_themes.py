#!/usr/bin/env python3
"""TUI themes and styling."""

from typing import Dict

from prompt_toolkit.styles import Style


THEMES: Dict[str, Dict[str, str]] = {
    "dark-olive": {
        "": "#d7dfe6",
        "text": "#d7dfe6",
        "text.dim": "#97a0a9",
        "text.dimmer": "#6d717a",
        "text.done": "#6d717a strike",
        "text.active": "#9ad974",
        "selected": "bg:#3b3b3b #d7dfe6 bold",
        "highlight": "bg:#e06c75 #1e1e1e bold",
        "header": "#ffb347 bold",
        "header.dim": "#97a0a9 bold",
        "border": "#4b525a",
        "editor": "#e5c07b",
        "editor.cursor": "reverse",
        "priority.p1": "#e06c75 bold",
        "priority.p2": "#e5c07b",
        "priority.p3": "#97a0a9",
        "priority.p4": "#6d717a",
        "status": "bg:#2c2f33 #d7dfe6",
        "status.mode": "bg:#9ad974 #1e1e1e bold",
        "status.keys": "bg:#2c2f33 #e5c07b",
        "menu": "bg:#262a2e",
    },
    "dark-contrast": {
        "": "#e8eaec",
        "text": "#e8eaec",
        "text.dim": "#a7b0ba",
        "text.dimmer": "#6f757d",
        "text.done": "#6f757d strike",
        "text.active": "#b8f171",
        "selected": "bg:#3d4047 #e8eaec bold",
        "highlight": "bg:#ff6b6b #000000 bold",
        "header": "#ffb347 bold",
        "header.dim": "#a7b0ba bold",
        "border": "#5a6169",
        "editor": "#f0c674",
        "editor.cursor": "reverse",
        "priority.p1": "#ff6b6b bold",
        "priority.p2": "#f0c674",
        "priority.p3": "#a7b0ba",
        "priority.p4": "#6f757d",
        "status": "bg:#30343a #e8eaec",
        "status.mode": "bg:#b8f171 #000000 bold",
        "status.keys": "bg:#30343a #f0c674",
        "menu": "bg:#202327",
    },
}

DEFAULT_THEME = "dark-olive"


def get_theme_palette(theme: str) -> Dict[str, str]:
    """Get theme palette, falling back to default if theme not found."""
    base = THEMES.get(theme)
    if not base:
        base = THEMES[DEFAULT_THEME]
    return dict(base)


def build_style(theme: str) -> Style:
    palette = get_theme_palette(theme)
    return Style.from_dict(palette)
