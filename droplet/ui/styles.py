"""Themes, accent colours and the QSS stylesheet for droplet."""

from __future__ import annotations

from dataclasses import dataclass

from ..timer.engine import Phase


@dataclass(frozen=True)
class ThemeDef:
    name: str
    background: str
    work_accent: str
    break_accent: str
    text: str


# ── theme table ──────────────────────────────────────────────────────────
#    Grouped: neutral, warm, pink/purple, blue, green.

THEMES: dict[str, ThemeDef] = {
    t.name: t
    for t in (
        ThemeDef("Dark",    "#1E1E1E", "#81A1C1", "#A3BE8C", "#E0E0E0"),
        ThemeDef("Noir",    "#000000", "#7D7D7D", "#4B4B4B", "#BFBFBF"),
        ThemeDef("Light",   "#F5F5F5", "#5D8AA8", "#6B8E23", "#333333"),
        ThemeDef("Beige",   "#F5F1E4", "#8B5E3C", "#A68A64", "#4A3728"),
        ThemeDef("Linen",   "#F5F1E4", "#1C2E4A", "#3E5C76", "#1C2E4A"),
        ThemeDef("Poppy",   "#FFE4E9", "#FF6B6B", "#FF8FA3", "#8B2942"),
        ThemeDef("Blossom", "#FFF0F5", "#DB7093", "#EAB8C5", "#5F3E49"),
        ThemeDef("Velvet",  "#2F2A44", "#A76D99", "#6F4C7A", "#E8BFD1"),
        ThemeDef("Plum",    "#5C4B8A", "#A77BCA", "#D6A6E0", "#EAD1E5"),
        ThemeDef("Navy",    "#1C2E4A", "#F5F1E4", "#E8E4D5", "#F5F1E4"),
        ThemeDef("Royal",   "#0F1826", "#D7C49E", "#E0D5B6", "#E0D5B6"),
        ThemeDef("Teal",    "#008080", "#48D1CC", "#7FFFD4", "#E0FFFF"),
        ThemeDef("Frog",    "#E8F3E8", "#2D5A27", "#7FB069", "#1B3022"),
        ThemeDef("Leaf",    "#051907", "#2D5A27", "#558B2F", "#E8F5E9"),
        ThemeDef("Emerald", "#0D2B1D", "#6B8F71", "#AEC3B0", "#E3EFD3"),
    )
}

DEFAULT_THEME = "Dark"


def get_theme(name: str) -> ThemeDef:
    """Theme by name; unknown names fall back to Dark."""
    return THEMES.get(name, THEMES[DEFAULT_THEME])


def accent_for(theme: ThemeDef, phase: Phase) -> str:
    """Work phases use the work accent, both break kinds the break accent."""
    return theme.break_accent if phase.is_break else theme.work_accent


def with_alpha(hex_colour: str, alpha: float) -> str:
    """``#RRGGBB`` → ``rgba(r, g, b, a)`` for QSS."""
    value = hex_colour.lstrip("#")
    r, g, b = (int(value[i:i + 2], 16) for i in (0, 2, 4))
    return f"rgba({r}, {g}, {b}, {max(0.0, min(alpha, 1.0)):.2f})"


def build_stylesheet(theme: ThemeDef) -> str:
    """Window-level QSS.  Per-phase accents are applied by the widget."""
    return f"""
QWidget#dropletRoot {{
    background-color: {theme.background};
    border-radius: 12px;
}}
QLabel#timeLabel {{
    color: {theme.text};
    font-family: "Avenir Next";
    font-weight: 500;
}}
QProgressBar {{
    background-color: {with_alpha(theme.text, 0.2)};
    border: none;
    border-radius: 2px;
}}
QMenu {{
    background-color: {theme.background};
    color: {theme.text};
}}
QDialog {{
    background-color: {theme.background};
    color: {theme.text};
}}
QDialog QLabel, QDialog QCheckBox {{
    color: {theme.text};
}}
"""
