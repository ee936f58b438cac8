"""Desktop colour themes. Colours are HSL triples as stored in ``custom_colors``."""

from __future__ import annotations

from dataclasses import dataclass

from shared.models.user_settings import DEFAULT_THEME


@dataclass(frozen=True)
class Theme:
    id: str
    name: str
    taskbar: str
    window: str
    desktop: str
    text: str
    accent: str
    dark: bool = False

    @property
    def colors(self) -> dict[str, str]:
        return {
            "taskbar": self.taskbar,
            "window": self.window,
            "desktop": self.desktop,
            "text": self.text,
            "accent": self.accent,
        }


THEMES: dict[str, Theme] = {
    theme.id: theme
    for theme in (
        Theme("classic", "Classic", "180 7% 75%", "180 7% 80%", "180 30% 35%", "0 0% 0%", "240 100% 25%"),
        Theme("dark", "Dark", "0 0% 18%", "0 0% 20%", "220 15% 12%", "0 0% 90%", "210 85% 50%", dark=True),
        Theme(
            "high-contrast",
            "High Contrast",
            "0 0% 0%",
            "0 0% 0%",
            "0 0% 0%",
            "0 0% 100%",
            "60 100% 50%",
        ),
        Theme("ocean", "Ocean", "200 30% 30%", "200 20% 40%", "200 40% 20%", "0 0% 95%", "180 60% 50%"),
    )
}


def get_theme(theme_id: str | None) -> Theme:
    """Unknown or missing ids fall back to the classic theme."""
    return THEMES.get(theme_id or DEFAULT_THEME, THEMES[DEFAULT_THEME])


def is_dark(theme_id: str | None) -> bool:
    return get_theme(theme_id).dark
