"""
Shared style definitions for the generated documents.

A ``Theme`` bundles the colour palette, font sizes, column widths and page
margins so the handout generators and component builders never hard-code
them. Two presets ship: ``navy`` (the default) and ``slate``.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Dict, Optional

from docx.shared import Inches

from lessondocs.config import settings

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Palette:
    """Hex ``RRGGBB`` colours."""

    primary: str = "1B3A5F"        # navy
    primary_light: str = "D5E8F0"  # light blue
    white: str = "FFFFFF"
    light_gray: str = "F5F5F5"
    medium_gray: str = "666666"
    dark_gray: str = "333333"
    line_gray: str = "DDDDDD"
    border_gray: str = "CCCCCC"
    cream_yellow: str = "FFF9E6"
    soft_green: str = "E8F5E9"


@dataclasses.dataclass(frozen=True)
class FontSizes:
    """Font sizes in points."""

    title: float = 28
    heading_1: float = 16
    heading_2: float = 13
    subheading: float = 15
    body: float = 11
    body_small: float = 10
    caption: float = 9
    day_header: float = 18
    day_number: float = 14
    badge: float = 12
    student_title: float = 24


@dataclasses.dataclass(frozen=True)
class Theme:
    """Complete visual configuration for scratch-generated documents."""

    name: str
    palette: Palette = Palette()
    sizes: FontSizes = FontSizes()
    font: str = "Arial"
    # Content widths in inches (page width minus margins)
    teacher_page_width: float = 7.5
    student_page_width: float = 7.3
    teacher_margin: float = 0.5
    student_margin: float = 0.6
    # Table cell padding in twentieths of a point (top, bottom, left, right)
    cell_margins: tuple = (100, 100, 180, 180)
    accent_width: float = 0.12
    badge_width: float = 0.5
    border_size: int = 4
    # Underscores in a blank writing line
    line_length: int = 85

    # Layout widths ------------------------------------------------------

    def teacher_width(self, fraction: float = 1.0):
        return Inches(self.teacher_page_width * fraction)

    def student_width(self, fraction: float = 1.0):
        return Inches(self.student_page_width * fraction)

    @property
    def schedule_widths(self):
        """Time / Activity / Description columns of the schedule table."""
        return (Inches(0.8), Inches(1.5), Inches(self.teacher_page_width - 2.3))

    @property
    def day_banner_widths(self):
        return (Inches(1.0), Inches(self.teacher_page_width - 1.0))



NAVY_THEME = Theme(name="navy")

SLATE_THEME = Theme(
    name="slate",
    palette=Palette(
        primary="2F3E4E",
        primary_light="E3E9EF",
        cream_yellow="FDF6E3",
        soft_green="E6F2EA",
    ),
    font="Calibri",
)

THEMES: Dict[str, Theme] = {theme.name: theme for theme in (NAVY_THEME, SLATE_THEME)}


def get_theme(name: Optional[str] = None) -> Theme:
    """
    Resolve a theme preset by name.

    Args:
        name: Preset name; defaults to ``settings.DOCUMENT_THEME``

    Returns:
        The matching Theme, or the navy preset for unknown names
    """
    key = (name or settings.DOCUMENT_THEME or "").lower()
    theme = THEMES.get(key)
    if theme is None:
        logger.warning("Unknown document theme %r, using %r", key, NAVY_THEME.name)
        return NAVY_THEME
    return theme
