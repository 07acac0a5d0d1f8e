"""
Rendering helpers for answers and choices
"""
from datetime import datetime
from zoneinfo import ZoneInfo

PLATFORM_NAMES = {
    "INSTAGRAM": "Instagram",
    "MESSENGER": "Messenger",
}


def render_date(date: datetime, timezone: str = "UTC") -> str:
    """Returns the date as e.g. "March 5, 2024" in the given timezone."""
    local = date.astimezone(ZoneInfo(timezone))
    return f"{local:%B} {local.day}, {local.year}"


def render_platform(platform: str) -> str:
    """Returns a display name for a platform tag."""
    return PLATFORM_NAMES.get(platform, platform.replace("_", " ").title())
