# console_api/core/device.py

import re
import secrets

SESSION_ID_PREFIX = "sess_"

# order matters: Edge and Opera also advertise Chrome, Chrome advertises Safari
_BROWSERS = (
    ("Edge", re.compile(r"Edg(?:e|A|iOS)?/", re.I)),
    ("Opera", re.compile(r"(?:OPR|Opera)/", re.I)),
    ("Firefox", re.compile(r"(?:Firefox|FxiOS)/", re.I)),
    ("Chrome", re.compile(r"(?:Chrome|CriOS)/", re.I)),
    ("Safari", re.compile(r"Version/[\d.]+.*Safari/", re.I)),
    ("curl", re.compile(r"^curl/", re.I)),
)

_OPERATING_SYSTEMS = (
    ("iOS", re.compile(r"iPhone|iPad|iPod", re.I)),
    ("Android", re.compile(r"Android", re.I)),
    ("Windows", re.compile(r"Windows", re.I)),
    ("macOS", re.compile(r"Mac OS X|Macintosh", re.I)),
    ("Chrome OS", re.compile(r"CrOS", re.I)),
    ("Linux", re.compile(r"Linux|X11", re.I)),
)

_TABLET = re.compile(r"iPad|Tablet|Android(?!.*Mobile)", re.I)
_MOBILE = re.compile(r"Mobile|iPhone|iPod", re.I)


def _first_match(user_agent: str, table) -> str | None:
    for name, pattern in table:
        if pattern.search(user_agent):
            return name
    return None


def describe_user_agent(user_agent: str | None) -> str:
    """Human label for a User-Agent, e.g. ``"Chrome on macOS (desktop)"``."""
    if not user_agent or not user_agent.strip():
        return "unknown"

    browser = _first_match(user_agent, _BROWSERS) or "Unknown Browser"
    os_name = _first_match(user_agent, _OPERATING_SYSTEMS) or "Unknown OS"

    if _TABLET.search(user_agent):
        device = "tablet"
    elif _MOBILE.search(user_agent):
        device = "mobile"
    else:
        device = "desktop"

    return f"{browser} on {os_name} ({device})"


def generate_session_id() -> str:
    return f"{SESSION_ID_PREFIX}{secrets.token_hex(16)}"
