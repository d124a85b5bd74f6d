import asyncio
from urllib.parse import parse_qs, urlparse


def run_async(coro):
    """Helper to run async code in sync Django views."""
    return asyncio.run(coro)


def coerce_age(value) -> int:
    """Best-effort numeric age; anything unparsable becomes 0."""
    if isinstance(value, bool) or value is None:
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def split_display_name(display_name):
    """Split "First Last Names" into ("First", "Last Names")."""
    first, _, last = (display_name or "").strip().partition(" ")
    return first, last.strip()


def extract_oob_code(link: str):
    """Pull the one-time action code out of a Firebase action link."""
    query = parse_qs(urlparse(link).query)
    codes = query.get("oobCode")
    return codes[0] if codes else None
