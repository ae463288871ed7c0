import re
from typing import Optional

# max-age and s-maxage are treated alike: whichever appears first wins
MAX_AGE_PATTERN = re.compile(r"(?:s-maxage|max-age)=([0-9]+)\b", re.IGNORECASE)


def extract_ttl(cache_control: Optional[str], default_ttl: int) -> int:
    """Seconds to keep a rendered page, taken from Cache-Control when it says so."""
    if not cache_control:
        return default_ttl
    match = MAX_AGE_PATTERN.search(cache_control)
    if match is None:
        return default_ttl
    return int(match.group(1))
