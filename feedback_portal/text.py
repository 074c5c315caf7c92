import re

from django.utils.html import strip_tags

_EXECUTABLE_BLOCK_RE = re.compile(
    r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL
)


def sanitize_text(value):
    """Trim and strip markup; script/style blocks are dropped with their bodies."""
    if not isinstance(value, str):
        return value
    value = _EXECUTABLE_BLOCK_RE.sub("", value)
    return strip_tags(value).strip()
