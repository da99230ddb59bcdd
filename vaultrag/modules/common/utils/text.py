"""Text cleanup applied before content reaches an embedding model or the database."""

import re

# C0 control characters except tab, line feed and carriage return.
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def sanitize_content(text: str) -> str:
    """Remove null bytes and other control characters that embedding APIs and databases reject."""
    return _CONTROL_CHARS.sub("", text)
