import re

TAG_RE = re.compile(r"<[^>]*>")
PERCENT_OCTET_RE = re.compile(r"%[a-f0-9]{2}", re.IGNORECASE)
WHITESPACE_RE = re.compile(r"[\r\n\t ]+")


def sanitize_text_field(value) -> str:
    """
    Clean a single-line text value submitted by a visitor or an admin.

    Strips markup, percent-encoded octets, and control whitespace, then
    collapses runs of whitespace and trims the result.
    """
    if value is None:
        return ""
    text = str(value)
    text = TAG_RE.sub("", text)
    text = PERCENT_OCTET_RE.sub("", text)
    text = WHITESPACE_RE.sub(" ", text)
    return text.strip()


def escape_like(value: str, escape_char: str = "\\") -> str:
    """Escape LIKE wildcards so the value only matches literally."""
    return (
        value.replace(escape_char, escape_char * 2)
        .replace("%", escape_char + "%")
        .replace("_", escape_char + "_")
    )
