from typing import Mapping, Sequence

from custom_search.registry import TREND_ALERT_POST_TYPE

GENERAL = "general"

# Used whenever neither the form nor the site settings pick any type.
FALLBACK_SCOPE = ("post",)
TREND_ALERT_SCOPE = (TREND_ALERT_POST_TYPE,)


def parse_form_identity(raw) -> str | int | None:
    """
    Interpret a marker or shortcode ``id`` value.

    Returns GENERAL, a positive form id, or None when the value cannot
    identify a form.
    """
    if raw is None:
        return None
    if isinstance(raw, int):
        return raw if raw > 0 else None
    value = str(raw).strip()
    if value == GENERAL:
        return GENERAL
    try:
        form_id = int(value)
    except ValueError:
        return None
    return form_id if form_id > 0 else None


def _ordered(post_types: Sequence[str] | None) -> tuple[str, ...]:
    if not post_types:
        return ()
    return tuple(dict.fromkeys(post_types))


def resolve(
    form_identity: str | int,
    global_default: Sequence[str] | None,
    per_form_scopes: Mapping[int, Sequence[str] | None],
) -> tuple[str, ...]:
    """Pick the content types a search may return. Never empty."""
    if form_identity == GENERAL:
        return _ordered(global_default) or FALLBACK_SCOPE

    # A form's own selection replaces the site default outright.
    return _ordered(per_form_scopes.get(form_identity)) or FALLBACK_SCOPE
