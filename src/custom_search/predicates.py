from typing import Iterable

from custom_search.sanitize import escape_like, sanitize_text_field
from custom_search.schemas import EMPTY, EmptyPredicate, SearchPredicate

# Results per page for every plugin-filtered search.
PAGE_SIZE = 10


def build(
    term: str,
    scope: Iterable[str],
    published_only: bool = True,
) -> SearchPredicate | EmptyPredicate:
    """
    Build the filter for a search term over a content-type scope.

    A blank term yields EMPTY, which matches no records at all rather than
    every record in scope.
    """
    normalized = sanitize_text_field(term)
    if not normalized:
        return EMPTY

    post_types = tuple(dict.fromkeys(scope))
    if not post_types:
        raise ValueError("A search scope must contain at least one content type")

    return SearchPredicate(
        term=normalized,
        pattern=f"%{escape_like(normalized)}%",
        post_types=post_types,
        published_only=published_only,
    )
