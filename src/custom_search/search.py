from dataclasses import dataclass
from logging import getLogger

from sqlalchemy.ext.asyncio import AsyncSession

from custom_search import predicates
from custom_search.models import Post, search_posts
from custom_search.nonces import NonceManager, authenticate
from custom_search.predicates import PAGE_SIZE
from custom_search.registry import ContentTypeRegistry, SEARCH_FORM_POST_TYPE
from custom_search.schemas import EmptyPredicate, SearchPredicate, SearchRequest
from custom_search.scope import GENERAL, TREND_ALERT_SCOPE, parse_form_identity, resolve
from custom_search.settings import get_form_scope, get_global_scope

logger = getLogger(__name__)


@dataclass(frozen=True)
class SearchPlan:
    predicate: SearchPredicate | EmptyPredicate
    page_size: int = PAGE_SIZE
    offset: int = 0

    @property
    def post_types(self) -> tuple[str, ...]:
        return getattr(self.predicate, "post_types", ())


# Deeper pages are served as the last one so offsets stay within integer columns.
MAX_PAGE = 10_000


def parse_page(raw) -> int:
    """Read a `paged` value. Anything unusable means the first page."""
    try:
        page = int(raw)
    except (TypeError, ValueError):
        return 1
    return min(max(page, 1), MAX_PAGE)


def page_offset(page: int, page_size: int = PAGE_SIZE) -> int:
    return (parse_page(page) - 1) * page_size


async def plan_customizable_search(
    session: AsyncSession,
    request: SearchRequest,
    nonces: NonceManager,
) -> SearchPlan | None:
    """
    Plan a search submitted through a customizable search form.

    Returns None when the request should get the site's default search
    instead: it was not sent by one of our forms, or its token did not verify.
    """
    auth = authenticate(request, nonces)
    if not auth.valid:
        if auth.reason == "unauthenticated":
            logger.info("Ignoring customizable search request with an invalid token")
        return None

    form_identity = parse_form_identity(request.form_identity)
    global_default = await get_global_scope(session) if form_identity == GENERAL else []
    per_form_scopes = {}
    if form_identity != GENERAL:
        per_form_scopes[form_identity] = await get_form_scope(session, form_identity)

    scope = resolve(form_identity, global_default, per_form_scopes)
    logger.info(f"Customizable search for form {form_identity} over post types {', '.join(scope)}")

    return SearchPlan(
        predicate=predicates.build(request.term, scope),
        offset=page_offset(request.page),
    )


def plan_trend_alert_search(request: SearchRequest, nonces: NonceManager) -> SearchPlan | None:
    """Plan a trend-alert search. The scope is always the trend-alert type."""
    auth = authenticate(request, nonces)
    if not auth.valid:
        if auth.reason == "unauthenticated":
            logger.info("Ignoring trend alert search request with an invalid token")
        return None

    return SearchPlan(
        predicate=predicates.build(request.term, TREND_ALERT_SCOPE),
        offset=page_offset(request.page),
    )


async def run_search(session: AsyncSession, plan: SearchPlan) -> list[Post]:
    return await search_posts(
        session, plan.predicate, limit=plan.page_size, offset=plan.offset
    )


def searchable_post_types(registry: ContentTypeRegistry) -> tuple[str, ...]:
    return tuple(
        name for name in registry.public_names() if name != SEARCH_FORM_POST_TYPE
    )


async def default_search(
    session: AsyncSession,
    term: str,
    registry: ContentTypeRegistry,
    page: int = 1,
    page_size: int = PAGE_SIZE,
) -> tuple[SearchPlan, list[Post]]:
    """The site's own search across every public content type."""
    plan = SearchPlan(
        predicate=predicates.build(term, searchable_post_types(registry)),
        page_size=page_size,
        offset=page_offset(page, page_size),
    )
    return plan, await run_search(session, plan)
