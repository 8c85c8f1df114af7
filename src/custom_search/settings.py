from logging import getLogger
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from custom_search.models import Option, SearchFormRecord
from custom_search.registry import ContentTypeRegistry
from custom_search.sanitize import sanitize_text_field

logger = getLogger(__name__)

POST_TYPES_OPTION = "acs_post_types"
SHORTCODE_TAG = "customizable_search_form"


def sanitize_post_types(submitted, registry: ContentTypeRegistry) -> list[str]:
    """
    Keep the submitted content types that the registry knows as public.

    Anything else is dropped without complaint. Order of first appearance
    is preserved and duplicates are removed.
    """
    if not isinstance(submitted, (list, tuple)):
        return []

    sanitized = []
    for post_type in submitted:
        if not isinstance(post_type, str) or not registry.is_public(post_type):
            continue
        post_type = sanitize_text_field(post_type)
        if post_type not in sanitized:
            sanitized.append(post_type)

    dropped = len(submitted) - len(sanitized)
    if dropped:
        logger.info(f"Dropped {dropped} unknown or duplicate post types from a scope submission")
    return sanitized


async def get_global_scope(session: AsyncSession) -> list[str]:
    """Read the site-wide default scope, creating it empty on first read."""
    option = await session.get(Option, POST_TYPES_OPTION)
    if option is None:
        option = Option(name=POST_TYPES_OPTION, value=[])
        session.add(option)
        await session.flush()
    return list(option.value or [])


async def set_global_scope(
    session: AsyncSession,
    post_types: Iterable[str],
    registry: ContentTypeRegistry,
) -> list[str]:
    sanitized = sanitize_post_types(list(post_types), registry)
    option = await session.get(Option, POST_TYPES_OPTION)
    if option is None:
        session.add(Option(name=POST_TYPES_OPTION, value=sanitized))
    else:
        option.value = sanitized
    await session.flush()
    return sanitized


async def get_search_form(session: AsyncSession, form_id: int) -> SearchFormRecord | None:
    return await session.get(SearchFormRecord, form_id)


async def get_form_scope(session: AsyncSession, form_id: int) -> list[str]:
    form = await get_search_form(session, form_id)
    if form is None or not isinstance(form.selected_post_types, list):
        return []
    return list(form.selected_post_types)


async def set_form_scope(
    session: AsyncSession,
    form_id: int,
    post_types: Iterable[str],
    registry: ContentTypeRegistry,
) -> list[str] | None:
    """
    Store a form's own scope. An empty selection clears it so the form falls
    back to the built-in scope.

    Returns None when there is no such form.
    """
    form = await get_search_form(session, form_id)
    if form is None:
        return None

    sanitized = sanitize_post_types(list(post_types), registry)
    form.selected_post_types = sanitized or None
    await session.flush()
    return sanitized


async def create_search_form(
    session: AsyncSession,
    title: str,
    post_types: Iterable[str],
    registry: ContentTypeRegistry,
) -> SearchFormRecord:
    sanitized = sanitize_post_types(list(post_types), registry)
    form = SearchFormRecord(
        title=sanitize_text_field(title),
        selected_post_types=sanitized or None,
    )
    session.add(form)
    await session.flush()
    return form


async def list_search_forms(session: AsyncSession) -> list[SearchFormRecord]:
    result = await session.execute(select(SearchFormRecord).order_by(SearchFormRecord.id))
    return list(result.scalars())


async def delete_search_form(session: AsyncSession, form_id: int) -> bool:
    form = await get_search_form(session, form_id)
    if form is None:
        return False
    await session.delete(form)
    await session.flush()
    return True


def shortcode_for(form_id: int) -> str:
    return f'[{SHORTCODE_TAG} id="{form_id}"]'
