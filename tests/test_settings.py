import pytest
from sqlalchemy import select

from custom_search.models import Option
from custom_search.registry import build_default_registry
from custom_search.settings import (
    POST_TYPES_OPTION,
    create_search_form,
    delete_search_form,
    get_form_scope,
    get_global_scope,
    list_search_forms,
    sanitize_post_types,
    set_form_scope,
    set_global_scope,
    shortcode_for,
)


@pytest.fixture
def registry():
    return build_default_registry()


def test_sanitize_drops_unregistered_post_types(registry):
    assert sanitize_post_types(["post", "article"], registry) == ["post"]


def test_sanitize_drops_private_post_types(registry):
    assert sanitize_post_types(["custom_search_form", "page"], registry) == ["page"]


def test_sanitize_keeps_order_and_drops_duplicates(registry):
    assert sanitize_post_types(["page", "post", "page"], registry) == ["page", "post"]


@pytest.mark.parametrize("submitted", [None, "post", 3, {"post": True}])
def test_sanitize_ignores_non_list_submissions(registry, submitted):
    assert sanitize_post_types(submitted, registry) == []


def test_sanitize_ignores_non_string_entries(registry):
    assert sanitize_post_types(["post", 1, None], registry) == ["post"]


@pytest.mark.asyncio
async def test_global_scope_is_created_empty_on_first_read(db_session):
    assert await get_global_scope(db_session) == []

    option = await db_session.scalar(select(Option).where(Option.name == POST_TYPES_OPTION))
    assert option is not None
    assert option.value == []


@pytest.mark.asyncio
async def test_global_scope_round_trip_drops_unknown_types(db_session, registry):
    registry.register("article", "Articles")

    stored = await set_global_scope(db_session, ["article", "bogus"], registry)
    await db_session.commit()

    assert stored == ["article"]
    assert await get_global_scope(db_session) == ["article"]


@pytest.mark.asyncio
async def test_global_scope_can_be_replaced(db_session, registry):
    await set_global_scope(db_session, ["post"], registry)
    await set_global_scope(db_session, ["page", "trend-alert"], registry)
    await db_session.commit()

    assert await get_global_scope(db_session) == ["page", "trend-alert"]


@pytest.mark.asyncio
async def test_form_scope_round_trip(db_session, registry):
    form = await create_search_form(db_session, "Alerts only", ["trend-alert", "nope"], registry)
    await db_session.commit()

    assert await get_form_scope(db_session, form.id) == ["trend-alert"]

    assert await set_form_scope(db_session, form.id, ["page"], registry) == ["page"]
    assert await get_form_scope(db_session, form.id) == ["page"]


@pytest.mark.asyncio
async def test_empty_form_scope_submission_clears_selection(db_session, registry):
    form = await create_search_form(db_session, "Pages", ["page"], registry)

    await set_form_scope(db_session, form.id, ["unknown"], registry)

    assert form.selected_post_types is None
    assert await get_form_scope(db_session, form.id) == []


@pytest.mark.asyncio
async def test_missing_form(db_session, registry):
    assert await get_form_scope(db_session, 404) == []
    assert await set_form_scope(db_session, 404, ["post"], registry) is None
    assert await delete_search_form(db_session, 404) is False


@pytest.mark.asyncio
async def test_list_and_delete_forms(db_session, registry):
    first = await create_search_form(db_session, "<b>First</b>", ["post"], registry)
    second = await create_search_form(db_session, "Second", [], registry)
    await db_session.commit()

    forms = await list_search_forms(db_session)
    assert [f.id for f in forms] == [first.id, second.id]
    assert forms[0].title == "First"

    assert await delete_search_form(db_session, first.id) is True
    await db_session.commit()
    assert [f.id for f in await list_search_forms(db_session)] == [second.id]


def test_shortcode_for():
    assert shortcode_for(42) == '[customizable_search_form id="42"]'
