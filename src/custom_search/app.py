"""
Run the app with:
    $ uvicorn custom_search.app:app
"""
from contextlib import asynccontextmanager
from logging import getLogger
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from custom_search import config, models
from custom_search.models import Post, get_session, init_db_connection
from custom_search.nonces import NonceManager, get_nonce_manager
from custom_search.registry import ContentTypeRegistry, registry
from custom_search.schemas import (
    ContentTypeOut,
    GlobalSettingsResponse,
    ScopeSettings,
    SearchFormIn,
    SearchFormOut,
    SearchRequest,
    SearchResponse,
    SearchResult,
)
from custom_search.search import (
    default_search,
    parse_page,
    plan_customizable_search,
    plan_trend_alert_search,
    run_search,
)
from custom_search.settings import (
    create_search_form,
    delete_search_form,
    get_global_scope,
    get_search_form,
    list_search_forms,
    set_form_scope,
    set_global_scope,
    shortcode_for,
)
from custom_search.shortcodes import render_search_form, render_trend_alert_search_form

logger = getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if models.SessionLocal is None:
        init_db_connection()
    yield


app = FastAPI(
    title="Customizable Search",
    description="Shortcode-driven search forms scoped to selected content types.",
    version="2.5.0",
    lifespan=lifespan,
)


async def db_session():
    async with get_session() as session:
        yield session
        await session.commit()


def content_types() -> ContentTypeRegistry:
    return registry


def require_admin(x_admin_token: Optional[str] = Header(default=None)):
    expected = config.admin_token()
    if expected is None or x_admin_token != expected:
        raise HTTPException(status_code=403, detail="Administrator access required")


def to_result(post: Post) -> SearchResult:
    return SearchResult(
        id=post.id,
        post_type=post.post_type,
        title=post.post_title,
        content=post.post_content,
        status=post.post_status,
        date=post.post_date,
    )


def to_form_out(form) -> SearchFormOut:
    return SearchFormOut(
        id=form.id,
        title=form.title,
        post_types=form.selected_post_types or [],
        shortcode=shortcode_for(form.id),
    )


@app.get("/", response_model=SearchResponse)
async def site_search(
    s: str = "",
    custom_search_term: str = "",
    customizable_search_active: Optional[str] = None,
    customizable_search_nonce: Optional[str] = None,
    trend_alert_search_term: str = "",
    trend_alert_search_active: Optional[str] = None,
    trend_alert_search_nonce: Optional[str] = None,
    paged: Optional[str] = None,
    session: AsyncSession = Depends(db_session),
    nonces: NonceManager = Depends(get_nonce_manager),
    types: ContentTypeRegistry = Depends(content_types),
):
    """
    The site search page. Requests from our search forms are filtered to
    the form's scope; everything else gets the default site search.
    """
    page = parse_page(paged)
    if trend_alert_search_active is not None:
        plan = plan_trend_alert_search(
            SearchRequest(
                term=trend_alert_search_term,
                form_identity=trend_alert_search_active,
                token=trend_alert_search_nonce,
                variant="trend_alert",
                page=page,
            ),
            nonces,
        )
    else:
        plan = await plan_customizable_search(
            session,
            SearchRequest(
                term=custom_search_term,
                form_identity=customizable_search_active,
                token=customizable_search_nonce,
                page=page,
            ),
            nonces,
        )

    if plan is None:
        plan, posts = await default_search(session, s, types, page=page)
        filtered = False
    else:
        posts = await run_search(session, plan)
        filtered = True

    return SearchResponse(
        results=[to_result(post) for post in posts],
        count=len(posts),
        filtered=filtered,
        post_types=list(plan.post_types),
        page=page,
    )


@app.get("/shortcodes/customizable_search_form", response_class=HTMLResponse)
async def customizable_search_form_shortcode(
    id: str = "",
    custom_search_term: str = "",
    nonces: NonceManager = Depends(get_nonce_manager),
):
    return render_search_form(id, nonces, search_term=custom_search_term)


@app.get("/shortcodes/trend_alert_search_form", response_class=HTMLResponse)
async def trend_alert_search_form_shortcode(
    trend_alert_search_term: str = "",
    nonces: NonceManager = Depends(get_nonce_manager),
):
    return render_trend_alert_search_form(nonces, search_term=trend_alert_search_term)


@app.get(
    "/admin/settings",
    response_model=GlobalSettingsResponse,
    dependencies=[Depends(require_admin)],
)
async def read_settings(
    session: AsyncSession = Depends(db_session),
    types: ContentTypeRegistry = Depends(content_types),
):
    return GlobalSettingsResponse(
        post_types=await get_global_scope(session),
        available_post_types=[
            ContentTypeOut(name=t.name, label=t.label)
            for t in types.list_public_content_types()
        ],
    )


@app.post(
    "/admin/settings",
    response_model=ScopeSettings,
    dependencies=[Depends(require_admin)],
)
async def update_settings(
    settings: ScopeSettings,
    session: AsyncSession = Depends(db_session),
    types: ContentTypeRegistry = Depends(content_types),
):
    stored = await set_global_scope(session, settings.post_types, types)
    return ScopeSettings(post_types=stored)


@app.get(
    "/admin/forms",
    response_model=list[SearchFormOut],
    dependencies=[Depends(require_admin)],
)
async def read_forms(session: AsyncSession = Depends(db_session)):
    return [to_form_out(form) for form in await list_search_forms(session)]


@app.post(
    "/admin/forms",
    response_model=SearchFormOut,
    status_code=201,
    dependencies=[Depends(require_admin)],
)
async def add_form(
    form_in: SearchFormIn,
    session: AsyncSession = Depends(db_session),
    types: ContentTypeRegistry = Depends(content_types),
):
    form = await create_search_form(session, form_in.title, form_in.post_types, types)
    logger.info(f"Created search form {form.id}")
    return to_form_out(form)


@app.put(
    "/admin/forms/{form_id}",
    response_model=SearchFormOut,
    dependencies=[Depends(require_admin)],
)
async def update_form(
    form_id: int,
    settings: ScopeSettings,
    session: AsyncSession = Depends(db_session),
    types: ContentTypeRegistry = Depends(content_types),
):
    if await set_form_scope(session, form_id, settings.post_types, types) is None:
        raise HTTPException(status_code=404, detail="Search form not found")
    return to_form_out(await get_search_form(session, form_id))


@app.delete(
    "/admin/forms/{form_id}",
    status_code=204,
    dependencies=[Depends(require_admin)],
)
async def remove_form(form_id: int, session: AsyncSession = Depends(db_session)):
    if not await delete_search_form(session, form_id):
        raise HTTPException(status_code=404, detail="Search form not found")
    logger.info(f"Deleted search form {form_id}")
