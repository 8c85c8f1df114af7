import asyncio
import logging
from functools import wraps

import click

from custom_search import models
from custom_search.models import get_session, init_db, init_db_connection
from custom_search.registry import registry
from custom_search.settings import (
    create_search_form,
    get_global_scope,
    list_search_forms,
    set_global_scope,
    shortcode_for,
)


def async_command(f):
    """Wrapper necessary because Click doesn't support async"""

    @wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def split_post_types(value: str) -> list[str]:
    return [p.strip() for p in value.split(",") if p.strip()]


@click.group()
@click.option("--database-url", envvar="DATABASE_URL", default=None, help="Database to use")
def main(database_url: str | None):
    """Manage customizable search settings and forms."""
    logging.basicConfig(level=logging.INFO)
    init_db_connection(database_url)


@main.command("init-db")
@async_command
async def init_db_command():
    """Create the posts, search form and option tables."""
    await init_db(models.engine)
    click.echo("Database initialized")


@main.command("set-default-post-types")
@click.argument("post_types")
@async_command
async def set_default_post_types(post_types: str):
    """
    Set the post types the general search form covers, as a comma-separated
    list. Unknown post types are ignored.
    """
    async with get_session() as session:
        stored = await set_global_scope(session, split_post_types(post_types), registry)
        await session.commit()
    click.echo(f"Default post types: {', '.join(stored) or '(none)'}")


@main.command("show-default-post-types")
@async_command
async def show_default_post_types():
    async with get_session() as session:
        post_types = await get_global_scope(session)
        await session.commit()
    click.echo(", ".join(post_types) or "(none)")


@main.command("create-form")
@click.argument("title")
@click.option(
    "--post-types",
    default="",
    help="Comma-separated list of post types this form searches",
)
@async_command
async def create_form(title: str, post_types: str):
    """Create a search form and print its shortcode."""
    async with get_session() as session:
        form = await create_search_form(
            session, title, split_post_types(post_types), registry
        )
        await session.commit()
    click.echo(shortcode_for(form.id))


@main.command("list-forms")
@async_command
async def list_forms():
    async with get_session() as session:
        forms = await list_search_forms(session)
    for form in forms:
        post_types = ", ".join(form.selected_post_types or []) or "(default)"
        click.echo(f"{form.id}\t{form.title}\t{post_types}\t{shortcode_for(form.id)}")
