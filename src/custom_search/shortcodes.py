from functools import lru_cache

import jinja2

from custom_search import config
from custom_search.nonces import TREND_ALERT_SEARCH_ACTION, NonceManager, action_for
from custom_search.sanitize import sanitize_text_field
from custom_search.scope import parse_form_identity

MISSING_FORM_ID_ERROR = "<p>Error: Search form ID is required.</p>"


@lru_cache
def get_environment() -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.PackageLoader("custom_search", "templates"),
        autoescape=jinja2.select_autoescape(["html"]),
        keep_trailing_newline=True,
    )


def render_search_form(form_id, nonces: NonceManager, search_term: str = "") -> str:
    """
    Render the ``customizable_search_form`` shortcode.

    ``form_id`` is the shortcode's ``id`` attribute: "general" for the
    site-wide search or the id of a search form. Anything else renders an
    error message in place of the form.
    """
    form_identity = parse_form_identity(form_id)
    if form_identity is None:
        return MISSING_FORM_ID_ERROR

    template = get_environment().get_template("customizable_search_form.html")
    return template.render(
        action_url=config.home_url(),
        nonce=nonces.create(action_for(form_identity)),
        form_identity=form_identity,
        search_term=sanitize_text_field(search_term),
    )


def render_trend_alert_search_form(nonces: NonceManager, search_term: str = "") -> str:
    template = get_environment().get_template("trend_alert_search_form.html")
    return template.render(
        action_url=config.home_url(),
        nonce=nonces.create(TREND_ALERT_SEARCH_ACTION),
        search_term=sanitize_text_field(search_term),
    )
