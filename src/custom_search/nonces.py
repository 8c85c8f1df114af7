"""
Action-bound anti-forgery tokens for the search forms.

A token is an HMAC over the current time tick and the action name. Ticks are
half a lifetime long, and a token verifies during its own tick and the next
one, so it lives between one half and one full lifetime.
"""
import hashlib
import hmac
import math
import secrets
import time
from functools import lru_cache
from logging import getLogger

from custom_search import config
from custom_search.schemas import AuthResult, SearchRequest
from custom_search.scope import GENERAL, parse_form_identity

logger = getLogger(__name__)

GENERAL_SEARCH_ACTION = "customizable_search"
FORM_SEARCH_ACTION = "customizable_search_form"
TREND_ALERT_SEARCH_ACTION = "trend_alert_search"

TOKEN_LENGTH = 20


class NonceManager:
    def __init__(self, secret_key: str, lifetime: int = config.DEFAULT_NONCE_LIFETIME):
        if lifetime < 2:
            raise ValueError("Nonce lifetime must be at least two seconds")
        self._key = secret_key.encode()
        self.lifetime = lifetime

    def tick(self, now: float | None = None) -> int:
        if now is None:
            now = time.time()
        return math.ceil(now / (self.lifetime / 2))

    def _sign(self, tick: int, action: str) -> str:
        message = f"{tick}|{action}".encode()
        return hmac.new(self._key, message, hashlib.sha256).hexdigest()[:TOKEN_LENGTH]

    def create(self, action: str, now: float | None = None) -> str:
        return self._sign(self.tick(now), action)

    def verify(self, token: str | None, action: str, now: float | None = None) -> AuthResult:
        if not token:
            return AuthResult(valid=False, reason="not_requested")

        tick = self.tick(now)
        for generation, candidate in enumerate((tick, tick - 1), start=1):
            expected = self._sign(candidate, action).encode()
            if hmac.compare_digest(expected, token.encode(errors="replace")):
                return AuthResult(valid=True, generation=generation)

        return AuthResult(valid=False, reason="unauthenticated")


def action_for(form_identity: str | int) -> str:
    """The logical action a form acts for. Each form id gets its own."""
    if form_identity == GENERAL:
        return GENERAL_SEARCH_ACTION
    return f"{FORM_SEARCH_ACTION}-{form_identity}"


def authenticate(request: SearchRequest, nonces: NonceManager, now: float | None = None) -> AuthResult:
    """
    Check that a search request came from one of our rendered forms.

    Requests without our marker or without a token were never meant for
    plugin filtering and report ``not_requested``.
    """
    if request.form_identity is None or not request.token:
        return AuthResult(valid=False, reason="not_requested")

    if request.variant == "trend_alert":
        return nonces.verify(request.token, TREND_ALERT_SEARCH_ACTION, now)

    form_identity = parse_form_identity(request.form_identity)
    if form_identity is None:
        return AuthResult(valid=False, reason="unauthenticated")

    return nonces.verify(request.token, action_for(form_identity), now)


@lru_cache
def get_nonce_manager() -> NonceManager:
    secret_key = config.secret_key()
    if secret_key is None:
        logger.warning(
            "CUSTOM_SEARCH_SECRET_KEY is not set, using a random key. "
            "Search form tokens will not survive a restart."
        )
        secret_key = secrets.token_hex(32)
    return NonceManager(secret_key, lifetime=config.nonce_lifetime())
