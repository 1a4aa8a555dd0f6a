"""API keys, authorization scopes and request-scoped claims."""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from enum import Enum

_KEY_PREFIX = "am_live_"
_DISPLAY_PREFIX_LEN = 16
_RANDOM_BYTES = 32
_NIL_UUID = uuid.UUID(int=0)


class Scope(str, Enum):
    """An authorization scope carried by an API key."""

    ORG_ADMIN = "org:admin"
    POD_ADMIN = "pod:admin"
    INBOX_READ = "inbox:read"
    INBOX_WRITE = "inbox:write"
    WEBHOOK_READ = "webhook:read"
    WEBHOOK_WRITE = "webhook:write"
    DRAFT_READ = "draft:read"
    DRAFT_WRITE = "draft:write"
    SEARCH_READ = "search:read"

    def __str__(self) -> str:
        return self.value


ALL_SCOPES: tuple[Scope, ...] = tuple(Scope)


@dataclass(frozen=True)
class GeneratedAPIKey:
    """A freshly generated key: the plaintext is shown once, only the hash is stored."""

    plaintext: str
    key_hash: str
    display_prefix: str


def generate_api_key() -> GeneratedAPIKey:
    """Create a new random API key with its SHA-256 hash and display prefix."""
    raw = secrets.token_bytes(_RANDOM_BYTES)
    encoded = base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")
    plaintext = _KEY_PREFIX + encoded
    return GeneratedAPIKey(
        plaintext=plaintext,
        key_hash=hash_api_key(plaintext),
        display_prefix=plaintext[:_DISPLAY_PREFIX_LEN],
    )


def hash_api_key(plaintext: str) -> str:
    """Return the SHA-256 hex digest of a plaintext key."""
    return hashlib.sha256(plaintext.encode("utf-8")).hexdigest()


def verify_api_key(plaintext: str, hash_value: str) -> bool:
    """Report whether plaintext matches the stored hash."""
    return hmac.compare_digest(
        hash_api_key(plaintext).encode("utf-8"), hash_value.encode("utf-8")
    )


@dataclass
class Claims:
    """The authenticated identity extracted from a validated API key."""

    org_id: uuid.UUID = _NIL_UUID
    key_id: uuid.UUID = _NIL_UUID
    scopes: tuple[Scope | str, ...] = ()
    # Set when the key is restricted to a single pod.
    pod_id: uuid.UUID | None = None

    def has_scope(self, scope: Scope | str) -> bool:
        """Report whether the claims include scope; org:admin implies every scope."""
        return any(s == Scope.ORG_ADMIN or s == scope for s in self.scopes)

    def can_access_pod(self, pod_id: uuid.UUID) -> bool:
        """Report whether the claims allow access to pod_id."""
        return self.pod_id is None or self.pod_id == pod_id


_current_claims: ContextVar[Claims | None] = ContextVar("ngxmail_claims", default=None)


@contextmanager
def claims_context(claims: Claims) -> Iterator[Claims]:
    """Make claims the current claims for the duration of the block."""
    token = _current_claims.set(claims)
    try:
        yield claims
    finally:
        _current_claims.reset(token)


def current_claims() -> Claims | None:
    """Return the claims of the current context, or None if none are set."""
    return _current_claims.get()


def current_org_id() -> uuid.UUID:
    """Return the org ID of the current claims, or the nil UUID if absent."""
    claims = current_claims()
    return claims.org_id if claims is not None else _NIL_UUID