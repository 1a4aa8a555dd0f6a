"""Records for organizations, pods, inboxes, drafts, custom domains and webhooks."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from ngxmail.models import (
    NIL_UUID,
    Attachment,
    DraftReviewStatus,
    EmailAddress,
    InboxStatus,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_json(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, datetime):
        text = value.isoformat()
        if value.utcoffset() == timedelta(0) and text.endswith("+00:00"):
            text = text[: -len("+00:00")] + "Z"
        return text
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_to_json(v) for v in value]
    if isinstance(value, dict):
        return {k: _to_json(v) for k, v in value.items()}
    return value


@dataclass
class DomainConfig:
    """A custom domain registered by an organization and its verification state."""

    id: uuid.UUID = NIL_UUID
    org_id: uuid.UUID = NIL_UUID
    pod_id: uuid.UUID | None = None
    domain: str = ""
    # One of: pending, verifying, active, failed.
    status: str = ""
    dkim_selector: str = ""
    verified_at: datetime | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class DNSRecord:
    """A DNS record the customer must add at their registrar."""

    type: str
    name: str
    value: str
    purpose: str = ""


@dataclass
class Draft:
    """A composed message that has not been sent yet, possibly awaiting review."""

    id: uuid.UUID = NIL_UUID
    org_id: uuid.UUID = NIL_UUID
    inbox_id: uuid.UUID = NIL_UUID
    # Set when the draft replies to an existing thread.
    thread_id: uuid.UUID | None = None
    subject: str = ""
    from_address: EmailAddress = field(default_factory=lambda: EmailAddress(""))
    to: list[EmailAddress] = field(default_factory=list)
    cc: list[EmailAddress] = field(default_factory=list)
    bcc: list[EmailAddress] = field(default_factory=list)
    reply_to: list[EmailAddress] = field(default_factory=list)
    in_reply_to: str = ""
    references: list[str] = field(default_factory=list)
    text_body: str = ""
    html_body: str = ""
    review_status: DraftReviewStatus = DraftReviewStatus.PENDING
    review_note: str = ""
    reviewed_at: datetime | None = None
    reviewed_by: uuid.UUID | None = None
    scheduled_at: datetime | None = None
    sent_at: datetime | None = None
    # Populated once the draft has been sent.
    message_id: uuid.UUID | None = None
    attachments: list[Attachment] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)


@dataclass
class Inbox:
    """An email address managed by the platform."""

    id: uuid.UUID = NIL_UUID
    org_id: uuid.UUID = NIL_UUID
    pod_id: uuid.UUID | None = None
    email: str = ""
    display_name: str = ""
    status: InboxStatus = InboxStatus.ACTIVE
    settings: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)


@dataclass
class Organization:
    """A customer account."""

    id: uuid.UUID = NIL_UUID
    name: str = ""
    slug: str = ""
    plan: str = ""
    settings: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)


@dataclass
class Pod:
    """A logical grouping of inboxes within an organization."""

    id: uuid.UUID = NIL_UUID
    org_id: uuid.UUID = NIL_UUID
    name: str = ""
    slug: str = ""
    description: str = ""
    settings: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)


_WEBHOOK_JSON_FIELDS = (
    "id",
    "org_id",
    "url",
    "events",
    "pod_id",
    "inbox_id",
    "is_active",
    "failure_count",
    "last_success_at",
    "last_failure_at",
    "created_at",
    "updated_at",
)


@dataclass
class Webhook:
    """A subscription that delivers events to a URL."""

    id: uuid.UUID = NIL_UUID
    org_id: uuid.UUID = NIL_UUID
    url: str = ""
    secret: str = field(default="", repr=False)
    events: list[str] = field(default_factory=list)
    pod_id: uuid.UUID | None = None
    inbox_id: uuid.UUID | None = None
    is_active: bool = False
    failure_count: int = 0
    last_success_at: datetime | None = None
    last_failure_at: datetime | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    # Caller-supplied header sent on every delivery; the value is stored encrypted.
    auth_header_name: str | None = None
    auth_header_value_enc: bytes | None = field(default=None, repr=False)
    # Decrypted value, held in memory only.
    auth_header_value: str = field(default="", repr=False)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form; the secret and auth header are never included."""
        return {name: _to_json(getattr(self, name)) for name in _WEBHOOK_JSON_FIELDS}


class WebhookDeliveryStatus(str, Enum):
    """State of one webhook delivery."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    RETRYING = "retrying"

    def __str__(self) -> str:
        return self.value


@dataclass
class WebhookDelivery:
    """One attempt series to deliver an event to a webhook."""

    id: uuid.UUID = NIL_UUID
    webhook_id: uuid.UUID = NIL_UUID
    event_id: str = ""
    event_type: str = ""
    payload: dict[str, Any] = field(default_factory=dict)
    status: WebhookDeliveryStatus = WebhookDeliveryStatus.PENDING
    attempt_count: int = 0
    next_attempt_at: datetime | None = None
    last_attempt_at: datetime | None = None
    response_status: int | None = None
    response_body: str = ""
    error_message: str = ""
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)