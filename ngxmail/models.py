"""Domain records for API keys, messages, threads, labels and attachments."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

NIL_UUID = uuid.UUID(int=0)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _StrEnum(str, Enum):
    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class EmailAddress:
    """An email address with an optional display name."""

    email: str
    name: str = ""


class Direction(_StrEnum):
    """Whether a message is inbound or outbound."""

    INBOUND = "inbound"
    OUTBOUND = "outbound"


class MessageStatus(_StrEnum):
    """Delivery status of a message."""

    RECEIVED = "received"
    SENDING = "sending"
    SENT = "sent"
    FAILED = "failed"
    BOUNCED = "bounced"


class ThreadStatus(_StrEnum):
    """State of a conversation thread."""

    OPEN = "open"
    CLOSED = "closed"
    SPAM = "spam"
    TRASH = "trash"


class DraftReviewStatus(_StrEnum):
    """Review state of a draft message."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SENT = "sent"


class InboxStatus(_StrEnum):
    """Operational state of an inbox."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    DELETED = "deleted"


def _json_value(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, datetime):
        text = value.isoformat()
        if value.utcoffset() == timedelta(0) and text.endswith("+00:00"):
            text = text[: -len("+00:00")] + "Z"
        return text
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, EmailAddress):
        out = {"email": value.email}
        if value.name:
            out["name"] = value.name
        return out
    if isinstance(value, (list, tuple)):
        return [_json_value(v) for v in value]
    if isinstance(value, dict):
        return {k: _json_value(v) for k, v in value.items()}
    return value


_KEY_RECORD_FIELDS = (
    "id",
    "org_id",
    "name",
    "key_prefix",
    "scopes",
    "pod_id",
    "last_used_at",
    "expires_at",
    "revoked_at",
    "created_at",
)


@dataclass
class APIKey:
    """A stored API key; only its hash and display prefix are kept."""

    id: uuid.UUID = NIL_UUID
    org_id: uuid.UUID = NIL_UUID
    name: str = ""
    key_prefix: str = ""
    key_hash: str = field(default="", repr=False)
    scopes: list[str] = field(default_factory=list)
    pod_id: uuid.UUID | None = None
    last_used_at: datetime | None = None
    expires_at: datetime | None = None
    revoked_at: datetime | None = None
    created_at: datetime = field(default_factory=_utcnow)

    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at < datetime.now(self.expires_at.tzinfo)

    def is_valid(self) -> bool:
        return not self.is_revoked() and not self.is_expired()

    def masked(self) -> str:
        """Return a display-safe form such as 'am_live_XXXXXXXX...'."""
        return self.key_prefix + "..."

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form; the key hash is never included."""
        return {name: _json_value(getattr(self, name)) for name in _KEY_RECORD_FIELDS}


@dataclass
class Attachment:
    """A file attached to a message or draft."""

    id: uuid.UUID = NIL_UUID
    org_id: uuid.UUID = NIL_UUID
    message_id: uuid.UUID | None = None
    draft_id: uuid.UUID | None = None
    filename: str = ""
    content_type: str = ""
    # Content-ID header value used for inline attachments.
    content_id: str = ""
    inline: bool = False
    size_bytes: int = 0
    s3_key: str = ""
    created_at: datetime = field(default_factory=_utcnow)


@dataclass
class Label:
    """A named, coloured label that can be applied to threads."""

    id: uuid.UUID = NIL_UUID
    org_id: uuid.UUID = NIL_UUID
    name: str = ""
    color: str = ""
    description: str = ""
    created_at: datetime = field(default_factory=_utcnow)


@dataclass
class ThreadLabel:
    """The application of a label to a thread."""

    thread_id: uuid.UUID = NIL_UUID
    label_id: uuid.UUID = NIL_UUID
    applied_at: datetime = field(default_factory=_utcnow)


@dataclass
class Message:
    """A single email message within a thread."""

    id: uuid.UUID = NIL_UUID
    org_id: uuid.UUID = NIL_UUID
    inbox_id: uuid.UUID = NIL_UUID
    thread_id: uuid.UUID = NIL_UUID
    # RFC 5322 Message-ID header value.
    message_id: str = ""
    in_reply_to: str = ""
    references: list[str] = field(default_factory=list)
    direction: Direction = Direction.INBOUND
    status: MessageStatus = MessageStatus.RECEIVED
    subject: str = ""
    from_address: EmailAddress = field(default_factory=lambda: EmailAddress(""))
    to: list[EmailAddress] = field(default_factory=list)
    cc: list[EmailAddress] = field(default_factory=list)
    bcc: list[EmailAddress] = field(default_factory=list)
    reply_to: str = ""
    raw_s3_key: str = ""
    html_s3_key: str = ""
    text_s3_key: str = ""
    size_bytes: int = 0
    headers: dict[str, list[str]] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)
    is_read: bool = False
    is_starred: bool = False
    has_attachments: bool = False
    snippet: str = ""
    sent_at: datetime | None = None
    received_at: datetime | None = None
    attachments: list[Attachment] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)


@dataclass
class Thread:
    """A conversation made up of one or more related messages."""

    id: uuid.UUID = NIL_UUID
    org_id: uuid.UUID = NIL_UUID
    inbox_id: uuid.UUID = NIL_UUID
    subject: str = ""
    snippet: str = ""
    status: ThreadStatus = ThreadStatus.OPEN
    is_read: bool = False
    is_starred: bool = False
    message_count: int = 0
    participants: list[EmailAddress] = field(default_factory=list)
    last_message_at: datetime | None = None
    labels: list[Label] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)