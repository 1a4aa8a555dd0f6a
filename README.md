# ngxmail

The shared core of a multi-tenant email platform built for software agents.
Organizations own pods, pods own inboxes, and inboxes collect threads of
messages. This package holds the pieces that every part of such a service
needs:

- **`ngxmail.auth`**: API key generation, hashing and checking, scopes
  (`Scope`) and the authenticated identity (`Claims`), plus a context that
  carries the current claims for the code that handles a request.
- **`ngxmail.crypto`**: AES-256-GCM encryption of secrets at rest, such as
  the values of webhook auth headers.
- **`ngxmail.pagination`**: opaque cursors and page size limits.
- **`ngxmail.validate`**: rule-based validation of dataclass fields, with
  errors that map field names to readable messages.
- **`ngxmail.embedder`**: a client for OpenAI-compatible embedding servers,
  and a formatter for PostgreSQL vector literals.
- **`ngxmail.models`** and **`ngxmail.resources`**: the domain records:
  messages, threads, labels, attachments, API keys, drafts, inboxes, pods,
  organizations, custom domains and webhooks.
- **`ngxmail.mime`**: parsing of raw RFC 5322 messages into headers, text
  and HTML bodies, and attachments.
- **`ngxmail.db`**: classification of database errors, and transaction
  context managers that set row-level security context for an organization
  and, optionally, a pod.

Python 3.10 or later is required. Install with `pip install .`, or
`pip install .[test]` to run the tests with pytest.

## API keys

A key is shown to its owner once; only its SHA-256 hash is stored.

```python
from ngxmail.auth import generate_api_key, hash_api_key, verify_api_key

issued = generate_api_key()
issued.plaintext        # starts with "am_live_"
issued.key_hash         # SHA-256 hex digest of the plaintext
issued.display_prefix   # the first 16 characters of the plaintext

stored = hash_api_key("placeholder")
verify_api_key("placeholder", stored)   # True
verify_api_key("token", stored)         # False
```

A `Claims` object grants a scope when it holds that scope or
`Scope.ORG_ADMIN`. A claims object with a `pod_id` can reach only that pod;
one without can reach any pod.

```python
import uuid
from ngxmail.auth import Claims, Scope, claims_context, current_claims, current_org_id

claims = Claims(org_id=uuid.uuid4(), scopes=(Scope.INBOX_READ,))
claims.has_scope(Scope.INBOX_READ)    # True
claims.has_scope(Scope.INBOX_WRITE)   # False

with claims_context(claims):
    current_claims() is claims        # True
    current_org_id() == claims.org_id # True
current_claims()                      # None outside the block
```

`current_org_id()` returns the nil UUID when no claims are set.

## Encrypting secrets

```python
import secrets
from ngxmail.crypto import key_from_hex, encrypt, decrypt

key = key_from_hex(secrets.token_hex(32))   # 64 hex characters -> 32 bytes
sealed = encrypt(key, b"Bearer token")      # nonce || ciphertext || tag
decrypt(key, sealed)                        # b"Bearer token"
```

Every call to `encrypt` uses a fresh random nonce. A missing, malformed or
wrong-length key, a ciphertext shorter than the nonce, or one that fails
authentication raises `CryptoError`.

## Pagination

```python
from ngxmail.pagination import encode_cursor, decode_cursor, clamp_limit

cursor = encode_cursor("2024-01-01T00:00:00Z", "thread-42")
decode_cursor(cursor)     # ["2024-01-01T00:00:00Z", "thread-42"]
decode_cursor("")         # []

clamp_limit(0)            # 20, the default page size
clamp_limit(50)           # 50
clamp_limit(1000)         # 100, the maximum
```

A cursor that is not valid base64 raises `InvalidCursorError`.

## Validation

Rules are written in a field's metadata under the key `"validate"`, as a
comma-separated list. The known rules are `required`, `email`, `url`, `uuid`,
`oneof`, `min`, `max`, `len`, `gt`, `gte`, `lt`, `lte` and `omitempty`.

```python
from dataclasses import dataclass, field
from ngxmail.validate import ValidationError, validate_struct, validation_errors

@dataclass
class NewUser:
    Name: str = field(default="", metadata={"validate": "required"})
    Email: str = field(default="", metadata={"validate": "required,email"})
    Age: int = field(default=0, metadata={"validate": "min=0,max=150"})

validate_struct(NewUser("Alice", "alice@example.com", 30))   # returned unchanged

try:
    validate_struct(NewUser("", "not-an-email", 30))
except ValidationError as err:
    validation_errors(err)
    # {"name": "failed validation: required", "email": "failed validation: email"}
```

Each field reports the first rule it fails; nested dataclasses are checked
too. `validation_errors` maps any other exception to `{"error": str(err)}`.
An unknown rule raises `ValueError`.

## Parsing mail

```python
from ngxmail.mime import parse

raw = (
    "From: Alice <alice@example.com>\n"
    "To: bob@example.com\n"
    "Subject: Hello World\n"
    "Message-ID: <abc123@example.com>\n"
    "Content-Type: text/plain; charset=utf-8\n"
    "\n"
    "Hello, Bob!\n"
)
email = parse(raw)
email.from_address      # EmailAddress(email="alice@example.com", name="Alice")
email.message_id        # "abc123@example.com"
email.body_text         # b"Hello, Bob!\n"
```

`parse` takes bytes, text or a readable binary file. The result is a
`ParsedEmail`: the sender and `to`/`cc` recipients as `EmailAddress` values,
the reply-to address, the subject with RFC 2047 encoded words decoded, the
message, in-reply-to and reference ids without angle brackets, the date, all
headers, the text and HTML bodies, and each attachment or inline resource as
a `Part`. Multipart bodies are walked recursively; base64 and
quoted-printable parts are decoded. Input that is not a mail message raises
`MimeParseError`. `parse_address_list` and `decode_header` are available on
their own.

## Embeddings

```python
from ngxmail.embedder import EmbedderClient, vector_literal

with EmbedderClient("http://localhost:7997", "bge-base-en-v1.5",
                    api_key="placeholder", dims=256) as client:
    vector = client.embed("Where is my invoice?")

vector_literal([1.0, 2.5, 0.1])   # "[1,2.5,0.1]"
```

`embed` posts to `<base_url>/embeddings`, with a bearer header when an API key
is given. It keeps at most `dims` values, or all of them when `dims` is 0. It
raises `EmbeddingError` when the request fails, the server answers with
anything but 200, or no embedding comes back. A custom `httpx` transport can
be passed as `transport=`.

## Records

`ngxmail.models` and `ngxmail.resources` hold plain dataclasses for the
platform's records, with string enums for their states (`Direction`,
`MessageStatus`, `ThreadStatus`, `DraftReviewStatus`, `InboxStatus`,
`WebhookDeliveryStatus`). `APIKey` answers `is_revoked()`, `is_expired()`,
`is_valid()` and `masked()`. `APIKey.to_dict()` and `Webhook.to_dict()` give
the JSON form and never include the key hash, the webhook secret or its auth
header.

## Transactions

```python
from ngxmail.db import org_pod_transaction, is_duplicate_key

with org_pod_transaction(pool, org_id, pod_id) as tx:
    tx.execute("INSERT INTO labels (name) VALUES (%s)", ("urgent",))
```

`pool` is any object whose `begin()` returns a transaction with
`execute(sql, params)`, `commit()` and `rollback()`. The block commits when it
ends normally and rolls back when it raises. `org_transaction` sets only the
org context; a `pod_id` of `None` means org-wide access. `is_duplicate_key`,
`is_foreign_key_violation` and `is_constraint_violation` read the SQLSTATE of
an exception or any exception in its cause chain; `is_not_found` looks for
`NoRowsError`.

## What this package does not do

It is a library only: it has no command, no HTTP server and no migrations.
It does not open database connections itself; `ngxmail.db` works on a pool
you supply. It does not store attachments or message bodies anywhere, and it
has no domain event types and publishes nothing to queues or webhooks.