"""Parsing of raw RFC 5322 messages into headers, bodies and MIME parts."""

from __future__ import annotations

import base64
import binascii
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from email.errors import HeaderParseError
from email.header import decode_header as _decode_words
from email.header import make_header
from email.utils import getaddresses, parsedate_to_datetime
from typing import BinaryIO, Union
from urllib.parse import unquote

Headers = dict[str, list[str]]
Source = Union[bytes, bytearray, memoryview, str, BinaryIO]

_ATOM = r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+"
_ATOM_RE = re.compile(_ATOM)
_MEDIA_TYPE_RE = re.compile(rf"\s*({_ATOM})(?:\s*/\s*({_ATOM}))?\s*")
_PARAM_RE = re.compile(rf';\s*({_ATOM})\s*=\s*("(?:[^"\\]|\\.)*"|{_ATOM})\s*')
_LINE_RE = re.compile(rb"[^\n]*\n|[^\n]+")


class MimeParseError(ValueError):
    """Raised when a message or one of its parts cannot be parsed."""


@dataclass(frozen=True)
class EmailAddress:
    """A single address with an optional display name."""

    email: str
    name: str = ""


@dataclass
class Part:
    """A non-text MIME part: an attachment or inline resource."""

    content_type: str = ""
    filename: str = ""
    content_id: str = ""
    is_inline: bool = False
    data: bytes = b""


@dataclass
class ParsedEmail:
    """The result of parsing a raw RFC 5322 message."""

    message_id: str = ""
    in_reply_to: str = ""
    references: list[str] = field(default_factory=list)
    from_address: EmailAddress = field(default_factory=lambda: EmailAddress(""))
    to: list[EmailAddress] = field(default_factory=list)
    cc: list[EmailAddress] = field(default_factory=list)
    reply_to: str = ""
    subject: str = ""
    date: datetime | None = None
    body_text: bytes = b""
    body_html: bytes = b""
    headers: Headers = field(default_factory=dict)
    parts: list[Part] = field(default_factory=list)


def _canonical_key(key: str) -> str:
    if not _ATOM_RE.fullmatch(key):
        return key
    return "-".join(p[:1].upper() + p[1:].lower() for p in key.split("-"))


def _header_get(headers: Headers, key: str) -> str:
    values = headers.get(_canonical_key(key))
    return values[0] if values else ""


def _read_header(data: bytes, *, require: bool) -> tuple[Headers, bytes]:
    headers: Headers = {}
    last_key: str | None = None
    pos = 0
    size = len(data)
    while pos < size:
        end = data.find(b"\n", pos)
        raw = data[pos:] if end < 0 else data[pos:end]
        pos = size if end < 0 else end + 1
        line = raw.rstrip(b"\r").decode("utf-8", errors="replace")
        if not line:
            return headers, data[pos:]
        if line[0] in " \t":
            if last_key is None:
                raise MimeParseError(f"malformed MIME header initial line: {line}")
            values = headers[last_key]
            values[-1] = f"{values[-1]} {line.strip()}".strip()
            continue
        key, sep, value = line.partition(":")
        if not sep or not _ATOM_RE.fullmatch(key):
            raise MimeParseError(f"malformed MIME header line: {line}")
        last_key = _canonical_key(key)
        headers.setdefault(last_key, []).append(value.strip())
    if require and not headers:
        raise MimeParseError("EOF")
    return headers, b""


def _decode_param(key: str, value: str) -> tuple[str, str]:
    if value.startswith('"'):
        value = re.sub(r"\\(.)", r"\1", value[1:-1])
    if key.endswith("*"):
        pieces = value.split("'", 2)
        if len(pieces) == 3 and pieces[0].lower() in ("", "utf-8", "us-ascii"):
            return key[:-1], unquote(pieces[2], encoding="utf-8", errors="replace")
    return key, value


def _parse_media_type(value: str) -> tuple[str, dict[str, str]]:
    match = _MEDIA_TYPE_RE.match(value)
    if match is None:
        raise ValueError("mime: no media type")
    rest = value[match.end():]
    if rest and not rest.startswith(";"):
        raise ValueError("mime: unexpected content after media type")
    media = match.group(1).lower()
    if match.group(2):
        media += "/" + match.group(2).lower()

    params: dict[str, str] = {}
    encoded: dict[str, str] = {}
    pos = 0
    while pos < len(rest):
        param = _PARAM_RE.match(rest, pos)
        if param is None:
            if rest[pos:].strip(" \t;"):
                return media, {}
            break
        key, val = _decode_param(param.group(1).lower(), param.group(2))
        target = encoded if param.group(1).endswith("*") else params
        target.setdefault(key, val)
        pos = param.end()
    params.update(encoded)
    return media, params


def _parse_media_type_lenient(value: str) -> tuple[str, dict[str, str]]:
    try:
        return _parse_media_type(value)
    except ValueError:
        return "", {}


def _boundary_kind(line: bytes, dash: bytes) -> str | None:
    if not line.startswith(dash):
        return None
    rest = line[len(dash):]
    if rest.startswith(b"--") and not rest[2:].strip(b" \t\r\n"):
        return "final"
    if not rest.strip(b" \t\r\n"):
        return "delimiter"
    return None


def _strip_final_newline(body: bytes) -> bytes:
    if body.endswith(b"\r\n"):
        return body[:-2]
    if body.endswith(b"\n"):
        return body[:-1]
    return body


def _multipart_parts(data: bytes, boundary: str) -> Iterator[bytes]:
    dash = b"--" + boundary.encode("utf-8")
    lines = _LINE_RE.findall(data)
    index = 0
    while True:
        if index >= len(lines):
            raise MimeParseError("multipart: NextPart: EOF")
        kind = _boundary_kind(lines[index], dash)
        index += 1
        if kind == "final":
            return
        if kind == "delimiter":
            break

    while True:
        start = index
        kind = None
        while index < len(lines):
            kind = _boundary_kind(lines[index], dash)
            if kind:
                break
            index += 1
        if not kind:
            raise MimeParseError("multipart: unexpected EOF")
        body = _strip_final_newline(b"".join(lines[start:index]))
        index += 1
        yield body
        if kind == "final":
            return


def _decode_content(data: bytes, cte: str) -> bytes:
    encoding = cte.strip().lower()
    if encoding == "quoted-printable":
        return binascii.a2b_qp(data)
    if encoding == "base64":
        cleaned = data.replace(b"\r\n", b"").replace(b"\n", b"")
        try:
            return base64.b64decode(cleaned, validate=True)
        except binascii.Error as exc:
            raise MimeParseError(f"illegal base64 data: {exc}") from exc
    return data


def _parse_multipart(data: bytes, boundary: str, parsed: ParsedEmail) -> None:
    if not boundary:
        raise MimeParseError("multipart missing boundary")
    for chunk in _multipart_parts(data, boundary):
        _parse_part(chunk, parsed)


def _parse_part(chunk: bytes, parsed: ParsedEmail) -> None:
    headers, body = _read_header(chunk, require=False)
    content_id = _header_get(headers, "Content-Id").strip("<>")
    media, params = _parse_media_type_lenient(_header_get(headers, "Content-Type"))
    disp_type, disp_params = _parse_media_type_lenient(
        _header_get(headers, "Content-Disposition")
    )

    filename = decode_header(disp_params.get("filename") or params.get("name", ""))
    is_inline = disp_type == "inline" or content_id != ""
    data = _decode_content(body, _header_get(headers, "Content-Transfer-Encoding"))

    if media == "text/plain" and not filename and not is_inline:
        parsed.body_text = data
    elif media == "text/html" and not filename and not is_inline:
        parsed.body_html = data
    elif media.startswith("multipart/"):
        _parse_multipart(data, params.get("boundary", ""), parsed)
    else:
        parsed.parts.append(
            Part(
                content_type=media,
                filename=filename,
                content_id=content_id,
                is_inline=is_inline,
                data=data,
            )
        )


def _parse_body(body: bytes, content_type: str, parsed: ParsedEmail) -> None:
    try:
        media, params = _parse_media_type(content_type)
    except ValueError:
        parsed.body_text = body
        return
    if media == "text/plain":
        parsed.body_text = body
    elif media == "text/html":
        parsed.body_html = body
    elif media.startswith("multipart/"):
        _parse_multipart(body, params.get("boundary", ""), parsed)
    else:
        parsed.parts.append(Part(content_type=media, data=body))


def _parse_addresses(value: str) -> list[EmailAddress] | None:
    result: list[EmailAddress] = []
    for name, address in getaddresses([value]):
        if not name and not address:
            continue
        local, at, domain = address.rpartition("@")
        if not at or not local or not domain or any(c.isspace() for c in address):
            return None
        result.append(EmailAddress(email=address, name=decode_header(name)))
    return result or None


def _parse_single_address(value: str) -> EmailAddress | None:
    if not value:
        return None
    addresses = _parse_addresses(value)
    if addresses is None or len(addresses) != 1:
        return None
    return addresses[0]


def parse_address_list(value: str) -> list[EmailAddress]:
    """Parse a comma-separated address list; any malformed entry yields an empty list."""
    if not value:
        return []
    return _parse_addresses(value) or []


def decode_header(value: str) -> str:
    """Decode RFC 2047 encoded words, returning the input unchanged on failure."""
    if "=?" not in value:
        return value
    try:
        return str(make_header(_decode_words(value)))
    except (HeaderParseError, LookupError, UnicodeDecodeError, ValueError):
        return value


def _read_source(source: Source) -> bytes:
    if isinstance(source, str):
        return source.encode("utf-8")
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    data = source.read()
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


def parse(source: Source) -> ParsedEmail:
    """Parse a raw RFC 5322 message from bytes, text or a readable file."""
    data = _read_source(source)
    try:
        headers, body = _read_header(data, require=True)
    except MimeParseError as exc:
        raise MimeParseError(f"read message: {exc}") from exc

    parsed = ParsedEmail(headers={k: list(v) for k, v in headers.items()})
    parsed.message_id = _header_get(headers, "Message-ID").strip("<>")
    parsed.in_reply_to = _header_get(headers, "In-Reply-To").strip("<>")
    parsed.subject = decode_header(_header_get(headers, "Subject"))
    parsed.references = [r.strip("<>") for r in _header_get(headers, "References").split()]

    date_value = _header_get(headers, "Date")
    if date_value:
        try:
            parsed.date = parsedate_to_datetime(date_value)
        except (TypeError, ValueError, IndexError):
            pass

    sender = _parse_single_address(_header_get(headers, "From"))
    if sender is not None:
        parsed.from_address = sender
    reply_to = _parse_single_address(_header_get(headers, "Reply-To"))
    if reply_to is not None:
        parsed.reply_to = reply_to.email

    parsed.to = parse_address_list(_header_get(headers, "To"))
    parsed.cc = parse_address_list(_header_get(headers, "Cc"))

    try:
        _parse_body(body, _header_get(headers, "Content-Type"), parsed)
    except MimeParseError as exc:
        raise MimeParseError(f"parse body: {exc}") from exc
    return parsed