import io
from datetime import datetime, timezone

import pytest

from ngxmail.mime import MimeParseError, decode_header, parse, parse_address_list

SIMPLE_PLAIN_EMAIL = (
    "From: Alice <alice@example.com>\n"
    "To: bob@example.com\n"
    "Subject: Hello World\n"
    "Date: Mon, 01 Jan 2024 12:00:00 +0000\n"
    "Message-ID: <abc123@example.com>\n"
    "MIME-Version: 1.0\n"
    "Content-Type: text/plain; charset=utf-8\n"
    "\n"
    "Hello, Bob!\n"
)

MULTIPART_EMAIL = (
    "From: sender@example.com\n"
    "To: recipient@example.com\n"
    "Subject: Multipart\n"
    "Date: Mon, 01 Jan 2024 12:00:00 +0000\n"
    "MIME-Version: 1.0\n"
    'Content-Type: multipart/alternative; boundary="boundary123"\n'
    "\n"
    "--boundary123\n"
    "Content-Type: text/plain; charset=utf-8\n"
    "\n"
    "Plain text body\n"
    "--boundary123\n"
    "Content-Type: text/html; charset=utf-8\n"
    "\n"
    "<b>HTML body</b>\n"
    "--boundary123--\n"
)


def test_parse_simple_plain():
    parsed = parse(SIMPLE_PLAIN_EMAIL)
    assert parsed.from_address.email == "alice@example.com"
    assert parsed.from_address.name == "Alice"
    assert [a.email for a in parsed.to] == ["bob@example.com"]
    assert parsed.subject == "Hello World"
    assert parsed.message_id == "abc123@example.com"
    assert b"Hello, Bob!" in parsed.body_text


def test_parse_date_and_headers():
    parsed = parse(SIMPLE_PLAIN_EMAIL.encode("utf-8"))
    assert parsed.date == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert parsed.headers["Message-Id"] == ["<abc123@example.com>"]


def test_parse_from_file_object():
    parsed = parse(io.BytesIO(SIMPLE_PLAIN_EMAIL.encode("utf-8")))
    assert parsed.subject == "Hello World"


def test_parse_multipart():
    parsed = parse(MULTIPART_EMAIL)
    assert b"Plain text body" in parsed.body_text
    assert b"HTML body" in parsed.body_html


def test_parse_invalid_input():
    with pytest.raises(MimeParseError):
        parse("not a valid email")


def test_parse_in_reply_to():
    raw = (
        "From: a@example.com\n"
        "To: b@example.com\n"
        "Subject: Re: Test\n"
        "Date: Mon, 01 Jan 2024 12:00:00 +0000\n"
        "In-Reply-To: <original@example.com>\n"
        "References: <original@example.com>\n"
        "Content-Type: text/plain\n"
        "\n"
        "reply\n"
    )
    parsed = parse(raw)
    assert parsed.in_reply_to == "original@example.com"
    assert parsed.references == ["original@example.com"]


def test_parse_cc():
    raw = (
        "From: a@example.com\n"
        "To: b@example.com\n"
        "Cc: c@example.com, d@example.com\n"
        "Subject: CC Test\n"
        "Date: Mon, 01 Jan 2024 12:00:00 +0000\n"
        "Content-Type: text/plain\n"
        "\n"
        "body\n"
    )
    parsed = parse(raw)
    assert [a.email for a in parsed.cc] == ["c@example.com", "d@example.com"]


@pytest.mark.parametrize(
    "value, count",
    [
        ("alice@example.com", 1),
        ("alice@example.com, bob@example.com", 2),
        ("", 0),
        ("invalid-not-an-address", 0),
    ],
)
def test_parse_address_list(value, count):
    assert len(parse_address_list(value)) == count


def test_decode_header_plain():
    assert decode_header("Hello World") == "Hello World"


def test_decode_header_encoded():
    assert decode_header("=?utf-8?q?Hello_World?=") == "Hello World"


def test_parse_base64_attachment():
    raw = (
        "From: a@example.com\r\n"
        "To: b@example.com\r\n"
        "Subject: Attachment\r\n"
        "Date: Mon, 01 Jan 2024 12:00:00 +0000\r\n"
        "MIME-Version: 1.0\r\n"
        'Content-Type: multipart/mixed; boundary="bnd"\r\n'
        "\r\n"
        "--bnd\r\n"
        "Content-Type: text/plain; charset=utf-8\r\n"
        "\r\n"
        "See attachment.\r\n"
        "--bnd\r\n"
        "Content-Type: application/octet-stream\r\n"
        'Content-Disposition: attachment; filename="file.bin"\r\n'
        "Content-Transfer-Encoding: base64\r\n"
        "\r\n"
        "aGVsbG8=\r\n"
        "--bnd--\r\n"
    )
    parsed = parse(raw)
    assert b"See attachment" in parsed.body_text
    assert len(parsed.parts) == 1
    assert parsed.parts[0].data == b"hello"
    assert parsed.parts[0].filename == "file.bin"
    assert parsed.parts[0].content_type == "application/octet-stream"


def test_parse_quoted_printable_part():
    raw = (
        "From: a@example.com\r\n"
        "To: b@example.com\r\n"
        "Subject: QP Test\r\n"
        "Date: Mon, 01 Jan 2024 12:00:00 +0000\r\n"
        "MIME-Version: 1.0\r\n"
        'Content-Type: multipart/alternative; boundary="qpbnd"\r\n'
        "\r\n"
        "--qpbnd\r\n"
        "Content-Type: text/plain; charset=utf-8\r\n"
        "Content-Transfer-Encoding: quoted-printable\r\n"
        "\r\n"
        "Hello =3D World\r\n"
        "--qpbnd--\r\n"
    )
    parsed = parse(raw)
    assert b"Hello = World" in parsed.body_text


def test_parse_inline_image():
    raw = (
        "From: a@example.com\r\n"
        "To: b@example.com\r\n"
        "Subject: Inline\r\n"
        "Date: Mon, 01 Jan 2024 12:00:00 +0000\r\n"
        "MIME-Version: 1.0\r\n"
        'Content-Type: multipart/related; boundary="relbnd"\r\n'
        "\r\n"
        "--relbnd\r\n"
        "Content-Type: text/html; charset=utf-8\r\n"
        "\r\n"
        "<img src=cid:img1>\r\n"
        "--relbnd\r\n"
        "Content-Type: image/png\r\n"
        "Content-Disposition: inline\r\n"
        "Content-Id: <img1>\r\n"
        "Content-Transfer-Encoding: base64\r\n"
        "\r\n"
        "aW1nZGF0YQ==\r\n"
        "--relbnd--\r\n"
    )
    parsed = parse(raw)
    assert len(parsed.parts) == 1
    assert parsed.parts[0].is_inline
    assert parsed.parts[0].content_id == "img1"
    assert parsed.parts[0].data == b"imgdata"
    assert b"cid:img1" in parsed.body_html


def test_parse_top_level_html():
    raw = (
        "From: a@example.com\n"
        "To: b@example.com\n"
        "Subject: HTML Only\n"
        "Date: Mon, 01 Jan 2024 12:00:00 +0000\n"
        "Content-Type: text/html; charset=utf-8\n"
        "\n"
        "<p>Hello</p>\n"
    )
    parsed = parse(raw)
    assert b"<p>Hello</p>" in parsed.body_html


def test_parse_unknown_content_type():
    raw = (
        "From: a@example.com\n"
        "To: b@example.com\n"
        "Subject: Binary\n"
        "Date: Mon, 01 Jan 2024 12:00:00 +0000\n"
        "Content-Type: application/octet-stream\n"
        "\n"
        "binarydata\n"
    )
    parsed = parse(raw)
    assert len(parsed.parts) == 1
    assert parsed.parts[0].content_type == "application/octet-stream"
    assert b"binarydata" in parsed.parts[0].data


def test_parse_reply_to():
    raw = (
        "From: a@example.com\n"
        "To: b@example.com\n"
        "Reply-To: reply@example.com\n"
        "Subject: Test\n"
        "Date: Mon, 01 Jan 2024 12:00:00 +0000\n"
        "Content-Type: text/plain\n"
        "\n"
        "body\n"
    )
    parsed = parse(raw)
    assert parsed.reply_to == "reply@example.com"


def test_parse_missing_content_type_falls_back_to_text():
    raw = "From: a@example.com\nSubject: Plain\n\njust text\n"
    parsed = parse(raw)
    assert parsed.body_text == b"just text\n"
    assert parsed.parts == []


def test_parse_multipart_missing_boundary():
    raw = "From: a@example.com\nContent-Type: multipart/mixed\n\nbody\n"
    with pytest.raises(MimeParseError):
        parse(raw)


def test_parse_invalid_base64_part():
    raw = (
        "From: a@example.com\r\n"
        'Content-Type: multipart/mixed; boundary="bnd"\r\n'
        "\r\n"
        "--bnd\r\n"
        "Content-Type: application/octet-stream\r\n"
        "Content-Transfer-Encoding: base64\r\n"
        "\r\n"
        "!!!notbase64\r\n"
        "--bnd--\r\n"
    )
    with pytest.raises(MimeParseError):
        parse(raw)


def test_parse_nested_multipart():
    raw = (
        "From: a@example.com\r\n"
        'Content-Type: multipart/mixed; boundary="outer"\r\n'
        "\r\n"
        "--outer\r\n"
        'Content-Type: multipart/alternative; boundary="inner"\r\n'
        "\r\n"
        "--inner\r\n"
        "Content-Type: text/plain\r\n"
        "\r\n"
        "inner plain\r\n"
        "--inner\r\n"
        "Content-Type: text/html\r\n"
        "\r\n"
        "<i>inner html</i>\r\n"
        "--inner--\r\n"
        "--outer--\r\n"
    )
    parsed = parse(raw)
    assert parsed.body_text == b"inner plain"
    assert parsed.body_html == b"<i>inner html</i>"


def test_parse_encoded_subject():
    raw = "From: a@example.com\nSubject: =?utf-8?q?Hello_World?=\nContent-Type: text/plain\n\nx\n"
    assert parse(raw).subject == "Hello World"