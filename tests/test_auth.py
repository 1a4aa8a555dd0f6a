import string
import uuid

from ngxmail.auth import (
    ALL_SCOPES,
    Claims,
    Scope,
    claims_context,
    current_claims,
    current_org_id,
    generate_api_key,
    hash_api_key,
    verify_api_key,
)

_URLSAFE = set(string.ascii_letters + string.digits + "-_")

_SHA256_EMPTY = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
_SHA256_ABC = "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


def test_generate_api_key_prefix():
    key = generate_api_key()
    assert key.plaintext.startswith("am_live_")


def test_generate_api_key_random_segment_shape():
    key = generate_api_key()
    segment = key.plaintext[len("am_live_"):]
    assert len(segment) == 43
    assert set(segment) <= _URLSAFE


def test_generate_api_key_display_prefix():
    key = generate_api_key()
    assert key.display_prefix == key.plaintext[:16]


def test_generate_api_key_hash_matches_plaintext():
    key = generate_api_key()
    assert hash_api_key(key.plaintext) == key.key_hash


def test_generate_api_key_verify_round_trip():
    key = generate_api_key()
    assert verify_api_key(key.plaintext, key.key_hash) is True


def test_generate_api_key_uniqueness():
    keys = [generate_api_key() for _ in range(5)]
    assert len({k.plaintext for k in keys}) == 5
    assert len({k.key_hash for k in keys}) == 5


def test_hash_api_key_known_values():
    assert hash_api_key("") == _SHA256_EMPTY
    assert hash_api_key("abc") == _SHA256_ABC
    assert hash_api_key("abc") == _SHA256_ABC


def test_hash_api_key_different_inputs():
    assert hash_api_key("am_live_aaa") != hash_api_key("am_live_bbb")


def test_hash_api_key_length_and_alphabet():
    digest = hash_api_key("am_live_test")
    assert len(digest) == 64
    assert set(digest) <= set("0123456789abcdef")


def test_verify_api_key_correct():
    plaintext = "am_live_correctkey"
    assert verify_api_key(plaintext, hash_api_key(plaintext)) is True


def test_verify_api_key_wrong_plaintext():
    stored = hash_api_key("am_live_correctkey")
    assert verify_api_key("am_live_wrongkey", stored) is False


def test_verify_api_key_tampered_hash():
    plaintext = "am_live_correctkey"
    stored = hash_api_key(plaintext)
    tampered = stored[:-1] + "x"
    assert verify_api_key(plaintext, tampered) is False


def test_has_scope_present():
    claims = Claims(scopes=(Scope.INBOX_READ, Scope.INBOX_WRITE))
    assert claims.has_scope(Scope.INBOX_READ) is True


def test_has_scope_absent():
    claims = Claims(scopes=(Scope.INBOX_READ,))
    assert claims.has_scope(Scope.INBOX_WRITE) is False


def test_has_scope_accepts_plain_strings():
    claims = Claims(scopes=("draft:read",))
    assert claims.has_scope(Scope.DRAFT_READ) is True


def test_has_scope_org_admin_grants_all():
    claims = Claims(scopes=(Scope.ORG_ADMIN,))
    assert claims.has_scope("completely:unknown") is True
    assert all(claims.has_scope(s) for s in ALL_SCOPES)


def test_all_scopes_lists_every_scope():
    assert len(ALL_SCOPES) == 9
    assert Scope("search:read") in ALL_SCOPES


def test_can_access_pod_without_pod_restriction():
    claims = Claims(pod_id=None)
    assert claims.can_access_pod(uuid.uuid4()) is True


def test_can_access_pod_matching():
    pod = uuid.uuid4()
    assert Claims(pod_id=pod).can_access_pod(pod) is True


def test_can_access_pod_non_matching():
    assert Claims(pod_id=uuid.uuid4()).can_access_pod(uuid.uuid4()) is False


def test_claims_round_trip():
    org = uuid.uuid4()
    claims = Claims(org_id=org, scopes=(Scope.INBOX_READ,))
    with claims_context(claims):
        got = current_claims()
        assert got is claims
        assert got.org_id == org


def test_claims_empty_context():
    assert current_claims() is None


def test_org_id_empty_context():
    assert current_org_id() == uuid.UUID(int=0)


def test_org_id_with_claims():
    org = uuid.uuid4()
    with claims_context(Claims(org_id=org)):
        assert current_org_id() == org


def test_claims_context_restores_previous():
    outer = Claims(org_id=uuid.uuid4())
    inner = Claims(org_id=uuid.uuid4())
    with claims_context(outer):
        with claims_context(inner):
            assert current_claims() is inner
        assert current_claims() is outer
    assert current_claims() is None