import base64
import hashlib

import pytest

from npmdeps.errors import AmbiguousDigestError, IntegrityError
from npmdeps.integrity import compute_integrity, parse_integrity, select_digest


@pytest.mark.parametrize(
    ("field", "expected"),
    [
        ("sha512-foo sha1-bar", "sha512-foo"),
        ("sha1-bar md5-foo", "sha1-bar"),
        ("sha1-bar", "sha1-bar"),
        ("sha512-foo", "sha512-foo"),
        ("foo-bar sha1-bar", "sha1-bar"),
        ("sha1-bar\n  sha512-foo", "sha512-foo"),
        ("md5-only", "md5-only"),
    ],
)
def test_select_digest_follows_fixed_precedence(field: str, expected: str) -> None:
    assert select_digest(field) == expected


@pytest.mark.parametrize("field", ["foo-bar baz-foo", "sha256-a sha384-b", ""])
def test_select_digest_fails_without_a_preferred_candidate(field: str) -> None:
    with pytest.raises(AmbiguousDigestError) as excinfo:
        select_digest(field)

    assert excinfo.value.code == "E_AMBIGUOUS_DIGEST"


def test_compute_integrity_defaults_to_sha512() -> None:
    expected = base64.b64encode(hashlib.sha512(b"payload").digest()).decode("ascii")

    assert compute_integrity(b"payload") == f"sha512-{expected}"


def test_parse_integrity_decodes_algorithm_and_digest() -> None:
    raw = hashlib.sha1(b"payload").digest()
    digest = parse_integrity(f"sha1-{base64.b64encode(raw).decode('ascii')}")

    assert digest.algorithm == "sha1"
    assert digest.raw == raw
    assert digest.hex == raw.hex()


@pytest.mark.parametrize(
    "token",
    ["nodigest", "sha512-", "notahash-AAAA", "sha512-!!!!", "sha512-AAAA"],
)
def test_parse_integrity_rejects_malformed_tokens(token: str) -> None:
    with pytest.raises(IntegrityError):
        parse_integrity(token)
