import pytest

from npmdeps.errors import (
    AmbiguousDigestError,
    CacheIoError,
    ErrorCode,
    FetchError,
    HashToolError,
    IntegrityError,
    IntegrityMismatchError,
    LockfileError,
    PolicyError,
    UnsupportedSchemaError,
    UrlRewriteError,
    ValidationError,
)
from npmdeps.fetch import FetchTarget
from npmdeps.policy import Policy


def test_error_codes_are_stable_and_machine_readable() -> None:
    errors = [
        ValidationError("bad input"),
        LockfileError("bad lockfile"),
        UnsupportedSchemaError("unknown version"),
        UrlRewriteError("bad shorthand"),
        IntegrityError("bad digest"),
        AmbiguousDigestError("which digest"),
        IntegrityMismatchError("digest drift"),
        FetchError("network down"),
        CacheIoError("disk full"),
        PolicyError("not allowed"),
        HashToolError("nix failed"),
    ]
    assert [error.code for error in errors] == [
        ErrorCode.VALIDATION.value,
        ErrorCode.LOCKFILE.value,
        ErrorCode.UNSUPPORTED_SCHEMA.value,
        ErrorCode.URL_REWRITE.value,
        ErrorCode.INTEGRITY.value,
        ErrorCode.AMBIGUOUS_DIGEST.value,
        ErrorCode.INTEGRITY_MISMATCH.value,
        ErrorCode.FETCH.value,
        ErrorCode.CACHE_IO.value,
        ErrorCode.POLICY.value,
        ErrorCode.HASH_TOOL.value,
    ]


def test_integrity_failures_share_a_base_class() -> None:
    assert isinstance(AmbiguousDigestError("x"), IntegrityError)
    assert isinstance(IntegrityMismatchError("x"), IntegrityError)


def test_with_context_does_not_override_existing_keys() -> None:
    error = FetchError("boom", context={"url": "https://example.invalid/a.tgz"})

    error.with_context(url="other", package="node_modules/a")

    assert error.context == {"url": "https://example.invalid/a.tgz", "package": "node_modules/a"}
    assert "package: node_modules/a" in str(error)


def test_error_to_dict_includes_hint_and_context() -> None:
    payload = CacheIoError("disk full", hint="free space", context={"path": "/tmp/x"}).to_dict()

    assert payload["code"] == "E_CACHE_IO"
    assert payload["hint"] == "free space"
    assert payload["context"] == {"path": "/tmp/x"}


def test_fetch_target_namespaces_cache_key() -> None:
    target = FetchTarget.for_url("https://registry.npmjs.org/a/-/a-1.0.0.tgz")

    assert target.cache_key == (
        "make-fetch-happen:request-cache:https://registry.npmjs.org/a/-/a-1.0.0.tgz"
    )


def test_policy_rejects_non_positive_worker_count() -> None:
    with pytest.raises(ValidationError):
        Policy(max_workers=0)
