"""Typed error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error identifiers used across the prefetch pipeline."""

    VALIDATION = "E_VALIDATION"
    LOCKFILE = "E_LOCKFILE"
    UNSUPPORTED_SCHEMA = "E_UNSUPPORTED_SCHEMA"
    URL_REWRITE = "E_URL_REWRITE"
    INTEGRITY = "E_INTEGRITY"
    AMBIGUOUS_DIGEST = "E_AMBIGUOUS_DIGEST"
    INTEGRITY_MISMATCH = "E_INTEGRITY_MISMATCH"
    FETCH = "E_FETCH"
    CACHE_IO = "E_CACHE_IO"
    POLICY = "E_POLICY"
    HASH_TOOL = "E_HASH_TOOL"


class NpmDepsError(Exception):
    """Base error class that carries code, optional hint, and context."""

    code: str
    hint: str | None
    context: dict[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.context:
            for k, v in self.context.items():
                if v:
                    parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    def with_context(self, **extra: str) -> NpmDepsError:
        """Attach extra context keys that are not already set and return ``self``."""
        for key, value in extra.items():
            self.context.setdefault(key, value)
        return self

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class ValidationError(NpmDepsError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.VALIDATION, hint=hint, context=context)


class LockfileError(NpmDepsError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.LOCKFILE, hint=hint, context=context)


class UnsupportedSchemaError(NpmDepsError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.UNSUPPORTED_SCHEMA, hint=hint, context=context)


class UrlRewriteError(NpmDepsError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.URL_REWRITE, hint=hint, context=context)


class IntegrityError(NpmDepsError):
    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode = ErrorCode.INTEGRITY,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=code, hint=hint, context=context)


class AmbiguousDigestError(IntegrityError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.AMBIGUOUS_DIGEST, hint=hint, context=context)


class IntegrityMismatchError(IntegrityError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.INTEGRITY_MISMATCH, hint=hint, context=context)


class FetchError(NpmDepsError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.FETCH, hint=hint, context=context)


class CacheIoError(NpmDepsError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.CACHE_IO, hint=hint, context=context)


class PolicyError(NpmDepsError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.POLICY, hint=hint, context=context)


class HashToolError(NpmDepsError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.HASH_TOOL, hint=hint, context=context)


__all__ = [
    "AmbiguousDigestError",
    "CacheIoError",
    "ErrorCode",
    "FetchError",
    "HashToolError",
    "IntegrityError",
    "IntegrityMismatchError",
    "LockfileError",
    "NpmDepsError",
    "PolicyError",
    "UnsupportedSchemaError",
    "UrlRewriteError",
    "ValidationError",
]
