"""Policy configuration and enforcement helpers."""

from __future__ import annotations

import re
import warnings
from dataclasses import dataclass
from typing import Literal

from npmdeps.errors import PolicyError, ValidationError

MutableRefPolicy = Literal["warn", "error", "allow"]

COMMIT_PATTERN = re.compile(r"^[0-9a-f]{40}$")


class MutableRefWarning(UserWarning):
    """Warning raised when a hosted git dependency is pinned to a mutable ref."""


@dataclass(frozen=True, slots=True)
class Policy:
    max_workers: int | None = None
    require_integrity: bool = False
    mutable_ref_policy: MutableRefPolicy = "warn"

    def __post_init__(self) -> None:
        if self.max_workers is not None and self.max_workers < 1:
            raise ValidationError(
                "Policy max_workers must be a positive integer.",
                context={"max_workers": str(self.max_workers)},
            )


def ensure_integrity_declared(*, policy: Policy, package: str, integrity: str | None) -> None:
    if integrity is None and policy.require_integrity:
        raise PolicyError(
            "Package has no integrity digest and policy requires one.",
            hint="Regenerate the lockfile or relax policy.require_integrity.",
            context={"operation": "prefetch", "package": package},
        )


def enforce_mutable_ref(*, policy: Policy, package: str, ref: str) -> None:
    if COMMIT_PATTERN.fullmatch(ref):
        return
    if policy.mutable_ref_policy == "allow":
        return
    if policy.mutable_ref_policy == "warn":
        warnings.warn(
            f"Hosted git dependency `{package}` uses mutable ref `{ref}`; "
            "its tarball is not inherently reproducible.",
            MutableRefWarning,
            stacklevel=2,
        )
        return
    if policy.mutable_ref_policy == "error":
        raise PolicyError(
            "Mutable git refs are not allowed by policy.",
            hint="Pin the dependency to a full 40-char commit SHA or relax mutable_ref_policy.",
            context={"operation": "prefetch", "package": package, "ref": ref},
        )
    raise ValidationError(f"Unsupported mutable_ref_policy value: {policy.mutable_ref_policy}")
