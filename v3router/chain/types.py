"""
Logical contract calls and their normalized results.

Every read made through a ChainReader is described by a LogicalCall and
answered by exactly one ProbeResult. Backends disagree on the shape of a
successful batched result (bare value, tuple, ``{"status": ...}`` dicts), so
normalize_result() folds them into Success/Failure at the boundary.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Sequence, Tuple, Union


@dataclass(frozen=True)
class LogicalCall:
    """A single read-only contract call."""

    address: str
    abi: Sequence[Dict[str, Any]] = field(repr=False, compare=False)
    function_name: str
    args: Tuple[Any, ...] = ()

    def describe(self) -> str:
        args = ", ".join(str(a) for a in self.args)
        return f"{self.address}.{self.function_name}({args})"


@dataclass(frozen=True)
class Success:
    """A call that returned a value."""

    value: Any

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """A call that failed; reason is a human-readable description."""

    reason: str

    @property
    def ok(self) -> bool:
        return False


ProbeResult = Union[Success, Failure]


def normalize_result(raw: Any) -> ProbeResult:
    """
    Convert one raw backend result into a ProbeResult.

    Accepts ProbeResult instances, ``{"status": "success", "result": ...}``
    dicts, exceptions, and bare values (scalars, tuples, lists).
    """
    if isinstance(raw, (Success, Failure)):
        return raw
    if isinstance(raw, BaseException):
        return Failure(f"{type(raw).__name__}: {raw}")
    if isinstance(raw, dict) and "status" in raw:
        if raw.get("status") == "success":
            return Success(raw.get("result"))
        return Failure(str(raw.get("error") or "call failed"))
    if raw is None:
        return Failure("empty result")
    return Success(raw)
