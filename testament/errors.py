"""
testament.errors
----------------

A small, consistent error system for the engine and its drivers.

Design goals
------------
- One root `TestamentError` with machine-friendly `code` and optional `data`.
- Concrete subclasses for each failure kind the engine reports
  (length, range, curve membership, authentication, recovery, codec, config).
- Non-invasive helpers to enrich errors with contextual fields.
- Safe JSON representation (`to_dict`) suitable for logs and the CLI.

Error payloads must never carry plaintext, key bytes or partially recovered
key material. Only sizes, offsets, field names and public values go in `data`.

This module uses only stdlib so every other module can import it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Mapping, Optional

# ---------------------------------------------------------------------------
# Error codes & classes
# ---------------------------------------------------------------------------


class Severity(IntEnum):
    """Optional severity hint for operators."""

    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


class ErrorCode(str, Enum):
    # Generic
    INTERNAL = "TESTAMENT/INTERNAL"
    CONFIG = "TESTAMENT/CONFIG"
    ENTROPY_EXHAUSTED = "TESTAMENT/ENTROPY_EXHAUSTED"

    # Shape / range of inputs
    INVALID_LENGTH = "TESTAMENT/INVALID_LENGTH"
    INVALID_RANGE = "TESTAMENT/INVALID_RANGE"

    # Cipher
    UNSUPPORTED_MODE = "TESTAMENT/UNSUPPORTED_MODE"
    AUTHENTICATION_FAILURE = "TESTAMENT/AUTHENTICATION_FAILURE"

    # Curve / signatures
    POINT_NOT_ON_CURVE = "TESTAMENT/POINT_NOT_ON_CURVE"
    RECOVERY_FAILURE = "TESTAMENT/RECOVERY_FAILURE"
    VERIFICATION_UNAVAILABLE = "TESTAMENT/VERIFICATION_UNAVAILABLE"

    # Will codec
    SERIALIZATION = "TESTAMENT/SERIALIZATION"
    DESERIALIZATION = "TESTAMENT/DESERIALIZATION"


@dataclass(eq=False)
class TestamentError(Exception):
    """
    Root error for testament components.

    Attributes
    ----------
    code: str
        Machine-stable error code (see ErrorCode).
    message: str
        Human hint suitable for logs; never includes secrets.
    data: dict
        Optional machine data (sizes, field names, public values). JSON-serializable.
    severity: Severity
        Optional severity hint (default ERROR).
    cause: Optional[BaseException]
        Wrapped original exception; not included in equality comparison.
    """

    __test__ = False  # keep pytest from collecting this as a test class

    code: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    severity: Severity = Severity.ERROR
    cause: Optional[BaseException] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        super().__init__(f"{getattr(self.code, 'value', self.code)}: {self.message}")

    # ---------------- Public API ----------------

    def with_context(self, **ctx: Any) -> "TestamentError":
        """Return a *new* error with extra context merged (does not mutate)."""
        d = dict(self.data)
        for k, v in ctx.items():
            d[k] = _coerce_json(v)
        return self._clone(data=d)

    def with_cause(self, exc: BaseException) -> "TestamentError":
        """Attach/replace the causal exception (returns a new instance)."""
        return self._clone(data=dict(self.data), cause=exc)

    def to_dict(self, include_cause: bool = False) -> Dict[str, Any]:
        """JSON-safe shape suitable for logs and CLI output."""
        out = {
            "code": str(getattr(self.code, "value", self.code)),
            "message": self.message,
            "data": _coerce_json(self.data),
            "severity": int(self.severity),
        }
        if include_cause and self.cause is not None:
            out["cause"] = {
                "type": type(self.cause).__name__,
                "message": str(self.cause),
            }
        return out

    def __str__(self) -> str:  # pragma: no cover - human formatting
        code = getattr(self.code, "value", self.code)
        parts = [f"{code}: {self.message}"]
        if self.data:
            preview = ", ".join(f"{k}={_preview(v)}" for k, v in self.data.items())
            parts.append(f"[{preview}]")
        return " ".join(parts)

    def _clone(self, **changes: Any) -> "TestamentError":
        # Subclasses have narrower __init__ signatures, so copy the instance state.
        cls = type(self)
        clone = cls.__new__(cls)
        clone.__dict__.update(self.__dict__)
        clone.__dict__.update(changes)
        clone.args = self.args
        return clone


# Concrete subclasses (thin wrappers for ergonomics)
class InternalError(TestamentError):
    def __init__(self, message="internal error", **data: Any) -> None:
        super().__init__(
            code=ErrorCode.INTERNAL, message=message, data=_jsonmap(data)
        )


class InvalidLength(TestamentError, ValueError):
    """Wrong key, IV, block, tag or serialized-data size."""

    def __init__(self, message="invalid length", **data: Any) -> None:
        super().__init__(
            code=ErrorCode.INVALID_LENGTH, message=message, data=_jsonmap(data)
        )


class InvalidRange(TestamentError, ValueError):
    """Scalar at or above its modulus/order, or negative where unsigned is expected."""

    def __init__(self, message="value out of range", **data: Any) -> None:
        super().__init__(
            code=ErrorCode.INVALID_RANGE, message=message, data=_jsonmap(data)
        )


class PointNotOnCurve(TestamentError):
    def __init__(self, message="point is not on the curve", **data: Any) -> None:
        super().__init__(
            code=ErrorCode.POINT_NOT_ON_CURVE, message=message, data=_jsonmap(data)
        )


class AuthenticationFailure(TestamentError):
    def __init__(self, message="authentication tag mismatch", **data: Any) -> None:
        super().__init__(
            code=ErrorCode.AUTHENTICATION_FAILURE,
            message=message,
            data=_jsonmap(data),
            severity=Severity.CRITICAL,
        )


class RecoveryFailure(TestamentError):
    def __init__(self, message="signature recovery failed", **data: Any) -> None:
        super().__init__(
            code=ErrorCode.RECOVERY_FAILURE, message=message, data=_jsonmap(data)
        )


class VerificationUnavailable(TestamentError):
    """Verification could not be performed (distinct from verifying as false)."""

    def __init__(
        self, message="verification could not be performed", **data: Any
    ) -> None:
        super().__init__(
            code=ErrorCode.VERIFICATION_UNAVAILABLE,
            message=message,
            data=_jsonmap(data),
        )


class UnsupportedMode(TestamentError):
    def __init__(self, mode: Any) -> None:
        super().__init__(
            code=ErrorCode.UNSUPPORTED_MODE,
            message=f"unsupported cipher mode: {mode!r}",
            data={"mode": _coerce_json(mode)},
        )


class SerializationError(TestamentError):
    def __init__(self, message="serialization failed", **data: Any) -> None:
        super().__init__(
            code=ErrorCode.SERIALIZATION, message=message, data=_jsonmap(data)
        )


class DeserializationError(TestamentError):
    def __init__(self, message="deserialization failed", **data: Any) -> None:
        super().__init__(
            code=ErrorCode.DESERIALIZATION, message=message, data=_jsonmap(data)
        )


class ConfigError(TestamentError):
    def __init__(self, message="invalid configuration", **data: Any) -> None:
        super().__init__(code=ErrorCode.CONFIG, message=message, data=_jsonmap(data))


class EntropyExhausted(TestamentError):
    def __init__(self, what: str, attempts: int) -> None:
        super().__init__(
            code=ErrorCode.ENTROPY_EXHAUSTED,
            message=f"could not draw a non-zero {what}",
            data={"what": what, "attempts": attempts},
            severity=Severity.CRITICAL,
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _jsonmap(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: _coerce_json(v) for k, v in data.items()}


def _coerce_json(v: Any) -> Any:
    # Keep JSON primitives; stringify the rest; hex-encode bytes.
    if v is None or isinstance(v, (bool, int, float, str, list, dict)):
        return v
    if isinstance(v, (bytes, bytearray)):
        return v.hex()
    if isinstance(v, Enum):
        return v.value
    try:
        return str(v)
    except Exception:
        return "<unprintable>"


def _preview(v: Any, limit: int = 96) -> str:
    s = str(_coerce_json(v))
    return s if len(s) <= limit else s[:limit] + "..."


__all__ = [
    "Severity",
    "ErrorCode",
    "TestamentError",
    "InternalError",
    "InvalidLength",
    "InvalidRange",
    "PointNotOnCurve",
    "AuthenticationFailure",
    "RecoveryFailure",
    "VerificationUnavailable",
    "UnsupportedMode",
    "SerializationError",
    "DeserializationError",
    "ConfigError",
    "EntropyExhausted",
]
