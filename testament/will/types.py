"""
Will value types, one per pipeline stage.

    FormattedWill   testator + estates
    AddressedWill   + salt, will (the predicted will-contract address)
    SignedWill      + nonce, deadline, signature  (the canonical `Will`)
    SerializedWill  fixed-width bytes for a given estate count
    EncryptedWill   ciphertext + iv (+ tag) under a `CipherMode`

Every stage is a frozen dataclass; moving to the next stage builds a new value
(`AddressedWill.from_formatted(...)`, etc.) and never mutates the previous one.
Addresses are held as 160-bit ints; use `to_dict()` for the checksummed,
JSON-friendly form.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from ..cipher.modes import CipherMode
from ..ecc.address import AddressLike, parse_address, to_checksum_address
from ..ecc.ecdsa import Signature
from ..errors import DeserializationError, InvalidRange
from ..utils.bytes import from_hex, to_hex

SALT_LIMIT = 1 << 256


def _uint(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise InvalidRange(f"{name} cannot be a bool", field=name)
    if isinstance(value, str):
        try:
            value = int(value, 0)
        except ValueError as e:
            raise InvalidRange(f"{name} is not an integer", field=name) from e
    if not isinstance(value, int):
        raise InvalidRange(f"{name} must be an integer", field=name, type=type(value).__name__)
    if value < 0:
        raise InvalidRange(f"{name} must be non-negative", field=name)
    return value


def _check_address(value: int, name: str) -> None:
    if not (0 <= value < 1 << 160):
        raise InvalidRange(f"{name} must be a 160-bit address", field=name)


@dataclass(frozen=True)
class Estate:
    beneficiary: int
    token: int
    amount: int

    def __post_init__(self) -> None:
        _check_address(self.beneficiary, "beneficiary")
        _check_address(self.token, "token")
        if self.amount < 0:
            raise InvalidRange("amount must be non-negative", field="amount")

    @classmethod
    def of(cls, beneficiary: AddressLike, token: AddressLike, amount: Any) -> "Estate":
        return cls(parse_address(beneficiary), parse_address(token), _uint(amount, "amount"))

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Estate":
        try:
            return cls.of(d["beneficiary"], d["token"], d["amount"])
        except KeyError as e:
            raise DeserializationError("estate is missing a field", field=str(e.args[0])) from e

    def to_dict(self) -> Dict[str, Any]:
        return {
            "beneficiary": to_checksum_address(self.beneficiary),
            "token": to_checksum_address(self.token),
            "amount": self.amount,
        }


def _estates(values: Iterable[Any]) -> Tuple[Estate, ...]:
    return tuple(v if isinstance(v, Estate) else Estate.from_dict(v) for v in values)


@dataclass(frozen=True)
class FormattedWill:
    testator: int
    estates: Tuple[Estate, ...]

    def __post_init__(self) -> None:
        _check_address(self.testator, "testator")
        if not self.estates:
            raise InvalidRange("a will needs at least one estate", field="estates")

    @classmethod
    def of(cls, testator: AddressLike, estates: Iterable[Any]) -> "FormattedWill":
        return cls(parse_address(testator), _estates(estates))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "testator": to_checksum_address(self.testator),
            "estates": [e.to_dict() for e in self.estates],
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "FormattedWill":
        try:
            return cls.of(d["testator"], d["estates"])
        except KeyError as e:
            raise DeserializationError("will is missing a field", field=str(e.args[0])) from e


@dataclass(frozen=True, kw_only=True)
class AddressedWill(FormattedWill):
    salt: int
    will: int

    def __post_init__(self) -> None:
        super().__post_init__()
        if not (0 <= self.salt < SALT_LIMIT):
            raise InvalidRange("salt must be a 256-bit unsigned value", field="salt")
        _check_address(self.will, "will")

    @classmethod
    def from_formatted(cls, base: FormattedWill, *, salt: int, will: AddressLike) -> "AddressedWill":
        return cls(base.testator, base.estates, salt=salt, will=parse_address(will))

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["salt"] = to_hex(self.salt.to_bytes(32, "big"))
        out["will"] = to_checksum_address(self.will)
        return out

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "AddressedWill":
        base = FormattedWill.from_dict(d)
        try:
            return cls.from_formatted(base, salt=_uint(d["salt"], "salt"), will=d["will"])
        except KeyError as e:
            raise DeserializationError("will is missing a field", field=str(e.args[0])) from e


@dataclass(frozen=True, kw_only=True)
class SignedWill(AddressedWill):
    nonce: int
    deadline: int
    signature: Signature

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.nonce < 0:
            raise InvalidRange("nonce must be non-negative", field="nonce")
        if self.deadline < 0:
            raise InvalidRange("deadline must be non-negative", field="deadline")

    @classmethod
    def from_addressed(
        cls, base: AddressedWill, *, nonce: int, deadline: int, signature: Signature
    ) -> "SignedWill":
        return cls(
            base.testator,
            base.estates,
            salt=base.salt,
            will=base.will,
            nonce=nonce,
            deadline=deadline,
            signature=signature,
        )

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["nonce"] = self.nonce
        out["deadline"] = self.deadline
        out["signature"] = self.signature.to_hex()
        return out

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "SignedWill":
        base = AddressedWill.from_dict(d)
        try:
            sig = d["signature"]
            if isinstance(sig, Mapping):
                signature = Signature(_uint(sig["r"], "r"), _uint(sig["s"], "s"), _uint(sig["v"], "v"))
            else:
                signature = Signature.from_hex(sig)
            return cls.from_addressed(
                base,
                nonce=_uint(d["nonce"], "nonce"),
                deadline=_uint(d["deadline"], "deadline"),
                signature=signature,
            )
        except KeyError as e:
            raise DeserializationError("will is missing a field", field=str(e.args[0])) from e


Will = SignedWill


@dataclass(frozen=True)
class SerializedWill:
    data: bytes
    estate_count: int

    @property
    def hex(self) -> str:
        return to_hex(self.data)

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class EncryptedWill:
    """Ciphertext envelope. The key is never part of it."""

    mode: CipherMode
    ciphertext: bytes
    iv: bytes
    auth_tag: Optional[bytes] = None
    timestamp: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "algorithm": self.mode.value,
            "iv": to_hex(self.iv),
            "auth_tag": to_hex(self.auth_tag) if self.auth_tag is not None else None,
            "ciphertext": to_hex(self.ciphertext),
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "EncryptedWill":
        try:
            tag = d.get("auth_tag")
            return cls(
                mode=CipherMode.parse(d["algorithm"]),
                ciphertext=from_hex(d["ciphertext"]),
                iv=from_hex(d["iv"]),
                auth_tag=from_hex(tag) if tag else None,
                timestamp=int(d.get("timestamp") or 0),
            )
        except KeyError as e:
            raise DeserializationError("encrypted will is missing a field", field=str(e.args[0])) from e


__all__ = [
    "Estate",
    "FormattedWill",
    "AddressedWill",
    "SignedWill",
    "Will",
    "SerializedWill",
    "EncryptedWill",
]
