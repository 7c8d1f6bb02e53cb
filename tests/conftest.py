"""
Shared pytest fixtures:
- Two real serialized wills (two estates each) with their decoded fields
- Two real Permit2 batch signatures by the same testator (chain 31337)
- Deterministic private keys with their published addresses
- Logging context reset between tests
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

import pytest

from testament import logging as tlog
from testament.ecc.ecdsa import Signature
from testament.will.types import Estate, SignedWill

TESTATOR = 0x041F57C4492760AAE44ECED29B49A30DAAD3D4CC
BENEFICIARY = 0x3FF1F826E1180D151200A4D5431A3AA3142C4A8C
TOKEN_A = 0x75FAF114EAFB1BDBE2F0316DF893FD58CE46AA4D
TOKEN_B = 0xB1D4538B4571D411F07960EF2838CE337FE1E80E

ESTATES = (
    Estate(BENEFICIARY, TOKEN_A, 1000),
    Estate(BENEFICIARY, TOKEN_B, 5000000),
)

WILL_HEX_1 = "0x" + (
    "041F57c4492760aaE44ECed29b49a30DaAD3D4Cc3fF1F826E1180d151200A4d5431a3Aa3"
    "142C4A8c75faf114eafb1BDbe2F0316DF893fd58CE46AA4d000000000000000000000000"
    "000003e83fF1F826E1180d151200A4d5431a3Aa3142C4A8cb1D4538B4571d411F07960EF"
    "2838Ce337FE1E80E000000000000000000000000004c4b40709090f298f23a5c179aee70"
    "b7f4ad6ec3784f273e414889c99c4d1f7710d8f51555c060bdD2ac0D37F1460f6B556b05"
    "BEc6149767081bdc013ef6355b4ce401235f874d6a9e7b0f6a530998e973a4c19078304d"
    "f656de49a06ecc74988b94410ec605295db015dd2823d3fe682f8f1b6437c982d46cba08"
    "d1761a9721303da16185fcef17123e751b"
)

WILL_HEX_2 = "0x" + (
    "041F57c4492760aaE44ECed29b49a30DaAD3D4Cc3fF1F826E1180d151200A4d5431a3Aa3"
    "142C4A8c75faf114eafb1BDbe2F0316DF893fd58CE46AA4d000000000000000000000000"
    "000003e83fF1F826E1180d151200A4d5431a3Aa3142C4A8cb1D4538B4571d411F07960EF"
    "2838Ce337FE1E80E000000000000000000000000004c4b40b1f48bd14750374db91306c8"
    "8bc537b49fd7e3d9b8a79a1a2283e6db18f1ab7cf34F996Ba6FcBa4286aBCC4b1B39e5F4"
    "378233584f9540afb18a930371a6be8b044aa36b6a9686188795d3e26d5166091b9b25a2"
    "60022e46311ae45cc9d1cc744b787a6e406fecd13f4a6eb5d3ae1a3c2a60590ed36b7a02"
    "20b84af1436f435d798b21e0ec4891871c"
)

WILL_1 = SignedWill(
    TESTATOR,
    ESTATES,
    salt=0x709090F298F23A5C179AEE70B7F4AD6EC3784F273E414889C99C4D1F7710D8F5,
    will=0x1555C060BDD2AC0D37F1460F6B556B05BEC61497,
    nonce=136952586996355266360424646101069432653,
    deadline=1788771087,
    signature=Signature(
        r=0x6A530998E973A4C19078304DF656DE49A06ECC74988B94410EC605295DB015DD,
        s=0x2823D3FE682F8F1B6437C982D46CBA08D1761A9721303DA16185FCEF17123E75,
        v=27,
    ),
)

WILL_2 = SignedWill(
    TESTATOR,
    ESTATES,
    salt=0xB1F48BD14750374DB91306C88BC537B49FD7E3D9B8A79A1A2283E6DB18F1AB7C,
    will=0xF34F996BA6FCBA4286ABCC4B1B39E5F437823358,
    nonce=105783975893019489732105565735546954603,
    deadline=1788249624,
    signature=Signature(
        r=0x8795D3E26D5166091B9B25A260022E46311AE45CC9D1CC744B787A6E406FECD1,
        s=0x3F4A6EB5D3AE1A3C2A60590ED36B7A0220B84AF1436F435D798B21E0EC489187,
        v=28,
    ),
)

PERMIT_VECTORS: List[Dict[str, Any]] = [
    {
        "testator": "0x041F57c4492760aaE44ECed29b49a30DaAD3D4Cc",
        "will": "0xCfD7d00d14F04c021cB76647ACe8976580B83D54",
        "nonce": 307798376644172688526653206965886192621,
        "deadline": 1789652776,
        "signature": (
            "0xe2c3427d586d098f41d41f1a6c45dc61bc47bdf47ea0b74bbacee7e1fdaa8af8"
            "73434b90e656c5332de72de6e9ede658973947bc497fa4edafd9789de84b38ef1b"
        ),
    },
    {
        "testator": "0x041F57c4492760aaE44ECed29b49a30DaAD3D4Cc",
        "will": "0x80515F00edB3D90891D6494b63a58Dc06543bEF0",
        "nonce": 139895343447235933714306105636108089805,
        "deadline": 1788798363,
        "signature": (
            "0x8792602093a4f8d68e2fa48bf50cd105c45f95f6a614ed3632737ee9c4ae75a2"
            "081cb24113bfec49fbf8e52236f132bc292a15f82e6f475cccf0e2846b26c8861c"
        ),
    },
]

# (private key, address) pairs for the two smallest secp256k1 keys
KNOWN_KEYS = [
    (1, "0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf"),
    (2, "0x2B5AD5c4795c026514f8317c7a215E218DcCD6cF"),
]


@pytest.fixture(params=[(WILL_HEX_1, WILL_1), (WILL_HEX_2, WILL_2)], ids=["will-1", "will-2"])
def will_fixture(request: pytest.FixtureRequest):
    """(serialized hex, decoded SignedWill) for each real two-estate will."""
    return request.param


@pytest.fixture(params=PERMIT_VECTORS, ids=["permit-a", "permit-b"])
def permit_vector(request: pytest.FixtureRequest) -> Dict[str, Any]:
    return dict(request.param, estates=ESTATES)


@pytest.fixture(autouse=True)
def _clean_log_context():
    tlog.clear_context()
    yield
    tlog.clear_context()
    root = logging.getLogger("testament")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)
