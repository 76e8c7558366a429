"""Contract address prediction."""

import pytest

from router_deploy.create2 import predict_create2_address, predict_create_address, validate_salt

SALT_1 = "0x0000000000000000000000000000000000000000000000000000000000000001"
SALT_2 = "0x0000000000000000000000000000000000000000000000000000000000000002"

FACTORY = "0x4e59b44847b379578588920cA78FbF26c0B4956C"


def test_create2_eip_1014_vectors():
    """Check against the examples in EIP-1014."""
    zero_salt = "0x" + "00" * 32
    assert predict_create2_address("0x0000000000000000000000000000000000000000", zero_salt, "0x00").lower() == "0x4d1a2e2bb4f88f0250f26ffff098b0b30b26bf38"
    assert predict_create2_address("0xdeadbeef00000000000000000000000000000000", zero_salt, "0x00").lower() == "0xb928f69bb1d91cd65274e3c79d8986362984fda3"
    assert predict_create2_address("0x00000000000000000000000000000000deadbeef", "0x00000000000000000000000000000000000000000000000000000000cafebabe", "0xdeadbeef").lower() == "0x60f3f640a8508fc6a86d45df051962668e1e8ac7"


def test_create2_same_inputs_same_address():
    """Address is a pure function of factory, salt and init code."""
    init_code = "0x600a600c600039600a6000f3600a60005260206000f3"
    a = predict_create2_address(FACTORY, SALT_1, init_code)
    b = predict_create2_address(FACTORY, SALT_1, bytes.fromhex(init_code[2:]))
    assert a == b
    assert a.startswith("0x")
    assert len(a) == 42


def test_create2_inputs_change_address():
    init_code = "0x600a600c600039600a6000f3600a60005260206000f3"
    base = predict_create2_address(FACTORY, SALT_1, init_code)
    assert predict_create2_address(FACTORY, SALT_2, init_code) != base
    assert predict_create2_address(FACTORY, SALT_1, init_code + "00") != base
    assert predict_create2_address("0x0000000000000000000000000000000000000001", SALT_1, init_code) != base


def test_create_known_vectors():
    """https://ethereum.stackexchange.com/a/761"""
    sender = "0x6ac7ea33f8831ea9dcc53393aaa88b25a785dbf0"
    assert predict_create_address(sender, 0).lower() == "0xcd234a471b72ba2f1ccf0a70fcaba648a5eecd8d"
    assert predict_create_address(sender, 1).lower() == "0x343c43a37d37dff08ae8c4a11544c718abb4fcf8"


def test_create_incrementing_nonce_distinct():
    sender = "0x6ac7ea33f8831ea9dcc53393aaa88b25a785dbf0"
    addresses = {predict_create_address(sender, nonce) for nonce in range(0, 300, 7)}
    assert len(addresses) == len(range(0, 300, 7))


@pytest.mark.parametrize(
    "salt",
    [
        None,
        1,
        "0x01",
        "0000000000000000000000000000000000000000000000000000000000000001",
        "0x00000000000000000000000000000000000000000000000000000000000000001",
        "0xzz00000000000000000000000000000000000000000000000000000000000001",
    ],
)
def test_bad_salt(salt):
    with pytest.raises(ValueError):
        validate_salt(salt)


def test_good_salt():
    assert validate_salt(SALT_1) == b"\x00" * 31 + b"\x01"
