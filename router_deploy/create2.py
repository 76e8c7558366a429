"""Contract address prediction.

- CREATE: address depends on the deployer account and its nonce

- CREATE2 (`EIP-1014 <https://eips.ethereum.org/EIPS/eip-1014>`_): address depends on the
  creating contract, a 32 byte salt and the init code only

CREATE2 deployments go through a factory contract. By default this is the keyless
`deterministic deployment proxy <https://github.com/Arachnid/deterministic-deployment-proxy>`_
that lives at the same address on most EVM chains and is preinstalled on Anvil.
The proxy takes ``salt ++ init_code`` as calldata and returns the created address.
"""

import re

import rlp
from eth_typing import ChecksumAddress, HexStr
from eth_utils import keccak, to_checksum_address
from hexbytes import HexBytes

#: Deterministic deployment proxy address
DETERMINISTIC_DEPLOYMENT_PROXY = "0x4e59b44847b379578588920cA78FbF26c0B4956C"

#: Deterministic deployment proxy runtime code
DETERMINISTIC_DEPLOYMENT_PROXY_RUNTIME_CODE = HexBytes("0x7fffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffe03601600081602082378035828234f58015156039578182fd5b8082525050506014600cf3")

#: Deterministic deployment proxy creation code.
#:
#: Used to install the proxy on development chains that do not ship it.
DETERMINISTIC_DEPLOYMENT_PROXY_INIT_CODE = HexBytes("0x604580600e600039806000f350fe") + DETERMINISTIC_DEPLOYMENT_PROXY_RUNTIME_CODE

_SALT_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")


def validate_salt(salt: HexStr | str) -> HexBytes:
    """Check a salt is a ``0x`` prefixed 64 hex digit string.

    :return:
        The salt as 32 bytes

    :raise ValueError:
        Wrong format or length
    """
    if type(salt) != str or not _SALT_PATTERN.match(salt):
        raise ValueError(f"CREATE2 salt must be 0x prefixed 32 bytes hex, got {salt!r}")
    return HexBytes(salt)


def predict_create2_address(
    factory: str,
    salt: HexStr | str,
    init_code: bytes | str,
) -> ChecksumAddress:
    """Compute the address a CREATE2 deployment lands on.

    ``keccak256(0xff ++ factory ++ salt ++ keccak256(init_code))[12:]``

    :param factory:
        The contract executing the CREATE2 opcode

    :param salt:
        32 bytes hex salt

    :param init_code:
        Creation bytecode with ABI-encoded constructor arguments appended
    """
    salt_bytes = validate_salt(salt)
    factory_bytes = HexBytes(factory)
    assert len(factory_bytes) == 20, f"Bad factory address: {factory}"
    preimage = b"\xff" + factory_bytes + salt_bytes + keccak(HexBytes(init_code))
    # Contract address is the least significant 20 bytes from the 32 byte hash
    return to_checksum_address(keccak(preimage)[-20:])


def predict_create_address(deployer: str, nonce: int) -> ChecksumAddress:
    """Compute the address an ordinary contract creation transaction lands on.

    ``keccak256(rlp([deployer, nonce]))[12:]``
    """
    assert type(nonce) == int and nonce >= 0, f"Bad nonce: {nonce}"
    deployer_bytes = HexBytes(deployer)
    assert len(deployer_bytes) == 20, f"Bad deployer address: {deployer}"
    return to_checksum_address(keccak(rlp.encode([bytes(deployer_bytes), nonce]))[-20:])
