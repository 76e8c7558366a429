"""Compiled contract artifact loading.

Reads Hardhat or Foundry compiler output JSON files and constructs
:py:class:`web3.contract.Contract` proxy classes from them.
The results are cached for the speedup.

Artifacts are looked up as ``<artifacts dir>/<ContractName>.json``.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Sequence, Type

from eth_abi.exceptions import EncodingError
from hexbytes import HexBytes
from web3 import Web3
from web3.contract import Contract
from web3.exceptions import Web3Exception

from router_deploy.parameters import ConfigurationError

logger = logging.getLogger(__name__)

# How big are our ABI and contract caches
_CACHE_SIZE = 128

#: Where ``hardhat compile`` style tooling puts the artifacts if not told otherwise
DEFAULT_ARTIFACTS_DIR = Path("artifacts")


def resolve_artifact_path(name: str | Path, artifacts_dir: Path | None = None) -> Path:
    """Map a contract name to its artifact file.

    - ``WETH9`` -> ``artifacts/WETH9.json``

    - Absolute paths and names ending ``.json`` are used as is, relative to ``artifacts_dir``
    """
    if artifacts_dir is None:
        artifacts_dir = DEFAULT_ARTIFACTS_DIR

    path = Path(name)
    if path.is_absolute():
        return path

    if path.suffix != ".json":
        path = path.with_name(f"{path.name}.json")

    return Path(artifacts_dir) / path


@lru_cache(maxsize=_CACHE_SIZE)
def get_abi_by_filename(fname: Path) -> dict | list:
    """Reads a compiled artifact file and returns it.

    You are most likely interested in the keys `abi` and `bytecode` of the JSON file.

    :raise ConfigurationError:
        The artifact does not exist or is not JSON
    """
    try:
        with open(fname, "rt", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Contract artifact not found: {fname}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Contract artifact {fname} is not valid JSON: {e}") from e


@lru_cache(maxsize=_CACHE_SIZE)
def get_contract(
    web3: Web3,
    name: str | Path,
    artifacts_dir: Path | None = None,
) -> Type[Contract]:
    """Get Contract proxy class from a compiled artifact.

    - Hardhat artifacts have ``bytecode`` as a hex string

    - Foundry artifacts have ``bytecode`` as ``{"object": "0x..."}``

    - Etherscan copy-pasted ABI lists have no bytecode and cannot be deployed

    Example:

    .. code-block:: python

        UniversalRouter = get_contract(web3, "UniversalRouter", Path("artifacts-zk"))

    :param web3:
        Web3 instance

    :param name:
        Contract name or artifact path

    :param artifacts_dir:
        Directory holding the ``<name>.json`` files

    :return:
        Contract proxy class
    """

    path = resolve_artifact_path(name, artifacts_dir)
    contract_interface = get_abi_by_filename(path)

    bytecode = None
    if type(contract_interface) == list:
        # Etherscan
        abi = contract_interface
    else:
        try:
            abi = contract_interface["abi"]
        except KeyError as e:
            raise ConfigurationError(f"Artifact {path} has no abi") from e

        bytecode = contract_interface.get("bytecode")

        if type(bytecode) == dict:
            # Forge
            # Contains keys object, sourceMap, linkReferences
            bytecode = bytecode["object"]

    return web3.eth.contract(abi=abi, bytecode=bytecode)


def get_init_code(contract: Type[Contract], constructor_args: Sequence = ()) -> HexBytes:
    """Contract creation bytecode with ABI-encoded constructor arguments appended.

    This is the payload that goes to ``data`` of a CREATE transaction
    and whose hash determines a CREATE2 address.

    :raise ConfigurationError:
        No bytecode, or the arguments do not match the constructor ABI
    """
    if not contract.bytecode:
        raise ConfigurationError(f"Contract {contract} has no bytecode and cannot be deployed")
    try:
        return HexBytes(contract.constructor(*constructor_args).data_in_transaction)
    except (EncodingError, Web3Exception, TypeError, ValueError) as e:
        raise ConfigurationError(f"Cannot encode constructor arguments for {contract}: {e}") from e
