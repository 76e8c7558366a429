"""Universal Router constructor parameters.

The router takes a single ``RouterParameters`` struct in its constructor:
fifteen addresses of the protocols it integrates with, plus the Uniswap v2 pair
and v3 pool init code hashes. Parameters come from a per-network JSON file:

.. code-block:: json

    {
        "permit2": "0x000000000022D473030F116dDEE9F6B43aC78Ba3",
        "weth9": "0x0000000000000000000000000000000000000000",
        ...
        "pairInitCodeHash": "0x96e8ac42782006f8894161745b24916fe9339b629bc3e7ca895b7c575c1d9c53",
        "poolInitCodeHash": "0xe34f199b19b2b4f47f68442619d555527d244f78a3297ea89325f843f87b8b54"
    }

The all-zero address in the file means "this protocol does not exist on this network".
Inside Python it is represented as :py:data:`UNRESOLVED`, so that a zero value can never be
mistaken for a real address. See :py:func:`router_deploy.placeholders.resolve_placeholders`.
"""

import dataclasses
import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from pprint import pformat
from typing import Mapping

from eth_typing import HexAddress, HexStr
from eth_utils import is_hex_address, to_checksum_address

logger = logging.getLogger(__name__)


#: Ethereum 0x0000000000000000000000000000000000000000 address
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

#: Router protocol address slots, camelCase names as in the JSON file and Solidity struct
ADDRESS_SLOTS = (
    "permit2",
    "weth9",
    "seaport",
    "nftxZap",
    "x2y2",
    "foundation",
    "sudoswap",
    "nft20Zap",
    "cryptopunks",
    "looksRare",
    "routerRewardsDistributor",
    "looksRareRewardsDistributor",
    "looksRareToken",
    "v2Factory",
    "v3Factory",
)

#: Immutable hash constant slots, never substituted
HASH_SLOTS = (
    "pairInitCodeHash",
    "poolInitCodeHash",
)

_HASH_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")

_BUNDLED_PARAMS_DIR = Path(__file__).resolve().parent / "router_params"


class ConfigurationError(Exception):
    """Deployment configuration is malformed or incomplete.

    Always raised before anything is broadcasted.
    """


class Unresolved:
    """Marker for a protocol slot that is not supported on the target network.

    Use the :py:data:`UNRESOLVED` singleton.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "<unresolved>"

    def __reduce__(self):
        return (Unresolved, ())


#: The only instance of :py:class:`Unresolved`
UNRESOLVED = Unresolved()


def _camel_to_snake(name: str) -> str:
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", name).lower()


def parse_address(slot: str, value) -> HexAddress | Unresolved:
    """Parse one address slot value from the configuration file.

    :return:
        Checksummed address, or :py:data:`UNRESOLVED` for the zero address

    :raise ConfigurationError:
        Not a ``0x`` prefixed 40 hex digit string
    """
    if type(value) != str or not value.startswith("0x") or not is_hex_address(value):
        raise ConfigurationError(f"Router parameter {slot} is not a valid address: {value!r}")

    if int(value, 16) == 0:
        return UNRESOLVED

    return to_checksum_address(value)


def parse_hash(slot: str, value) -> HexStr:
    """Parse one 32 byte hash slot value from the configuration file.

    :raise ConfigurationError:
        Not a ``0x`` prefixed 64 hex digit string
    """
    if type(value) != str or not _HASH_PATTERN.match(value):
        raise ConfigurationError(f"Router parameter {slot} is not a valid 32 byte hash: {value!r}")
    return HexStr(value)


@dataclass(frozen=True, slots=True)
class RouterParameters:
    """Universal Router constructor argument.

    Field order follows the Solidity ``RouterParameters`` struct.
    Address fields hold a checksummed address or :py:data:`UNRESOLVED`.
    """

    permit2: HexAddress | Unresolved
    weth9: HexAddress | Unresolved
    seaport: HexAddress | Unresolved
    nftx_zap: HexAddress | Unresolved
    x2y2: HexAddress | Unresolved
    foundation: HexAddress | Unresolved
    sudoswap: HexAddress | Unresolved
    nft20_zap: HexAddress | Unresolved
    cryptopunks: HexAddress | Unresolved
    looks_rare: HexAddress | Unresolved
    router_rewards_distributor: HexAddress | Unresolved
    looks_rare_rewards_distributor: HexAddress | Unresolved
    looks_rare_token: HexAddress | Unresolved
    v2_factory: HexAddress | Unresolved
    v3_factory: HexAddress | Unresolved

    #: Uniswap v2 pair init code hash
    pair_init_code_hash: HexStr

    #: Uniswap v3 pool init code hash
    pool_init_code_hash: HexStr

    @classmethod
    def from_dict(cls, data: Mapping[str, str]) -> "RouterParameters":
        """Parse the camelCase mapping as it appears in the JSON file.

        :raise ConfigurationError:
            A slot is missing or malformed
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Router parameters must be a JSON object, got {type(data).__name__}")

        missing = [slot for slot in ADDRESS_SLOTS + HASH_SLOTS if slot not in data]
        if missing:
            raise ConfigurationError(f"Router parameters missing required slots: {', '.join(missing)}")

        unknown = set(data.keys()) - set(ADDRESS_SLOTS) - set(HASH_SLOTS)
        if unknown:
            logger.warning("Ignoring unknown router parameter keys: %s", ", ".join(sorted(unknown)))

        kwargs = {}
        for slot in ADDRESS_SLOTS:
            kwargs[_camel_to_snake(slot)] = parse_address(slot, data[slot])
        for slot in HASH_SLOTS:
            kwargs[_camel_to_snake(slot)] = parse_hash(slot, data[slot])
        return cls(**kwargs)

    def get_address_slots(self) -> dict[str, HexAddress | Unresolved]:
        """camelCase slot name -> address or :py:data:`UNRESOLVED`."""
        return {slot: getattr(self, _camel_to_snake(slot)) for slot in ADDRESS_SLOTS}

    def get_hash_slots(self) -> dict[str, HexStr]:
        return {slot: getattr(self, _camel_to_snake(slot)) for slot in HASH_SLOTS}

    def get_unresolved_slots(self) -> list[str]:
        """Slots that still point to nothing."""
        return [slot for slot, value in self.get_address_slots().items() if value is UNRESOLVED]

    def is_resolved(self) -> bool:
        return not self.get_unresolved_slots()

    def replace_addresses(self, addresses: Mapping[str, HexAddress | Unresolved]) -> "RouterParameters":
        """Create a copy with some address slots changed.

        :param addresses:
            camelCase slot name -> new value
        """
        changes = {}
        for slot, value in addresses.items():
            assert slot in ADDRESS_SLOTS, f"Not an address slot: {slot}"
            changes[_camel_to_snake(slot)] = value
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, str]:
        """Back to the configuration file format.

        :py:data:`UNRESOLVED` becomes the zero address again.
        """
        data = {slot: ZERO_ADDRESS if value is UNRESOLVED else value for slot, value in self.get_address_slots().items()}
        data.update(self.get_hash_slots())
        return data

    def to_constructor_arg(self) -> tuple[str, ...]:
        """Struct argument for ``UniversalRouter`` constructor.

        A tuple in the Solidity struct field order, as the ABI encoder wants it.

        :raise ConfigurationError:
            Some slots are still unresolved. Deploying such a router would bake
            zero addresses into its immutables.
        """
        unresolved = self.get_unresolved_slots()
        if unresolved:
            raise ConfigurationError(f"Cannot encode router parameters, unresolved slots: {', '.join(unresolved)}")
        data = self.to_dict()
        return tuple(data[slot] for slot in ADDRESS_SLOTS + HASH_SLOTS)

    def pformat(self) -> str:
        """Pretty format for logging."""
        return pformat(self.to_dict(), sort_dicts=False)


def load_router_parameters(path: Path | str) -> RouterParameters:
    """Read router parameters from a JSON file.

    :raise ConfigurationError:
        The file cannot be read or does not describe a full parameter set
    """
    path = Path(path)
    try:
        with open(path, "rt", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read router parameters file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Router parameters file {path} is not valid JSON: {e}") from e

    params = RouterParameters.from_dict(data)
    logger.info("Loaded router parameters from %s, %d slots unsupported on this network", path, len(params.get_unresolved_slots()))
    return params


def get_bundled_parameters_path(name: str) -> Path:
    """Path to one of the parameter files shipped with this package.

    Example: ``get_bundled_parameters_path("abstract_testnet")``.
    """
    path = _BUNDLED_PARAMS_DIR / f"{name}.json"
    if not path.exists():
        available = sorted(p.stem for p in _BUNDLED_PARAMS_DIR.glob("*.json"))
        raise ConfigurationError(f"No bundled router parameters {name}, available: {', '.join(available)}")
    return path
