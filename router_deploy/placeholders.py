"""Substitute unsupported protocol slots with a stand-in contract address.

Networks where, say, Seaport or CryptoPunks do not exist list the zero address
for that slot in their router parameter file. The router must still receive a
callable address, so every such slot is pointed to a deployed ``UnsupportedProtocol``
contract that reverts on any call.
"""

import logging
from typing import Mapping

from eth_typing import HexAddress
from eth_utils import is_hex_address, to_checksum_address

from router_deploy.parameters import UNRESOLVED, ConfigurationError, RouterParameters

logger = logging.getLogger(__name__)


def resolve_placeholders(
    params: RouterParameters | Mapping[str, str],
    fallback: HexAddress | str,
) -> RouterParameters:
    """Point every unsupported protocol slot to the fallback address.

    - Each address slot is decided on its own value only: unresolved slots get ``fallback``,
      everything else is kept

    - Hash slots are copied through

    - Pure function, no network access

    Example:

    .. code-block:: python

        raw = load_router_parameters("router_params/abstract_testnet.json")
        resolved = resolve_placeholders(raw, unsupported.address)
        assert resolved.is_resolved()

    :param params:
        Loaded parameters, or the raw camelCase mapping from the JSON file

    :param fallback:
        Address of the deployed stand-in contract

    :raise ConfigurationError:
        A raw mapping misses a slot, or the fallback is not a usable address
    """

    if not isinstance(params, RouterParameters):
        params = RouterParameters.from_dict(params)

    if type(fallback) != str or not is_hex_address(fallback) or int(fallback, 16) == 0:
        raise ConfigurationError(f"Placeholder fallback must be a non-zero address, got {fallback!r}")

    fallback = to_checksum_address(fallback)

    substitutions = {slot: fallback for slot, value in params.get_address_slots().items() if value is UNRESOLVED}

    if substitutions:
        logger.info("Pointing %d unsupported slots to %s: %s", len(substitutions), fallback, ", ".join(substitutions))

    return params.replace_addresses(substitutions)
