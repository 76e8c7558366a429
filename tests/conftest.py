"""Router parameter fixtures."""

import json
from pathlib import Path

import pytest
from eth_utils import to_checksum_address

from router_deploy.parameters import ADDRESS_SLOTS, ZERO_ADDRESS

#: Uniswap v2 pair init code hash
PAIR_INIT_CODE_HASH = "0x96e8ac42782006f8894161745b24916fe9339b629bc3e7ca895b7c575c1d9c53"

#: Uniswap v3 pool init code hash
POOL_INIT_CODE_HASH = "0xe34f199b19b2b4f47f68442619d555527d244f78a3297ea89325f843f87b8b54"

#: Permit2 mainnet address
PERMIT2 = to_checksum_address("0x000000000022d473030f116ddee9f6b43ac78ba3")

#: Uniswap v3 factory mainnet address
V3_FACTORY = to_checksum_address("0x1f98431c8ad98523631ae4a59f267346ea31f984")


@pytest.fixture()
def raw_router_params() -> dict:
    """Parameters where only Permit2 and Uniswap v3 exist."""
    params = {slot: ZERO_ADDRESS for slot in ADDRESS_SLOTS}
    params["permit2"] = PERMIT2
    params["v3Factory"] = V3_FACTORY
    params["pairInitCodeHash"] = PAIR_INIT_CODE_HASH
    params["poolInitCodeHash"] = POOL_INIT_CODE_HASH
    return params


@pytest.fixture()
def router_params_file(tmp_path, raw_router_params) -> Path:
    path = tmp_path / "router_params.json"
    path.write_text(json.dumps(raw_router_params, indent=2))
    return path
