"""Router parameter file loading."""

import json

import pytest
from eth_utils import is_checksum_address

from router_deploy.parameters import (
    ADDRESS_SLOTS,
    HASH_SLOTS,
    UNRESOLVED,
    ZERO_ADDRESS,
    ConfigurationError,
    RouterParameters,
    Unresolved,
    get_bundled_parameters_path,
    load_router_parameters,
)


def test_load_router_parameters(router_params_file, raw_router_params):
    """Zero addresses become UNRESOLVED, the rest is checksummed."""
    params = load_router_parameters(router_params_file)
    assert params.permit2 == raw_router_params["permit2"]
    assert params.v3_factory == raw_router_params["v3Factory"]
    assert params.weth9 is UNRESOLVED
    assert params.looks_rare_rewards_distributor is UNRESOLVED
    assert params.pair_init_code_hash == raw_router_params["pairInitCodeHash"]
    assert params.pool_init_code_hash == raw_router_params["poolInitCodeHash"]
    assert not params.is_resolved()
    assert len(params.get_unresolved_slots()) == len(ADDRESS_SLOTS) - 2


def test_round_trip_to_dict(raw_router_params):
    params = RouterParameters.from_dict(raw_router_params)
    assert params.to_dict() == raw_router_params
    assert list(params.to_dict().keys()) == list(ADDRESS_SLOTS + HASH_SLOTS)


def test_lowercase_address_checksummed(raw_router_params):
    raw_router_params["v2Factory"] = "0x5c69bee701ef814a2b6a3edd4b1652cb9cc5aa6f"
    params = RouterParameters.from_dict(raw_router_params)
    assert is_checksum_address(params.v2_factory)
    assert params.v2_factory.lower() == "0x5c69bee701ef814a2b6a3edd4b1652cb9cc5aa6f"


def test_missing_slot(raw_router_params):
    del raw_router_params["seaport"]
    with pytest.raises(ConfigurationError, match="seaport"):
        RouterParameters.from_dict(raw_router_params)


def test_missing_hash_slot(raw_router_params):
    del raw_router_params["poolInitCodeHash"]
    with pytest.raises(ConfigurationError, match="poolInitCodeHash"):
        RouterParameters.from_dict(raw_router_params)


@pytest.mark.parametrize("value", ["0x1234", "1F98431c8aD98523631AE4a59f267346ea31F984", 0, None, "0xZZ98431c8aD98523631AE4a59f267346ea31F984"])
def test_bad_address(raw_router_params, value):
    raw_router_params["v3Factory"] = value
    with pytest.raises(ConfigurationError, match="v3Factory"):
        RouterParameters.from_dict(raw_router_params)


@pytest.mark.parametrize("value", ["0xHASH1", "0x1234", ZERO_ADDRESS, None])
def test_bad_hash(raw_router_params, value):
    raw_router_params["pairInitCodeHash"] = value
    with pytest.raises(ConfigurationError, match="pairInitCodeHash"):
        RouterParameters.from_dict(raw_router_params)


def test_unknown_keys_ignored(raw_router_params, caplog):
    raw_router_params["seaportV1_4"] = ZERO_ADDRESS
    params = RouterParameters.from_dict(raw_router_params)
    assert "seaportV1_4" not in params.to_dict()
    assert "seaportV1_4" in caplog.text


def test_not_an_object(tmp_path):
    path = tmp_path / "params.json"
    path.write_text(json.dumps(["0x"]))
    with pytest.raises(ConfigurationError, match="JSON object"):
        load_router_parameters(path)


def test_not_json(tmp_path):
    path = tmp_path / "params.json"
    path.write_text("{weth9: ")
    with pytest.raises(ConfigurationError, match="not valid JSON"):
        load_router_parameters(path)


def test_file_missing(tmp_path):
    with pytest.raises(ConfigurationError, match="Cannot read"):
        load_router_parameters(tmp_path / "nope.json")


def test_unresolved_not_encodable(raw_router_params):
    params = RouterParameters.from_dict(raw_router_params)
    with pytest.raises(ConfigurationError, match="unresolved slots"):
        params.to_constructor_arg()


def test_unresolved_singleton():
    assert Unresolved() is UNRESOLVED
    assert repr(UNRESOLVED) == "<unresolved>"


def test_bundled_parameters():
    path = get_bundled_parameters_path("abstract_testnet")
    params = load_router_parameters(path)
    assert params.weth9 is not UNRESOLVED
    assert params.seaport is UNRESOLVED


def test_bundled_parameters_missing():
    with pytest.raises(ConfigurationError, match="abstract_testnet"):
        get_bundled_parameters_path("mars_mainnet")
