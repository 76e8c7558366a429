"""Shared fixtures for deployment tests against eth-tester."""

from pathlib import Path

import pytest
from eth_typing import HexAddress
from web3 import EthereumTesterProvider, Web3

from router_deploy.deploy import deploy_create2_factory
from router_deploy.hotwallet import HotWallet


@pytest.fixture
def tester_provider():
    # https://web3py.readthedocs.io/en/stable/examples.html#contract-unit-tests-in-python
    return EthereumTesterProvider()


@pytest.fixture
def web3(tester_provider) -> Web3:
    """Set up a local unit testing blockchain."""
    return Web3(tester_provider)


@pytest.fixture()
def deployer(web3) -> HotWallet:
    """Funded deployer with a synced nonce."""
    return HotWallet.create_for_testing(web3, eth_amount=10)


@pytest.fixture()
def create2_factory(web3, deployer) -> HexAddress:
    """Deterministic deployment proxy installed on eth-tester.

    Uses the deployer nonce 0.
    """
    return deploy_create2_factory(web3, deployer)


@pytest.fixture()
def artifacts_dir() -> Path:
    """Hand assembled bytecode artifacts."""
    return Path(__file__).resolve().parent / "artifacts"
