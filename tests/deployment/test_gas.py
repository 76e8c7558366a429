"""Gas helpers."""

from web3 import Web3

from router_deploy.gas import GasPriceMethod, GasPriceSuggestion, apply_gas, estimate_gas_price
from router_deploy.hotwallet import HotWallet


def test_gas_fees_london(web3: Web3):
    """Estimate gas fees on London hard-fork compatible blockchain.

    Note: We cannot test for non-London EVMs, as EthereumTester does not support them.

    https://github.com/ethereum/eth-tester/issues/233
    """
    fees = estimate_gas_price(web3)
    assert fees.method == GasPriceMethod.london
    assert fees.base_fee > 0
    assert fees.max_fee_per_gas == fees.max_priority_fee_per_gas + 2 * fees.base_fee
    assert fees.legacy_gas_price is None
    assert "Max fee per gas" in fees.pformat()


def test_apply_gas_london():
    suggestion = GasPriceSuggestion(
        method=GasPriceMethod.london,
        base_fee=1_000_000_000,
        max_priority_fee_per_gas=1_000_000_000,
        max_fee_per_gas=3_000_000_000,
    )
    tx = apply_gas({"gasPrice": 1}, suggestion)
    assert tx == {"maxFeePerGas": 3_000_000_000, "maxPriorityFeePerGas": 1_000_000_000}


def test_apply_gas_legacy():
    """Flat gas price replaces any EIP-1559 fields."""
    suggestion = GasPriceSuggestion(method=GasPriceMethod.legacy, legacy_gas_price=5_000_000_000)
    tx = apply_gas({"maxFeePerGas": 1, "maxPriorityFeePerGas": 1}, suggestion)
    assert tx == {"gasPrice": 5_000_000_000}


def test_deployment_with_gas(web3: Web3, deployer: HotWallet):
    """Raw transaction with filled in fees gets mined."""
    tx = {
        "from": deployer.address,
        "to": web3.eth.accounts[1],
        "value": 1,
        "gas": 21_000,
        "chainId": web3.eth.chain_id,
    }
    deployer.fill_in_gas_price(web3, tx)
    assert "maxFeePerGas" in tx

    signed = deployer.sign_transaction_with_new_nonce(tx)
    tx_hash = web3.eth.send_raw_transaction(signed.raw_transaction)
    receipt = web3.eth.wait_for_transaction_receipt(tx_hash)
    assert receipt["status"] == 1  # 1=success and mined
