"""Deployer wallet.

- Create a local signer from a private key

- Keep the deployer nonce counter in the process, so every deployment
  transaction consumes exactly one sequential nonce

"""

import logging
import secrets
from decimal import Decimal
from typing import NamedTuple, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_typing import HexAddress
from hexbytes import HexBytes
from web3 import Web3

from router_deploy.gas import apply_gas, estimate_gas_price
from router_deploy.tx import decode_signed_transaction, get_tx_broadcast_data

logger = logging.getLogger(__name__)


class SignedTransactionWithNonce(NamedTuple):
    """Signed deployment transaction and the nonce it consumed."""

    #: Bytes for ``eth_sendRawTransaction``
    raw_transaction: HexBytes

    #: Transaction hash
    hash: HexBytes

    #: Nonce allocated from the wallet counter
    nonce: int

    def __repr__(self):
        return f"<SignedTransactionWithNonce hash:{self.hash.hex()} nonce:{self.nonce}>"


class HotWallet:
    """Deployer signer handle.

    - Holds a :py:class:`eth_account.signers.local.LocalAccount` and a nonce counter

    - Passed explicitly to every deployment call, there is no module level wallet

    Example:

    .. code-block:: python

        deployer = HotWallet.from_private_key(os.environ["PRIVATE_KEY"])
        deployer.sync_nonce(web3)
        weth = deploy_contract(web3, "WETH9", deployer, DeploymentMode.create2, salt=WETH9_SALT)

    .. note ::

        This class is not thread safe. Two deployment runs sharing the same key
        will race for the same nonces. Serialise them outside this process.
    """

    def __init__(self, account: LocalAccount):
        """Create a hot wallet from a local account."""
        self.account = account
        self.current_nonce: Optional[int] = None

    def __repr__(self):
        return f"<Hot wallet {self.account.address}>"

    @property
    def address(self) -> HexAddress:
        """Ethereum address of the wallet."""
        return self.account.address

    def is_nonce_synced(self) -> bool:
        return self.current_nonce is not None

    def sync_nonce(self, web3: Web3):
        """Initialise the current nonce from the on-chain data."""
        new_nonce = web3.eth.get_transaction_count(self.account.address)
        if self.current_nonce is not None and new_nonce < self.current_nonce:
            # Node lagging behind our own broadcasts
            logger.warning(f"Nonce sync failed, read onchain nonce {new_nonce} that is older than our current nonce: {self.current_nonce}")
            return
        self.current_nonce = new_nonce
        logger.info("Synced nonce for %s to %d", self.account.address, self.current_nonce)

    def allocate_nonce(self) -> int:
        """Get the next free available nonce to be used with a transaction.

        Increase the nonce counter.
        """
        assert self.current_nonce is not None, f"Nonce is not yet synced from the blockchain: {self}"
        nonce = self.current_nonce
        self.current_nonce += 1
        return nonce

    def sign_transaction_with_new_nonce(self, tx: dict) -> SignedTransactionWithNonce:
        """Signs a transaction and allocates a nonce for it.

        :param tx:
            Ethereum transaction data as a dict.
            This is modified in-place to include nonce.

        The nonce is consumed even if the transaction is never broadcasted.
        Callers reset :py:attr:`current_nonce` when the node rejects it.

        :return:
            A transaction payload and nonce with used to generate this transaction.
        """
        assert type(tx) == dict
        assert "nonce" not in tx
        tx["nonce"] = self.allocate_nonce()
        _signed = self.account.sign_transaction(tx)

        raw_bytes = get_tx_broadcast_data(_signed)
        # Check that we can decode
        decode_signed_transaction(raw_bytes)

        return SignedTransactionWithNonce(
            raw_transaction=raw_bytes,
            hash=_signed.hash,
            nonce=tx["nonce"],
        )

    def get_native_currency_balance(self, web3: Web3) -> Decimal:
        """Get the balance of the native currency (ETH, BNB, MATIC) of the wallet.

        Useful to check if you have enough cryptocurrency for the gas fees.
        """
        balance = web3.eth.get_balance(self.address)
        return web3.from_wei(balance, "ether")

    @staticmethod
    def fill_in_gas_price(web3: Web3, tx: dict) -> dict:
        """Fills in the gas fee fields for a transaction.

        .. note ::

            Mutates ``tx`` in place.
        """
        price_data = estimate_gas_price(web3)
        apply_gas(tx, price_data)
        return tx

    @staticmethod
    def from_private_key(key: str) -> "HotWallet":
        """Create a hot wallet from a private key that is passed in as a hex string.

        :param key: 0x prefixed hex string
        :return: Ready to go hot wallet account
        """
        assert type(key) == str, f"Expected private key as string, got {type(key)}"
        assert key.startswith("0x"), f"This system assumes private keys are prefixed with 0x, your key starts with {key[0:8]}... Please add 0x prefix to your private key hex string"
        account = Account.from_key(key)
        return HotWallet(account)

    @staticmethod
    def create_for_testing(
        web3: Web3,
        test_account_n=0,
        eth_amount=1,
    ) -> "HotWallet":
        """Creates a new hot wallet and seeds it with ETH from one of well-known test accounts.

        Shortcut method for unit testing against eth-tester or Anvil.
        """
        wallet = HotWallet.from_private_key("0x" + secrets.token_hex(32))
        if eth_amount:
            tx_hash = web3.eth.send_transaction(
                {
                    "from": web3.eth.accounts[test_account_n],
                    "to": wallet.address,
                    "value": eth_amount * 10**18,
                }
            )
            web3.eth.wait_for_transaction_receipt(tx_hash)
        wallet.sync_nonce(web3)
        return wallet
