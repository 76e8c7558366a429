"""Signed transaction helpers."""

from typing import Optional, Union

from eth_account._utils.legacy_transactions import Transaction
from eth_account.datastructures import SignedTransaction
from eth_account.typed_transactions import TypedTransaction
from hexbytes import HexBytes


class DecodeFailure(Exception):
    """We could not decode transaction for a reason or another."""


def decode_signed_transaction(raw_bytes: Union[bytes, str, HexBytes]) -> Optional[dict]:
    """Decode already signed transaction.

    Reverse raw transaction bytes back to dictionary form, so you can access
    its `data` field and other parameters.

    - Legacy transactions

    - `EIP-2718 <https://eips.ethereum.org/EIPS/eip-2718>`_ typed transactions

    Example:

    .. code-block:: python

        signed_tx = hot_wallet.sign_transaction_with_new_nonce(raw_tx)
        d = decode_signed_transaction(get_tx_broadcast_data(signed_tx))
        assert d["nonce"] == 0
        assert d["to"] is None  # contract creation

    :param raw_bytes:
        A bunch of bytes in your favorite format.

    :raise DecodeFailure:
        If the tx bytes is something we do not know how to handle.

    :return:
        Dictionary like object containing `data`, `v`, `r`, `s`, `nonce`, `value`, `gas`.
        Some fields like `chainId` and `maxPriorityFeePerGas` depend on the transaction type.
    """

    if not isinstance(raw_bytes, HexBytes):
        raw_bytes = HexBytes(raw_bytes)

    try:
        # First we try EIP-2718 and this will fail we fall back to the legacy tx
        typed_tx = TypedTransaction.from_bytes(raw_bytes)
        return typed_tx.transaction.as_dict()
    except ValueError:
        try:
            return Transaction.from_bytes(raw_bytes).as_dict()
        except Exception as e:
            raise DecodeFailure(f"Could not decode transaction: {raw_bytes.hex()}") from e


def get_tx_broadcast_data(signed_tx: SignedTransaction) -> HexBytes:
    """Get raw transaction bytes to be passed to ``eth_sendRawTransaction``.

    Works with both :py:class:`eth_account.datastructures.SignedTransaction`
    and :py:class:`router_deploy.hotwallet.SignedTransactionWithNonce`.

    :raise AttributeError:
        If the object does not look like a signed transaction
    """
    if hasattr(signed_tx, "raw_transaction"):
        return signed_tx.raw_transaction
    elif hasattr(signed_tx, "rawTransaction"):
        return signed_tx.rawTransaction
    else:
        raise AttributeError(f"SignedTransaction object has neither 'raw_transaction' nor 'rawTransaction' attribute: {signed_tx}")
