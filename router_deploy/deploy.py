"""Deploy compiled contracts with CREATE or CREATE2.

- :py:attr:`DeploymentMode.create` is a normal contract creation transaction.
  The address depends on the deployer nonce.

- :py:attr:`DeploymentMode.create2` sends the init code to a CREATE2 factory with a fixed salt.
  The address depends only on the factory, the salt and the init code, so the same contract
  lands on the same address on every chain where the factory exists.

Every deployment is a single transaction signed by an explicit :py:class:`router_deploy.hotwallet.HotWallet`.
We block until the transaction receipt is available.
"""

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence, Type, Union

from eth_typing import ChecksumAddress, HexStr
from eth_utils import to_checksum_address
from hexbytes import HexBytes
from web3 import Web3
from web3.contract import Contract

from router_deploy.abi import get_contract, get_init_code
from router_deploy.create2 import (
    DETERMINISTIC_DEPLOYMENT_PROXY,
    DETERMINISTIC_DEPLOYMENT_PROXY_INIT_CODE,
    predict_create2_address,
    predict_create_address,
    validate_salt,
)
from router_deploy.hotwallet import HotWallet

logger = logging.getLogger(__name__)


class DeploymentMode(enum.Enum):
    """How the contract address is determined."""

    #: Address from deployer address and nonce
    create = "create"

    #: Address from factory, salt and init code
    create2 = "create2"


class DeploymentFailure(Exception):
    """Did not get a contract deployed.

    The underlying error, if any, is available as ``__cause__``.
    """

    def __init__(self, msg: str, tx_hash: HexBytes | None = None, receipt: dict | None = None):
        super().__init__(msg)
        self.tx_hash = tx_hash
        self.receipt = receipt


class Create2AddressCollision(DeploymentFailure):
    """The predicted CREATE2 address already has code.

    The same init code was already deployed with the same salt.
    Nothing was broadcasted.
    """

    def __init__(self, msg: str, address: ChecksumAddress):
        super().__init__(msg)
        self.address = address


class DependencyUnavailable(Exception):
    """A contract we depend on has no usable address.

    The transaction may have gone through, but we cannot continue without the address.
    """


@dataclass(frozen=True, slots=True)
class DeployOptions:
    """Transaction tuning for deployments."""

    #: Gas limit.
    #:
    #: If not set, estimate with :py:attr:`gas_margin` on top.
    gas: int | None = None

    #: Multiply the gas estimate with this
    gas_margin: float = 1.2

    #: Seconds to wait for the receipt, passed to web3.py
    receipt_timeout: float = 180.0


@dataclass(frozen=True, slots=True)
class DeployedContract:
    """Result of a single deployment."""

    #: Artifact name, like ``UniversalRouter``
    name: str

    #: Where the contract lives
    address: ChecksumAddress

    #: CREATE or CREATE2
    mode: DeploymentMode

    #: What we passed to the constructor
    constructor_args: tuple

    #: CREATE2 salt, ``None`` for CREATE
    salt: HexStr | None

    #: The deployment transaction
    tx_hash: HexBytes

    #: Bound web3 contract instance
    contract: Contract = field(repr=False, compare=False)

    def __repr__(self):
        return f"<Deployed {self.name} at {self.address} using {self.mode.value}>"


def _broadcast_and_confirm(
    web3: Web3,
    deployer: HotWallet,
    tx: dict,
    contract_name: str,
    options: DeployOptions,
) -> tuple[HexBytes, dict]:
    """Sign, broadcast and wait.

    :raise DeploymentFailure:
        On any error, including reverts
    """

    try:
        if options.gas:
            tx["gas"] = options.gas
        else:
            tx["gas"] = int(web3.eth.estimate_gas(tx) * options.gas_margin)

        tx["chainId"] = web3.eth.chain_id

        deployer.fill_in_gas_price(web3, tx)
        signed_tx = deployer.sign_transaction_with_new_nonce(tx)
        tx_hash = web3.eth.send_raw_transaction(signed_tx.raw_transaction)
    except Exception as e:
        if "nonce" in tx:
            # Signed but not accepted by the node, the nonce is still free
            deployer.current_nonce = tx["nonce"]
        raise DeploymentFailure(f"Could not broadcast {contract_name} deployment from {deployer.address}: {e}") from e

    logger.info("Broadcasted %s deployment, tx %s, nonce %d", contract_name, tx_hash.hex(), tx["nonce"])

    try:
        receipt = web3.eth.wait_for_transaction_receipt(tx_hash, timeout=options.receipt_timeout)
    except Exception as e:
        raise DeploymentFailure(f"Did not get receipt for {contract_name} deployment, tx hash is {tx_hash.hex()}", tx_hash=tx_hash) from e

    if receipt["status"] != 1:
        raise DeploymentFailure(
            f"Contract {contract_name} deployment reverted, tx hash is {tx_hash.hex()}, gas used {receipt['gasUsed']:,} / {tx['gas']:,}",
            tx_hash=tx_hash,
            receipt=receipt,
        )

    return tx_hash, receipt


def deploy_contract(
    web3: Web3,
    contract: Union[str, Path, Type[Contract]],
    deployer: HotWallet,
    mode: DeploymentMode,
    constructor_args: Sequence[Any] = (),
    options: DeployOptions | None = None,
    salt: HexStr | str | None = None,
    artifacts_dir: Path | None = None,
    create2_factory: str = DETERMINISTIC_DEPLOYMENT_PROXY,
) -> DeployedContract:
    """Deploy a contract from a compiled artifact.

    Example:

    .. code-block:: python

        weth = deploy_contract(
            web3,
            "WETH9",
            deployer,
            DeploymentMode.create2,
            salt="0x0000000000000000000000000000000000000000000000000000000000000001",
        )
        print(f"WETH9 at {weth.address}")

    CREATE2 deployments of the same artifact with the same salt and constructor
    arguments always go to the same address. Deploying twice raises
    :py:class:`Create2AddressCollision` before anything is broadcasted.

    :param web3:
        Web3 instance

    :param contract:
        Artifact name, looked up from ``artifacts_dir``, or a contract proxy class

    :param deployer:
        Signer. Consumes one nonce.

    :param mode:
        CREATE or CREATE2

    :param constructor_args:
        Arguments to pass to the contract's constructor

    :param options:
        Gas and receipt wait tuning

    :param salt:
        32 bytes hex salt, required with CREATE2

    :param artifacts_dir:
        Where to look up ``<name>.json`` artifacts

    :param create2_factory:
        CREATE2 factory taking ``salt ++ init_code`` calldata

    :raise ConfigurationError:
        Missing artifact, or constructor arguments that do not encode.
        Raised before any transaction.

    :raise DeploymentFailure:
        Transaction could not be broadcasted or reverted

    :raise Create2AddressCollision:
        The CREATE2 address is already taken

    :raise DependencyUnavailable:
        The transaction succeeded, but no contract address is available

    :return:
        Deployment record with the contract address
    """

    if options is None:
        options = DeployOptions()

    assert isinstance(mode, DeploymentMode), f"Got mode {mode}"
    assert isinstance(deployer, HotWallet), f"Expected HotWallet, got {type(deployer)}"

    if isinstance(contract, (str, Path)):
        Contract = get_contract(web3, contract, artifacts_dir)
        contract_name = Path(contract).stem
    else:
        Contract = contract
        contract_name = getattr(contract, "contract_name", None) or "<unnamed>"

    constructor_args = tuple(constructor_args)

    if mode == DeploymentMode.create2:
        if salt is None:
            raise ValueError(f"CREATE2 deployment of {contract_name} needs a salt")
        salt_bytes = validate_salt(salt)
    elif salt is not None:
        raise ValueError(f"Salt given for CREATE deployment of {contract_name}")

    # Encoding errors surface before we touch the network
    init_code = get_init_code(Contract, constructor_args)

    if not deployer.is_nonce_synced():
        deployer.sync_nonce(web3)

    tx = {
        "from": deployer.address,
        "value": 0,
    }

    if mode == DeploymentMode.create2:
        factory = to_checksum_address(create2_factory)
        predicted_address = predict_create2_address(factory, salt, init_code)

        if web3.eth.get_code(predicted_address):
            raise Create2AddressCollision(
                f"{contract_name} with salt {salt} is already deployed at {predicted_address}",
                address=predicted_address,
            )

        if not web3.eth.get_code(factory):
            raise DeploymentFailure(f"No CREATE2 factory contract at {factory} on chain {web3.eth.chain_id}")

        tx["to"] = factory
        tx["data"] = HexBytes(salt_bytes + init_code)
        logger.info("Deploying %s with CREATE2, salt %s, factory %s, predicted address %s", contract_name, salt, factory, predicted_address)
    else:
        predicted_address = predict_create_address(deployer.address, deployer.current_nonce)
        tx["data"] = init_code
        logger.info("Deploying %s with CREATE from %s, nonce %d, predicted address %s", contract_name, deployer.address, deployer.current_nonce, predicted_address)

    tx_hash, receipt = _broadcast_and_confirm(web3, deployer, tx, contract_name, options)

    if mode == DeploymentMode.create2:
        if not web3.eth.get_code(predicted_address):
            raise DeploymentFailure(
                f"CREATE2 transaction for {contract_name} succeeded, but there is no code at {predicted_address}",
                tx_hash=tx_hash,
                receipt=receipt,
            )
        address = predicted_address
    else:
        contract_address = receipt.get("contractAddress")
        if not contract_address:
            raise DependencyUnavailable(f"Receipt for {contract_name} deployment {tx_hash.hex()} has no contract address")
        address = to_checksum_address(contract_address)
        if address != predicted_address:
            logger.warning("%s landed on %s, we predicted %s. Nonce was out of sync?", contract_name, address, predicted_address)

    logger.info("Deployed %s at %s, tx %s", contract_name, address, tx_hash.hex())

    return DeployedContract(
        name=contract_name,
        address=address,
        mode=mode,
        constructor_args=constructor_args,
        salt=HexStr(salt) if salt is not None else None,
        tx_hash=tx_hash,
        contract=Contract(address=address),
    )


def deploy_create2_factory(
    web3: Web3,
    deployer: HotWallet,
    options: DeployOptions | None = None,
) -> ChecksumAddress:
    """Install the deterministic deployment proxy on a chain that lacks it.

    The proxy lands on a nonce-dependent address, not the canonical one.
    Pass the returned address as ``create2_factory`` to later deployments.
    Useful for eth-tester and other development chains.

    :return:
        Factory address
    """
    Factory = web3.eth.contract(abi=[], bytecode=DETERMINISTIC_DEPLOYMENT_PROXY_INIT_CODE)
    Factory.contract_name = "DeterministicDeploymentProxy"
    deployed = deploy_contract(web3, Factory, deployer, DeploymentMode.create, options=options)
    return deployed.address
