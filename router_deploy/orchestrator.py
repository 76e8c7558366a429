"""Run a deployment plan.

The Universal Router plan has a hard ordering dependency:

1. Deploy ``UnsupportedProtocol`` with CREATE and record its address

2. Take the router parameters loaded from the network's JSON file

3. Point every unsupported protocol slot to the ``UnsupportedProtocol`` address

4. Deploy ``UniversalRouter`` with CREATE2 and the fixed salt, the resolved parameters as its constructor argument

Each step waits for the previous one to confirm on chain.

.. warning ::

    Blockchain transactions cannot be rolled back. A failure after step 1 leaves the
    prerequisite contract deployed and orphaned. Re-running the plan deploys a second,
    different-address prerequisite unless the operator intervenes.

"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from pprint import pformat

from eth_typing import ChecksumAddress, HexAddress
from web3 import Web3

from router_deploy.abi import get_contract, get_init_code
from router_deploy.create2 import DETERMINISTIC_DEPLOYMENT_PROXY
from router_deploy.deploy import (
    DependencyUnavailable,
    DeployedContract,
    DeployOptions,
    deploy_contract,
)
from router_deploy.hotwallet import HotWallet
from router_deploy.parameters import ConfigurationError, RouterParameters, load_router_parameters
from router_deploy.placeholders import resolve_placeholders
from router_deploy.plan import DeploymentPlan

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DeploymentReport:
    """What a successful plan run deployed.

    - Have the deployment report for the operator for diagnostics
    """

    #: Chain we deployed on
    chain_id: int

    #: Which plan was run
    plan_name: str

    #: Deployer address
    deployer: HexAddress

    #: Contract name -> deployment, in deployment order
    deployed: dict[str, DeployedContract] = field(default_factory=dict)

    #: Router parameters after placeholder resolution, if the plan used them
    router_parameters: RouterParameters | None = None

    def get_address(self, name: str) -> ChecksumAddress:
        return self.deployed[name].address

    def pformat(self) -> str:
        """Pretty format for logging."""
        data = {
            "Chain": self.chain_id,
            "Plan": self.plan_name,
            "Deployer": self.deployer,
            "Contracts": {name: d.address for name, d in self.deployed.items()},
        }
        if self.router_parameters is not None:
            data["Router parameters"] = self.router_parameters.to_dict()
        return pformat(data, sort_dicts=False)


def _check_stand_in(web3: Web3, stand_in: DeployedContract | None, dependent_name: str) -> ChecksumAddress:
    """Get the stand-in address, making sure there is a contract behind it."""
    if stand_in is None:
        raise DependencyUnavailable(f"{dependent_name} needs a stand-in contract address, but none was deployed")

    if not web3.eth.get_code(stand_in.address):
        raise DependencyUnavailable(f"Stand-in {stand_in.name} has no code at {stand_in.address}")

    return stand_in.address


def run_deployment_plan(
    web3: Web3,
    deployer: HotWallet,
    plan: DeploymentPlan,
    artifacts_dir: Path | None = None,
    router_parameters: RouterParameters | Path | str | None = None,
    create2_factory: str = DETERMINISTIC_DEPLOYMENT_PROXY,
    options: DeployOptions | None = None,
) -> DeploymentReport:
    """Deploy all contracts of a plan, in order.

    Example:

    .. code-block:: python

        deployer = HotWallet.from_private_key(os.environ["PRIVATE_KEY"])
        report = run_deployment_plan(
            web3,
            deployer,
            UNIVERSAL_ROUTER_PLAN,
            artifacts_dir=Path("artifacts-zk"),
            router_parameters=Path("router_params/abstract_testnet.json"),
        )
        print(report.pformat())

    Configuration is validated before the first transaction: parameter file,
    artifacts and constructor encoding problems raise :py:class:`ConfigurationError`
    with nothing deployed.

    Any later error aborts the run. Contracts deployed before the failure stay on chain
    and are logged. A failure after the stand-in deployment leaves it orphaned, and re-running
    the plan deploys a second stand-in at a different address.

    The deployer key must not be used by anything else during the run.

    :param router_parameters:
        Loaded parameters or a JSON file path. Needed if the plan has a contract taking them.

    :raise ConfigurationError:
        Bad configuration, nothing was deployed

    :raise router_deploy.deploy.DeploymentFailure:
        A deployment transaction failed

    :raise DependencyUnavailable:
        The stand-in address could not be obtained
    """

    # Preflight: fail before any network access
    raw_parameters = None
    if plan.needs_router_parameters():
        if router_parameters is None:
            raise ConfigurationError(f"Plan {plan.name} needs router parameters")
        if isinstance(router_parameters, RouterParameters):
            raw_parameters = router_parameters
        else:
            raw_parameters = load_router_parameters(router_parameters)

    for planned in plan.contracts:
        Contract = get_contract(web3, planned.name, artifacts_dir)
        if planned.takes_router_parameters:
            # The real stand-in address is not known yet, any non-zero address encodes the same way
            trial_parameters = resolve_placeholders(raw_parameters, deployer.address)
            get_init_code(Contract, (trial_parameters.to_constructor_arg(),))

    chain_id = web3.eth.chain_id

    logger.info("Running deployment plan %s on chain %d, deployer %s", plan.name, chain_id, deployer.address)

    deployed: dict[str, DeployedContract] = {}
    stand_in: DeployedContract | None = None
    resolved_parameters: RouterParameters | None = None

    try:
        for planned in plan.contracts:
            constructor_args = ()

            if planned.takes_router_parameters:
                fallback = _check_stand_in(web3, stand_in, planned.name)
                resolved_parameters = resolve_placeholders(raw_parameters, fallback)
                logger.info("Resolved router parameters:\n%s", resolved_parameters.pformat())
                constructor_args = (resolved_parameters.to_constructor_arg(),)

            deployment = deploy_contract(
                web3,
                planned.name,
                deployer,
                planned.mode,
                constructor_args=constructor_args,
                options=options,
                salt=planned.salt,
                artifacts_dir=artifacts_dir,
                create2_factory=create2_factory,
            )
            deployed[planned.name] = deployment

            if planned.stand_in:
                stand_in = deployment
    except Exception:
        if deployed:
            orphans = ", ".join(f"{name} at {d.address}" for name, d in deployed.items())
            logger.error("Deployment plan %s aborted. These contracts stay deployed: %s", plan.name, orphans)
        raise

    report = DeploymentReport(
        chain_id=chain_id,
        plan_name=plan.name,
        deployer=deployer.address,
        deployed=deployed,
        router_parameters=resolved_parameters,
    )

    logger.info("Deployment plan %s complete:\n%s", plan.name, report.pformat())
    return report
