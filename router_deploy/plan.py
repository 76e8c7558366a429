"""Named deployment plans.

A plan is an ordered list of contracts to deploy. Plans replace per-variant deploy
scripts: pick one by name with :py:func:`get_deployment_plan` and run it with
:py:func:`router_deploy.orchestrator.run_deployment_plan`.

Salts are fixed here and versioned with the code. Changing a salt moves the
contract to a new address on every network, so never touch them for contracts
that are already live.
"""

from dataclasses import dataclass

from eth_typing import HexStr

from router_deploy.create2 import validate_salt
from router_deploy.deploy import DeploymentMode
from router_deploy.parameters import ConfigurationError

#: Canonical WETH9 salt
WETH9_SALT = HexStr("0x0000000000000000000000000000000000000000000000000000000000000001")

#: Canonical Permit2 salt
PERMIT2_SALT = HexStr("0x0000000000000000000000000000000000000000000000000000000000000001")

#: Universal Router salt
UNIVERSAL_ROUTER_SALT = HexStr("0x0000000000000000000000000000000000000000000000000000000000000001")


@dataclass(frozen=True, slots=True)
class PlannedContract:
    """One contract in a deployment plan."""

    #: Artifact name
    name: str

    #: CREATE or CREATE2
    mode: DeploymentMode

    #: Fixed salt for CREATE2
    salt: HexStr | None = None

    #: The address of this contract is used for unsupported router parameter slots
    stand_in: bool = False

    #: Pass the resolved router parameters as the sole constructor argument
    takes_router_parameters: bool = False

    def __post_init__(self):
        if self.mode == DeploymentMode.create2:
            if self.salt is None:
                raise ConfigurationError(f"{self.name}: CREATE2 deployment needs a salt")
            try:
                validate_salt(self.salt)
            except ValueError as e:
                raise ConfigurationError(f"{self.name}: {e}") from e
        elif self.salt is not None:
            raise ConfigurationError(f"{self.name}: salt is only used with CREATE2")

        if self.stand_in and self.takes_router_parameters:
            raise ConfigurationError(f"{self.name}: a stand-in cannot depend on router parameters")


@dataclass(frozen=True, slots=True)
class DeploymentPlan:
    """Ordered contract deployments."""

    #: Plan name, like ``universal-router``
    name: str

    #: Deployed in this order
    contracts: tuple[PlannedContract, ...]

    #: Human readable description
    description: str = ""

    def __post_init__(self):
        if not self.contracts:
            raise ConfigurationError(f"Deployment plan {self.name} is empty")

        seen_stand_in = False
        for c in self.contracts:
            if c.takes_router_parameters and not seen_stand_in:
                raise ConfigurationError(f"Deployment plan {self.name}: {c.name} needs router parameters, but no stand-in contract is deployed before it")
            seen_stand_in = seen_stand_in or c.stand_in

    def needs_router_parameters(self) -> bool:
        return any(c.takes_router_parameters for c in self.contracts)


#: Deploy canonical WETH9 only
WETH9_PLAN = DeploymentPlan(
    name="weth9",
    description="Canonical WETH9 at a deterministic address",
    contracts=(PlannedContract("WETH9", DeploymentMode.create2, salt=WETH9_SALT),),
)

#: Deploy canonical WETH9 and Permit2
WETH9_PERMIT2_PLAN = DeploymentPlan(
    name="weth9-permit2",
    description="Canonical WETH9 and Permit2 at deterministic addresses",
    contracts=(
        PlannedContract("WETH9", DeploymentMode.create2, salt=WETH9_SALT),
        PlannedContract("Permit2", DeploymentMode.create2, salt=PERMIT2_SALT),
    ),
)

#: Deploy UnsupportedProtocol stand-in and Universal Router
UNIVERSAL_ROUTER_PLAN = DeploymentPlan(
    name="universal-router",
    description="UnsupportedProtocol stand-in and Universal Router at a deterministic address",
    contracts=(
        PlannedContract("UnsupportedProtocol", DeploymentMode.create, stand_in=True),
        PlannedContract("UniversalRouter", DeploymentMode.create2, salt=UNIVERSAL_ROUTER_SALT, takes_router_parameters=True),
    ),
)

#: Plan name -> plan
DEPLOYMENT_PLANS: dict[str, DeploymentPlan] = {p.name: p for p in (WETH9_PLAN, WETH9_PERMIT2_PLAN, UNIVERSAL_ROUTER_PLAN)}


def get_deployment_plan(name: str) -> DeploymentPlan:
    """Look up a plan by its name.

    :raise ConfigurationError:
        No such plan
    """
    try:
        return DEPLOYMENT_PLANS[name]
    except KeyError as e:
        raise ConfigurationError(f"Unknown deployment plan {name!r}, available: {', '.join(DEPLOYMENT_PLANS)}") from e
