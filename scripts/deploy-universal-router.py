"""Deploy the Universal Router, or another deployment plan.

- Deploy ``UnsupportedProtocol`` stand-in
- Fill unsupported protocol slots of the router parameters with its address
- Deploy ``UniversalRouter`` at a deterministic CREATE2 address

Contract artifacts must be compiled beforehand.

To run:

.. code-block:: shell

    export PRIVATE_KEY=...
    export JSON_RPC_URL=...
    export ARTIFACTS_DIR=artifacts
    export ROUTER_PARAMS=router_params/abstract_testnet.json
    python scripts/deploy-universal-router.py

Other plans:

.. code-block:: shell

    DEPLOYMENT_PLAN=weth9-permit2 python scripts/deploy-universal-router.py

Any failure exits with a non-zero status through an uncaught exception.
Do not run two deployments with the same ``PRIVATE_KEY`` at the same time.
"""

import logging
import os
from pathlib import Path

from web3 import HTTPProvider, Web3

from router_deploy.create2 import DETERMINISTIC_DEPLOYMENT_PROXY
from router_deploy.hotwallet import HotWallet
from router_deploy.orchestrator import run_deployment_plan
from router_deploy.parameters import get_bundled_parameters_path
from router_deploy.plan import get_deployment_plan
from router_deploy.utils import setup_console_logging

logger = logging.getLogger(__name__)


def main():
    setup_console_logging()

    PRIVATE_KEY = os.environ["PRIVATE_KEY"]
    JSON_RPC_URL = os.environ["JSON_RPC_URL"]
    DEPLOYMENT_PLAN = os.environ.get("DEPLOYMENT_PLAN", "universal-router")
    ROUTER_PARAMS = os.environ.get("ROUTER_PARAMS")
    ARTIFACTS_DIR = os.environ.get("ARTIFACTS_DIR", "artifacts")
    CREATE2_FACTORY = os.environ.get("CREATE2_FACTORY", DETERMINISTIC_DEPLOYMENT_PROXY)

    plan = get_deployment_plan(DEPLOYMENT_PLAN)

    if ROUTER_PARAMS:
        router_params_path = Path(ROUTER_PARAMS)
    else:
        router_params_path = get_bundled_parameters_path("abstract_testnet")

    web3 = Web3(HTTPProvider(JSON_RPC_URL))
    deployer = HotWallet.from_private_key(PRIVATE_KEY)
    deployer.sync_nonce(web3)

    logger.info(
        "Chain %d, deployer %s, balance %s, plan %s: %s",
        web3.eth.chain_id,
        deployer.address,
        deployer.get_native_currency_balance(web3),
        plan.name,
        plan.description,
    )

    report = run_deployment_plan(
        web3,
        deployer,
        plan,
        artifacts_dir=Path(ARTIFACTS_DIR),
        router_parameters=router_params_path if plan.needs_router_parameters() else None,
        create2_factory=CREATE2_FACTORY,
    )

    print(f"Deployment complete:\n{report.pformat()}")


if __name__ == "__main__":
    main()
