from typing import Optional

import click

from config.settings import settings
from simulation.registry.seed_contracts import build_default_registry
from utils.file_utils import write_json


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option("-n", "--network", default=settings.simulation.default_network, show_default=True, type=str, help="Network name.")
@click.option("-c", "--contract-address", default=None, type=str, help="Token contract. Defaults to the network's default contract.")
@click.option("-o", "--output", default="-", show_default=True, type=str, help="Output file, '-' for stdout.")
def list_functions(network: str, contract_address: Optional[str], output: str):
    """Lists the functions that can be simulated on a registered contract."""
    registry = build_default_registry()
    contract = registry.lookup(contract_address, network) if contract_address else registry.default_for(network)
    if contract is None:
        raise click.ClickException(f"No contract registered for {contract_address or network}")

    write_json(
        {
            "contract": contract.address,
            "symbol": contract.symbol,
            "network": contract.network,
            "decimals": contract.decimals,
            "functions": [
                {
                    "name": signature.name,
                    "signature": signature.canonical_name,
                    "selector": signature.selector,
                    "state_mutability": signature.state_mutability.value,
                    "category": signature.category.value,
                    "description": signature.description,
                }
                for signature in contract.functions.values()
            ],
        },
        output,
    )
