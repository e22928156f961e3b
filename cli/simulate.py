import asyncio
from typing import Optional, Tuple

import click

from config.settings import settings
from simulation.models.request import SimulationRequest
from simulation.service.simulation_service_creator import create_simulation_service
from utils.exceptions import EncodingError, ValidationError
from utils.file_utils import write_json
from utils.logger_utils import configure_logging, get_logger

logger = get_logger("Simulate CLI")


async def run_simulation(request: SimulationRequest, provider_uris: Optional[str] = None):
    service = create_simulation_service(request.network, provider_uris)
    try:
        return await service.simulate(request)
    finally:
        await service.gateway.close()


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.argument("function_name", type=str)
@click.option("-f", "--from", "caller", required=True, type=str, help="The address the call is sent from.")
@click.option("-p", "--param", "params", multiple=True, type=str, help="Function argument, in order. Repeat per argument.")
@click.option("-n", "--network", default=settings.simulation.default_network, show_default=True, type=str, help="Network name.")
@click.option("-c", "--contract-address", default=None, type=str, help="Token contract. Defaults to the network's default contract.")
@click.option("-b", "--block", default="latest", show_default=True, type=str, help="Block number or tag to simulate against.")
@click.option("--gas-limit", default=None, type=int, help="Gas limit for the call.")
@click.option("--gas-price", default=None, type=int, help="Gas price in wei. Enables the cost estimate.")
@click.option("--value", default=0, show_default=True, type=int, help="Native value in wei.")
@click.option("--provider-uris", default=None, type=str, help="Comma separated JSON-RPC URLs, overrides the configured ones.")
@click.option("-o", "--output", default="-", show_default=True, type=str, help="Output file, '-' for stdout.")
@click.option("--log-file", default=None, show_default=True, type=str, help="Path to the log file.")
def simulate(
    function_name: str,
    caller: str,
    params: Tuple[str, ...],
    network: str,
    contract_address: Optional[str],
    block: str,
    gas_limit: Optional[int],
    gas_price: Optional[int],
    value: int,
    provider_uris: Optional[str],
    output: str,
    log_file: Optional[str],
):
    """Simulates one token contract call without sending a transaction."""
    configure_logging(log_file or settings.app.log_file, settings.app.log_level)

    request = SimulationRequest(
        function_name=function_name,
        caller=caller,
        parameters=list(params),
        gas_limit=gas_limit,
        gas_price=gas_price,
        value=value,
        block=int(block) if block.isdigit() else block,
        network=network,
        contract_address=contract_address,
    )
    try:
        result = asyncio.run(run_simulation(request, provider_uris))
    except (ValidationError, EncodingError) as e:
        raise click.ClickException(e.message)

    write_json(result.model_dump(mode="json"), output)
