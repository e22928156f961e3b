import asyncio
from typing import List, Optional

import click
from pydantic import TypeAdapter, ValidationError as ModelValidationError

from config.settings import settings
from simulation.models.request import BatchOperation
from simulation.service.gas_analyzer_service import GasAnalyzerService
from simulation.service.simulation_service_creator import create_simulation_service
from utils.exceptions import ValidationError
from utils.file_utils import read_json, write_json
from utils.logger_utils import configure_logging, get_logger

logger = get_logger("Batch CLI")

_OPERATIONS_ADAPTER = TypeAdapter(List[BatchOperation])


def load_operations(operations_file: str) -> List[BatchOperation]:
    """Reads `[{"function_name": ..., "parameters": [...]}, ...]` from a file or stdin ('-')."""
    try:
        return _OPERATIONS_ADAPTER.validate_python(read_json(operations_file))
    except ModelValidationError as e:
        raise click.BadParameter(str(e), param_hint="--operations-file")


async def run_batch(
    caller: str,
    operations: List[BatchOperation],
    network: str,
    contract_address: Optional[str] = None,
    provider_uris: Optional[str] = None,
):
    service = create_simulation_service(network, provider_uris)
    try:
        contract = service.resolve_contract(network, contract_address)
        outcome = service.validator.validate_batch(operations, contract.functions, contract.decimals)
        for warning in outcome.warnings:
            logger.warning(warning)
        for error in outcome.errors:
            logger.warning(f"Will fail: {error}")
        return await service.simulate_batch(caller, operations, network, contract_address)
    finally:
        await service.gateway.close()


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option("-f", "--from", "caller", required=True, type=str, help="The address the calls are sent from.")
@click.option("-i", "--operations-file", default="-", show_default=True, type=str, help="JSON file with the operations, '-' for stdin.")
@click.option("-n", "--network", default=settings.simulation.default_network, show_default=True, type=str, help="Network name.")
@click.option("-c", "--contract-address", default=None, type=str, help="Token contract. Defaults to the network's default contract.")
@click.option("--provider-uris", default=None, type=str, help="Comma separated JSON-RPC URLs, overrides the configured ones.")
@click.option("-o", "--output", default="-", show_default=True, type=str, help="Output file, '-' for stdout.")
@click.option("--log-file", default=None, show_default=True, type=str, help="Path to the log file.")
def batch(
    caller: str,
    operations_file: str,
    network: str,
    contract_address: Optional[str],
    provider_uris: Optional[str],
    output: str,
    log_file: Optional[str],
):
    """Simulates a sequence of operations and summarizes the batch."""
    configure_logging(log_file or settings.app.log_file, settings.app.log_level)

    operations = load_operations(operations_file)
    logger.info(f"Simulating batch of {len(operations)} operations on {network}...")
    try:
        result = asyncio.run(run_batch(caller, operations, network, contract_address, provider_uris))
    except ValidationError as e:
        raise click.ClickException(e.message)

    write_json(
        {
            "result": result.model_dump(mode="json"),
            "analysis": GasAnalyzerService.summarize_batch(result).model_dump(mode="json"),
        },
        output,
    )
