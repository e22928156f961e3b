import asyncio
from typing import Any, List, Optional, Tuple

import click

from config.settings import settings
from simulation.service.gas_analyzer_service import GasAnalyzerService
from simulation.service.simulation_service_creator import create_simulation_service
from utils.exceptions import ValidationError
from utils.file_utils import read_json, write_json
from utils.logger_utils import configure_logging, get_logger

logger = get_logger("Compare CLI")


def parse_variants(variants: Tuple[str, ...], variants_file: Optional[str]) -> List[List[Any]]:
    """Parameter sets from a JSON file (list of lists) or from comma separated `--variant` values."""
    if variants_file:
        parameter_sets = read_json(variants_file)
        if not isinstance(parameter_sets, list) or not all(isinstance(item, list) for item in parameter_sets):
            raise click.BadParameter("must contain a JSON list of parameter lists", param_hint="--variants-file")
        return parameter_sets
    return [[value.strip() for value in variant.split(",")] for variant in variants]


async def run_comparison(
    function_name: str,
    caller: str,
    parameter_sets: List[List[Any]],
    network: str,
    contract_address: Optional[str] = None,
    provider_uris: Optional[str] = None,
):
    service = create_simulation_service(network, provider_uris)
    try:
        contract = service.resolve_contract(network, contract_address)
        signature = service.resolve_function(contract, function_name)
        outcome = service.validator.validate_comparison(signature, caller, parameter_sets, contract.decimals)
        for warning in outcome.warnings:
            logger.warning(warning)
        for error in outcome.errors:
            logger.warning(f"Will fail: {error}")
        return await service.compare_variants(function_name, caller, parameter_sets, network, contract_address)
    finally:
        await service.gateway.close()


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.argument("function_name", type=str)
@click.option("-f", "--from", "caller", required=True, type=str, help="The address the calls are sent from.")
@click.option("-v", "--variant", "variants", multiple=True, type=str, help="Comma separated arguments of one variant, e.g. '0xabc...,10'.")
@click.option("--variants-file", default=None, type=str, help="JSON file with a list of parameter lists.")
@click.option("-n", "--network", default=settings.simulation.default_network, show_default=True, type=str, help="Network name.")
@click.option("-c", "--contract-address", default=None, type=str, help="Token contract. Defaults to the network's default contract.")
@click.option("--provider-uris", default=None, type=str, help="Comma separated JSON-RPC URLs, overrides the configured ones.")
@click.option("-o", "--output", default="-", show_default=True, type=str, help="Output file, '-' for stdout.")
@click.option("--log-file", default=None, show_default=True, type=str, help="Path to the log file.")
def compare(
    function_name: str,
    caller: str,
    variants: Tuple[str, ...],
    variants_file: Optional[str],
    network: str,
    contract_address: Optional[str],
    provider_uris: Optional[str],
    output: str,
    log_file: Optional[str],
):
    """Simulates one function with several parameter sets and compares their gas usage."""
    configure_logging(log_file or settings.app.log_file, settings.app.log_level)

    parameter_sets = parse_variants(variants, variants_file)
    try:
        results = asyncio.run(
            run_comparison(function_name, caller, parameter_sets, network, contract_address, provider_uris)
        )
    except ValidationError as e:
        raise click.ClickException(e.message)

    write_json(
        {
            "results": [result.model_dump(mode="json") for result in results],
            "analysis": GasAnalyzerService.compare(results).model_dump(mode="json"),
        },
        output,
    )
