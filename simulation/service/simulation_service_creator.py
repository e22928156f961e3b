from typing import List, Optional, Union

from config.settings import Settings, settings as default_settings
from simulation.registry.contract_registry import ContractRegistry
from simulation.registry.seed_contracts import build_default_registry
from simulation.rpc.rpc_gateway import JsonRpcGateway, RpcGateway
from simulation.service.simulation_cache import SimulationCache
from simulation.service.simulation_service import SimulationService
from simulation.service.validator_service import ValidatorService


def parse_provider_uris(provider_uris: Optional[Union[str, List[str]]]) -> List[str]:
    if provider_uris is None:
        return []
    if isinstance(provider_uris, str):
        provider_uris = provider_uris.split(",")
    return [uri.strip() for uri in provider_uris if uri and uri.strip()]


def create_gateway(network: str, provider_uris: Optional[str] = None, config: Settings = default_settings) -> RpcGateway:
    # Explicit URIs win over the configured ones for the network
    urls = parse_provider_uris(provider_uris) or config.rpc.urls_for(network)
    return JsonRpcGateway(
        urls,
        max_retries=config.rpc.max_retries,
        timeout=config.rpc.timeout,
        rpc_min_interval=config.rpc.min_request_interval,
    )


def create_simulation_service(
    network: Optional[str] = None,
    provider_uris: Optional[str] = None,
    gateway: Optional[RpcGateway] = None,
    registry: Optional[ContractRegistry] = None,
    config: Settings = default_settings,
) -> SimulationService:
    network = network or config.simulation.default_network
    return SimulationService(
        gateway=gateway or create_gateway(network, provider_uris, config),
        registry=registry or build_default_registry(),
        cache=SimulationCache(ttl_seconds=config.cache.ttl_seconds, max_entries=config.cache.max_entries),
        validator=ValidatorService(large_amount_threshold=config.simulation.large_amount_threshold),
        default_network=network,
        default_gas=config.simulation.default_gas_overrides,
        reference_price_usd=config.simulation.reference_price_usd,
        trace_enabled=config.simulation.trace_enabled,
    )
