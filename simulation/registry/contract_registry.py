from typing import Dict, List, Optional, Tuple

from simulation.enums.contract_type import ContractType
from simulation.models.contract import ContractDescriptor
from utils.logger_utils import get_logger

logger = get_logger("Contract Registry")


class ContractRegistry(object):
    """
    Lookup table (network, address) -> ContractDescriptor.
    Addresses are matched case-insensitively; registering the same key again overwrites.
    """

    def __init__(self):
        self._contracts: Dict[Tuple[str, str], ContractDescriptor] = {}
        self._defaults: Dict[str, str] = {}

    @staticmethod
    def _key(address: str, network: str) -> Tuple[str, str]:
        return network, address.lower()

    def register(self, descriptor: ContractDescriptor, default: bool = False) -> None:
        key = self._key(descriptor.address, descriptor.network)
        if key in self._contracts:
            logger.debug(f"Overwriting {descriptor.symbol} at {descriptor.address} on {descriptor.network}")
        self._contracts[key] = descriptor

        # The first contract of a network is its default until told otherwise
        if default or descriptor.network not in self._defaults:
            self._defaults[descriptor.network] = descriptor.address.lower()

    def lookup(self, address: str, network: str) -> Optional[ContractDescriptor]:
        if not address:
            return None
        return self._contracts.get(self._key(address, network))

    def all_of_type(self, contract_type: ContractType, network: Optional[str] = None) -> List[ContractDescriptor]:
        return [
            descriptor
            for (descriptor_network, _), descriptor in self._contracts.items()
            if descriptor.contract_type == contract_type and (network is None or descriptor_network == network)
        ]

    def networks(self) -> List[str]:
        return sorted({network for network, _ in self._contracts})

    def default_for(self, network: str) -> Optional[ContractDescriptor]:
        address = self._defaults.get(network)
        if address is None:
            return None
        return self._contracts.get((network, address))

    def __len__(self) -> int:
        return len(self._contracts)

    def __contains__(self, key: Tuple[str, str]) -> bool:
        address, network = key
        return self._key(address, network) in self._contracts
