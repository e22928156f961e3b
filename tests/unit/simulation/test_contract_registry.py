from constants.event_signatures import (
    APPROVAL_EVENT_SIGNATURE,
    BLACKLISTED_EVENT_SIGNATURE,
    TRANSFER_EVENT_SIGNATURE,
    UNBLACKLISTED_EVENT_SIGNATURE,
)
from simulation.enums.contract_type import ContractType
from simulation.models.contract import ContractDescriptor
from simulation.registry.contract_registry import ContractRegistry
from simulation.registry.seed_contracts import (
    PYUSD_MAINNET_ADDRESS,
    PYUSD_SEPOLIA_ADDRESS,
    USDC_MAINNET_ADDRESS,
    build_default_registry,
)


def test_default_registry_contents():
    registry = build_default_registry()

    assert len(registry) == 3
    assert registry.networks() == ["mainnet", "sepolia"]
    assert registry.default_for("mainnet").address == PYUSD_MAINNET_ADDRESS
    assert registry.default_for("sepolia").address == PYUSD_SEPOLIA_ADDRESS
    assert registry.default_for("holesky") is None


def test_derived_event_topics_match_constants():
    usdc = build_default_registry().lookup(USDC_MAINNET_ADDRESS, "mainnet")

    assert usdc.events["Transfer"].topic == TRANSFER_EVENT_SIGNATURE
    assert usdc.events["Approval"].topic == APPROVAL_EVENT_SIGNATURE
    assert usdc.events["Blacklisted"].topic == BLACKLISTED_EVENT_SIGNATURE
    assert usdc.events["UnBlacklisted"].topic == UNBLACKLISTED_EVENT_SIGNATURE
    assert usdc.event_by_topic(TRANSFER_EVENT_SIGNATURE.upper().replace("0X", "0x")).name == "Transfer"
    assert usdc.event_by_topic("0x" + "00" * 32) is None


def test_lookup_is_case_insensitive():
    registry = build_default_registry()

    usdc = registry.lookup(USDC_MAINNET_ADDRESS.lower(), "mainnet")

    assert usdc.symbol == "USDC"
    assert usdc.decimals == 6
    assert "blacklist" in usdc.functions
    assert "Blacklisted" in usdc.events
    assert (USDC_MAINNET_ADDRESS.upper().replace("0X", "0x"), "mainnet") in registry
    assert registry.lookup(USDC_MAINNET_ADDRESS, "sepolia") is None
    assert registry.lookup("", "mainnet") is None


def test_pyusd_functions():
    pyusd = build_default_registry().default_for("mainnet")

    assert pyusd.decimals == 6
    assert pyusd.function("transfer").amount_params == (1,)
    assert pyusd.function("balanceOf").is_read_only
    assert pyusd.function("blacklist") is None


def test_first_contract_becomes_default_and_can_be_replaced():
    registry = ContractRegistry()
    first = ContractDescriptor(address="0x0000000000000000000000000000000000000001", network="mainnet", symbol="ONE")
    second = ContractDescriptor(address="0x0000000000000000000000000000000000000002", network="mainnet", symbol="TWO")

    registry.register(first)
    registry.register(second)
    assert registry.default_for("mainnet").symbol == "ONE"

    registry.register(second, default=True)
    assert registry.default_for("mainnet").symbol == "TWO"
    assert len(registry) == 2
    assert [descriptor.symbol for descriptor in registry.all_of_type(ContractType.ERC20)] == ["ONE", "TWO"]
    assert registry.all_of_type(ContractType.ERC721) == []
