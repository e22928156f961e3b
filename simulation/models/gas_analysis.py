from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from simulation.enums.gas_group import GasGroup, GasLevel


class GasCost(BaseModel):
    model_config = ConfigDict(frozen=True)

    gas_used: int
    gas_price_wei: int
    cost_native: float                  # ether
    cost_usd: float


class CategoryAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: GasGroup
    gas_used: int
    operations: int
    percentage: float
    average_gas: float
    efficiency: GasLevel
    recommendation: Optional[str] = None


class GasComparison(BaseModel):
    """
    Summary over the successful (or hypothetically successful) entries of a comparison.
    `most_efficient` and `least_efficient` are positions in the compared sequence.
    """

    model_config = ConfigDict(frozen=True)

    most_efficient: Optional[int] = None
    least_efficient: Optional[int] = None
    average_gas: float = 0.0
    min_gas: int = 0
    max_gas: int = 0
    recommendations: List[str] = Field(default_factory=list)


class BatchAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_operations: int
    successful_operations: int
    failed_operations: int
    success_rate: float
    total_gas_used: int
    average_gas_per_operation: float
    gas_efficiency: float
    failure_points: List[int] = Field(default_factory=list)
    gas_distribution: Dict[str, int] = Field(default_factory=dict)
    operation_types: Dict[str, int] = Field(default_factory=dict)
    recommendations: List[str] = Field(default_factory=list)
