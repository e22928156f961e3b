from enum import Enum


class CacheKind(str, Enum):
    SIMULATION = "simulation"
    COMPARISON = "comparison"
    BATCH = "batch"
