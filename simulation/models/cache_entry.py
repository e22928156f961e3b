from typing import Any

from pydantic import BaseModel, ConfigDict


class CacheEntry(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    payload: Any
    inserted_at: float                  # clock seconds at insertion
    network: str

    def age(self, now: float) -> float:
        return now - self.inserted_at
