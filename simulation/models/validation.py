from typing import List

from pydantic import BaseModel, Field


class ValidationOutcome(BaseModel):
    """Blocking `errors` and advisory `warnings` for a set of parameters."""

    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def merge(self, other: "ValidationOutcome") -> "ValidationOutcome":
        return ValidationOutcome(errors=self.errors + other.errors, warnings=self.warnings + other.warnings)
