from typing import Optional

from pydantic import BaseModel, ConfigDict

from simulation.enums.error_severity import ErrorCategory, Severity


class DecodedError(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: Optional[str] = None          # 4-byte selector of the payload, when there is one
    message: str                        # raw message from the node
    decoded_message: Optional[str] = None
    severity: Severity = Severity.MEDIUM
    suggestion: Optional[str] = None
    category: ErrorCategory = ErrorCategory.OTHER
