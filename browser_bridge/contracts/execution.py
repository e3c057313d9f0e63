from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ActionOutcome(BaseModel):
    """Result of running one validated action against the surface."""

    model_config = ConfigDict(frozen=True)

    success: bool
    warning: Optional[str] = None


class ExecutionResult(BaseModel):
    """
    Aggregated outcome of one execute call.

    Filled in while the batch runs; terminal failures produce a result that
    only carries `errors`.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    executed_count: int = Field(default=0, ge=0, alias="executedCount")
    skipped_count: int = Field(default=0, ge=0, alias="skippedCount")
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    final_url: Optional[str] = Field(default=None, alias="finalURL")
    final_title: Optional[str] = Field(default=None, alias="finalTitle")
    did_navigate: bool = Field(default=False, alias="didNavigate")

    @classmethod
    def failure(cls, message: str) -> "ExecutionResult":
        return cls(errors=[message])

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)
