"""Pydantic models for API request/response schemas."""
from typing import Literal, Optional
from pydantic import BaseModel, Field

from ..services.edit_distance import EditDistanceResult
from ..utils.text_utils import display_char


class DistanceRequest(BaseModel):
    """Request model for edit distance computation. Inputs are used verbatim."""
    source: Optional[str] = Field(
        default=None,
        description="String to transform"
    )
    target: Optional[str] = Field(
        default=None,
        description="String to transform into"
    )

    def has_input(self) -> bool:
        return bool(self.source) or bool(self.target)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"source": "kitten", "target": "sitting"}
            ]
        }
    }


class OperationInfo(BaseModel):
    """Single edit operation as rendered for clients."""
    position: int = Field(description="1-based position (source for substitute/delete, target for insert)")
    source: str = Field(description="Source character, or a placeholder for insert")
    target: str = Field(description="Target character, or a placeholder for delete")
    op: Literal["substitute", "insert", "delete"]


class StepInfo(BaseModel):
    """Single trace step as rendered for clients."""
    step: int = Field(description="1-based step number")
    operation: str = Field(description="Description of the applied operation")
    result: str = Field(description="String after this step")


class DistanceResponse(BaseModel):
    """Response model for edit distance computation."""
    distance: int
    operations: list[OperationInfo] = Field(default_factory=list)
    steps: list[StepInfo] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: EditDistanceResult) -> "DistanceResponse":
        return cls(
            distance=result.distance,
            operations=[
                OperationInfo(
                    position=op.position,
                    source=display_char(op.source_char),
                    target=display_char(op.target_char),
                    op=op.kind.value,
                )
                for op in result.operations
            ],
            steps=[
                StepInfo(step=s.index, operation=s.description, result=s.result_snapshot)
                for s in result.steps
            ],
        )


class LogRequest(DistanceRequest):
    """Request model for storing a computation log entry."""
    distance: Optional[int] = Field(
        default=None,
        ge=0,
        description="Distance reported by the client (computed server-side if omitted)"
    )


class LogEntry(BaseModel):
    """Stored log record."""
    source: str = ""
    target: str = ""
    distance: Optional[int] = None
    ip: str = "unknown"
    ts: str
    ua: str = ""


class LogResponse(BaseModel):
    """Response model for /api/log."""
    ok: bool = True
    key: Optional[str] = None


class EntryInfo(BaseModel):
    """Listing entry for a stored log record."""
    url: str
    key: str
    uploadedAt: str
    size: int


class EntriesResponse(BaseModel):
    """Response model for /api/entries."""
    entries: list[EntryInfo] = Field(default_factory=list)
    cursor: Optional[str] = None
    hasMore: bool = False
