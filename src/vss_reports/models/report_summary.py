from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReportFileSummary(BaseModel):
    """Response object for report file processing"""
    success: bool
    file_name: Optional[str] = Field(default=None, alias="fileName")
    file_size: int = Field(default=0, alias="fileSize", ge=0)
    parsed_sections: List[str] = Field(default_factory=list, alias="parsedSections")
    record_counts: Dict[str, int] = Field(default_factory=dict, alias="recordCounts")
    message: str = ""
    error: Optional[str] = None

    model_config = ConfigDict(
        populate_by_name=True
    )

    @property
    def total_records(self) -> int:
        return sum(self.record_counts.values())
