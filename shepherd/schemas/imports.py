from typing import Dict, List

from pydantic import BaseModel, Field, ConfigDict


class GoogleSheetImportRequest(BaseModel):
    sheet_id: str = Field(..., alias="sheetId", min_length=1)

    model_config = ConfigDict(populate_by_name=True)


class ImportResultResponse(BaseModel):
    success: bool
    synced_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    message: str = ""
    column_mapping: Dict[str, int] = Field(default_factory=dict)
    found_headers: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
