from typing import Dict

from pydantic import BaseModel, Field


class SettingsUpdate(BaseModel):
    values: Dict[str, str] = Field(..., min_length=1)
