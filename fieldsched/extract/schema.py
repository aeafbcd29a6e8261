from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

TIME_PATTERN = r"^\d{2}\.\d{2}\s*-\s*\d{2}\.\d{2}$"
DATE_PATTERN = r"^\d{1,2}\.\d{1,2}\.\d{4}$"


class GameEntry(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    field: str = Field(..., min_length=1)
    game_duration: str = Field("", alias="gameDuration")
    game_type: str = Field("", alias="gameType")
    year: str = ""
    time: str = Field(..., pattern=TIME_PATTERN)
    team1: str = ""
    team2: str = ""


class ScheduleDocument(BaseModel):
    """Output contract: one extracted schedule PDF."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    document_date: Optional[str] = Field(
        None, alias="documentDate", pattern=DATE_PATTERN
    )
    games: List[GameEntry] = Field(default_factory=list)
    source_file: Optional[str] = Field(None, alias="sourceFile")

    @field_validator("source_file")
    @classmethod
    def _strip_source(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip() or None

    def to_json_dict(self) -> Dict[str, Any]:
        # documentDate stays (null allowed); sourceFile only when known
        data = self.model_dump(by_alias=True)
        if data.get("sourceFile") is None:
            data.pop("sourceFile", None)
        return data


def export_json_schema() -> dict:
    """Export the JSON Schema for this contract (Pydantic v2)."""
    return ScheduleDocument.model_json_schema(by_alias=True)
