from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# -----------------------------
# Input contract (pdf2json-shaped text dump)
# -----------------------------
# Unknown keys (Meta, Fills, Lines, font styles, ...) are tolerated and dropped.


class RawRun(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    # percent-encoded text
    text: str = Field("", alias="T")


class RawText(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    x: float
    y: float
    width: float = Field(0.0, alias="w")
    runs: List[RawRun] = Field(default_factory=list, alias="R")


class RawPage(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    width: float = Field(..., gt=0, alias="Width")
    height: float = Field(0.0, ge=0, alias="Height")
    texts: List[RawText] = Field(default_factory=list, alias="Texts")


class RawDocument(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    pages: List[RawPage] = Field(default_factory=list, alias="Pages")
    source_pdf_file: Optional[str] = Field(None, alias="sourcePdfFile")
