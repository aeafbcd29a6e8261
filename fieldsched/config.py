from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for paths & the layout catalogue.
    Every field can be overridden with a FIELDSCHED_* environment variable.
    """

    model_config = SettingsConfigDict(
        env_prefix="FIELDSCHED_",
        extra="ignore",
    )

    project_root: Path = Field(
        default_factory=lambda: Path(__file__).resolve().parents[1]
    )

    data_dir: Path = Field(default=Path("data"))
    output_dir: Path = Field(default=Path("artifacts"))
    schema_file: Path = Field(default=Path("schema") / "games.schema.json")

    # None -> packaged fieldsched/extract/venues.yaml
    venues_file: Optional[Path] = None

    # PDF points per layout unit; 16 reproduces pdf2json page units
    pdf_unit_scale: float = Field(default=16.0, gt=0)

    @field_validator("data_dir", "output_dir", "schema_file", "venues_file", mode="before")
    @classmethod
    def _coerce_path(cls, v):
        # Accept strings from env and coerce; allow Path passthrough.
        if v is None:
            return v
        if isinstance(v, str):
            s = v.strip()
            if not s:
                return None
            return Path(s).expanduser()
        if isinstance(v, Path):
            return v.expanduser()
        return v

    @computed_field(return_type=Path)
    def output_dir_games(self) -> Path:
        return self.output_dir / "games"

    def model_post_init(self, __context) -> None:
        # Resolve relative paths against project_root
        if not self.data_dir.is_absolute():
            self.data_dir = (self.project_root / self.data_dir).resolve()
        if not self.output_dir.is_absolute():
            self.output_dir = (self.project_root / self.output_dir).resolve()
        if not self.schema_file.is_absolute():
            self.schema_file = (self.project_root / self.schema_file).resolve()
        if self.venues_file is not None and not self.venues_file.is_absolute():
            self.venues_file = (self.project_root / self.venues_file).resolve()


# Lazy singleton
_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
