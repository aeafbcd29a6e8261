"""Write the JSON Schema of the *.games.json output (ScheduleDocument)."""

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from fieldsched.config import get_settings
from fieldsched.extract.schema import ScheduleDocument, export_json_schema

out = get_settings().schema_file
if out is None:
    raise ValueError("FIELDSCHED_SCHEMA_FILE is empty; nowhere to write the games schema")

schema = export_json_schema()
schema.setdefault("title", ScheduleDocument.__name__)
out.parent.mkdir(parents=True, exist_ok=True)
out.write_text(json.dumps(schema, indent=2, ensure_ascii=False), encoding="utf-8")
print(f"Wrote {ScheduleDocument.__name__} schema ({len(schema.get('properties', {}))} top-level fields) to {out}")
