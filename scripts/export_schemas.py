#!/usr/bin/env python3
"""Export JSON schemas for the persisted curation records."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Dict, Type

from pydantic import BaseModel

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from curation.collaboration.models import Collaboration
from curation.collections.models import Collection
from curation.events.models import CurationEvent
from curation.sessions.models import CurationSession
from curation.works.models import Work

RECORD_MODELS: Dict[str, Type[BaseModel]] = {
    "Work": Work,
    "Collaboration": Collaboration,
    "Collection": Collection,
    "CurationSession": CurationSession,
    "CurationEvent": CurationEvent,
}


def main(target_dir: str = "curation/schemas") -> int:
    target = Path(target_dir)
    target.mkdir(parents=True, exist_ok=True)

    for name, model_cls in RECORD_MODELS.items():
        schema_path = target / f"{name}.schema.json"
        with open(schema_path, "w", encoding="utf-8") as file_obj:
            json.dump(model_cls.model_json_schema(by_alias=True), file_obj, indent=2, ensure_ascii=False)

    return 0


if __name__ == "__main__":
    raise SystemExit(main(*sys.argv[1:2]))
