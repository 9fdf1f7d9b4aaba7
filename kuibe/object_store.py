# -*- coding: utf-8 -*-
"""
object_store.py  (sealed bundle store)
--------------------------------------
  <root>/<object_id>/r<revision>.json    one file per stored revision
  <root>/<object_id>/latest.json         {"latest_revision": n}

A bundle records the target identity and the recipient's key version at
encryption time; the version is informational only, any later key version
still opens it.
"""

import json
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional


def new_object_id() -> str:
    return str(uuid.uuid4())


class FileObjectStore:

    def __init__(self, root_dir: str):
        self.root_dir = Path(root_dir)
        self.root_dir.mkdir(parents=True, exist_ok=True)

    def _obj_dir(self, object_id: str) -> Path:
        return self.root_dir / object_id

    def _write(self, path: Path, obj: Any) -> None:
        path.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")

    def revisions(self, object_id: str) -> List[int]:
        obj_dir = self._obj_dir(object_id)
        if not obj_dir.is_dir():
            return []
        return sorted(int(p.stem[1:]) for p in obj_dir.glob("r*.json"))

    def put(self, object_id: str, record: Dict[str, Any]) -> int:
        """Store `record` as the next revision of `object_id`; returns the revision."""
        obj_dir = self._obj_dir(object_id)
        obj_dir.mkdir(parents=True, exist_ok=True)

        revision = (self.revisions(object_id) or [0])[-1] + 1
        self._write(obj_dir / f"r{revision}.json", dict(record, revision=revision))
        self._write(obj_dir / "latest.json", {"latest_revision": revision})
        return revision

    def get(self, object_id: str, revision: Optional[int] = None) -> Dict[str, Any]:
        obj_dir = self._obj_dir(object_id)
        if revision is None:
            latest_path = obj_dir / "latest.json"
            if not latest_path.exists():
                raise FileNotFoundError(f"no bundle stored for object_id={object_id}")
            latest = json.loads(latest_path.read_text(encoding="utf-8"))
            revision = int(latest["latest_revision"])

        rev_path = obj_dir / f"r{int(revision)}.json"
        if not rev_path.exists():
            raise FileNotFoundError(f"bundle revision not found: {rev_path}")
        return json.loads(rev_path.read_text(encoding="utf-8"))

    def __contains__(self, object_id: str) -> bool:
        return (self._obj_dir(object_id) / "latest.json").exists()
