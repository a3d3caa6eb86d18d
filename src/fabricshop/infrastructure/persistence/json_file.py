"""A JSON array on disk, rewritten atomically.

Repositories hold ``lock`` around every read-check-write sequence, which is
what makes their conditional updates atomic within the process.  Writes go
to a temporary file that replaces the original, so readers never see a
half-written document.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path


class JsonFile:

    def __init__(self, file_path: Path) -> None:
        self.path = file_path
        self.lock = threading.RLock()
        self._ensure_file()

    def load(self) -> list[dict]:
        return json.loads(self.path.read_text(encoding="utf-8"))

    def persist(self, records: list[dict]) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(json.dumps(records, indent=2) + "\n")
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _ensure_file(self) -> None:
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("[]", encoding="utf-8")
