# src/hoist/observers/jsonfile.py
from __future__ import annotations

import json
from pathlib import Path

from hoist.utils.serialize import to_jsonable

from .events import BaseEvent


class JsonFileObserver:
    """
    Appends one JSON object per event to a `.jsonl` file.

    Records carry the event type and a per-run sequence number so a run can
    be replayed in order even when timestamps collide.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._seq = 0

    def notify(self, event: BaseEvent) -> None:
        self._seq += 1
        record = {"seq": self._seq, "type": type(event).__name__, **to_jsonable(event.dict())}
        with self.path.open("a") as f:
            f.write(json.dumps(record, sort_keys=True) + "\n")
