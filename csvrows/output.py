"""JSON rendering of parsed rows, shared by the CLI and the HTTP service."""

import json
from typing import Iterable

from .parser import Row


def dump_rows(rows: Iterable[Row], pretty: bool = False) -> str:
    rows = list(rows)
    if pretty:
        return json.dumps(rows, ensure_ascii=False, indent=2)
    return json.dumps(rows, ensure_ascii=False, separators=(",", ":"))
