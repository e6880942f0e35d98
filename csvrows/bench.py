"""
Parser throughput benchmark.

    ROWS=200000 csvrows-bench
"""

from __future__ import annotations

import io
import json
import os
import time
from typing import Any, Dict

from .sources import parse_readable


def generate_csv(rows: int) -> str:
    lines = ["id,value,text"]
    for i in range(1, rows + 1):
        text = f'row {i} "quoted"'.replace('"', '""')
        lines.append(f'{i},{i * 3.14159:.3f},"{text}"')
    return "\n".join(lines) + "\n"


def run(rows: int) -> Dict[str, Any]:
    data = generate_csv(rows).encode("utf-8")
    start = time.perf_counter()
    result = parse_readable(io.BytesIO(data))
    elapsed = time.perf_counter() - start
    return {
        "rows": result.count,
        "ms": round(elapsed * 1000, 2),
        "rps": round(result.count / elapsed) if elapsed > 0 else 0,
    }


def main() -> int:
    rows = int(os.getenv("ROWS", "50000"))
    print(json.dumps(run(rows)))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
