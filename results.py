"""
Result ingestion — turn materialised query rows into JSON text for the
results pane.
"""
import base64
import json
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, List, Optional


@dataclass(frozen=True)
class BlobRef:
    """An attachment stored beside a row rather than inline in it."""
    content_type: Optional[str]
    length: int
    digest: Optional[str]

    def describe(self):
        return {
            "@type": "blob",
            "contentType": self.content_type,
            "length": self.length,
            "digest": self.digest,
        }


def simplify(value: Any) -> Any:
    """Convert a value tree into something json.dumps accepts."""
    if isinstance(value, float) and not math.isfinite(value):
        # Not representable in JSON
        return "NaN" if math.isnan(value) else ("Infinity" if value > 0 else "-Infinity")
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, BlobRef):
        return value.describe()
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, Mapping):
        return {str(key): simplify(item) for key, item in value.items()}
    if isinstance(value, Iterable):
        return [simplify(item) for item in value]
    return str(value)


def rows_to_json(rows: List[Any]) -> str:
    return json.dumps([simplify(row) for row in rows], indent=2,
                      ensure_ascii=False, allow_nan=False)


def summarize_rows(count: int) -> str:
    return "1 row returned" if count == 1 else f"{count} rows returned"
