"""CSV loading into raw rows.

Parsing follows RFC 4180 via the stdlib :mod:`csv` module: the first row is
the header, quoted fields may hold commas and newlines. A UTF-8 byte order
mark is tolerated. Rows whose cells are all blank are dropped here, before
normalization, so they never count as rejected rows.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable
from io import StringIO
from os import PathLike
from pathlib import Path
from typing import IO

from .models import RawRow


def _is_blank(row: dict[str, str]) -> bool:
    return all((v or "").strip() == "" for v in row.values())


def _read_rows(f: IO[str]) -> list[dict[str, str]]:
    reader = csv.DictReader(f)
    if not reader.fieldnames:
        return []
    rows: list[dict[str, str]] = []
    for row in reader:
        # DictReader collects surplus cells under a ``None`` key; drop it so
        # every row keeps the ``dict[str, str]`` shape.
        normalized = {k: (v if v is not None else "") for k, v in row.items() if k is not None}
        if _is_blank(normalized):
            continue
        rows.append(normalized)
    return rows


def read_csv_rows(csv_text: str) -> list[dict[str, str]]:
    """Parse CSV text into raw rows keyed by header name."""

    with StringIO(csv_text.removeprefix("\ufeff"), newline="") as f:
        return _read_rows(f)


def read_csv_file(csv_path: str | PathLike[str]) -> list[dict[str, str]]:
    """Read a CSV file into raw rows.

    Raises ``OSError`` when the file cannot be opened, ``UnicodeDecodeError``
    for non-UTF-8 content and ``csv.Error`` from the tokenizer. An empty file
    yields no rows.
    """

    p = Path(csv_path)
    with p.open(encoding="utf-8-sig", newline="") as f:
        return _read_rows(f)


def skip_leading(rows: Iterable[RawRow], count: int) -> list[RawRow]:
    """Drop the first ``count`` rows (exports with preamble lines under the header)."""

    out = list(rows)
    return out[count:] if count > 0 else out


__all__ = ["read_csv_file", "read_csv_rows", "skip_leading"]
