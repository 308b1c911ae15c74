"""
CSV table storage using pandas with file locking.

Notes:
- Tables are written whole under an exclusive lock (temp buffer first).
- Always write CSV with '.' decimal; UI formatting uses the locale separately.
- Key columns are compared as strings so ids survive a CSV round trip.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional

import pandas as pd
from pandas.errors import EmptyDataError
import portalocker

LOCK_TIMEOUT_S = 10


@dataclass
class CsvStorage:
    base_dir: Path

    def _path(self, relative: str | Path) -> Path:
        p = self.base_dir / Path(relative)
        p.parent.mkdir(parents=True, exist_ok=True)
        return p

    def read_csv(
        self, relative: str | Path, columns: Optional[Iterable[str]] = None
    ) -> pd.DataFrame:
        """Read a table; missing or empty files give an empty frame with ``columns``."""
        path = self._path(relative)
        columns = list(columns or [])
        empty = pd.DataFrame(columns=columns)
        if not path.exists():
            return empty
        with portalocker.Lock(str(path), timeout=LOCK_TIMEOUT_S, flags=portalocker.LOCK_SH):
            try:
                df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8")
            except EmptyDataError:
                return empty
        for col in columns:
            if col not in df.columns:
                df[col] = ""
        return df

    def write_csv(self, relative: str | Path, df: pd.DataFrame) -> None:
        path = self._path(relative)
        csv_buf = io.StringIO()
        df.to_csv(csv_buf, index=False)
        data = csv_buf.getvalue()
        with portalocker.Lock(str(path), timeout=LOCK_TIMEOUT_S, flags=portalocker.LOCK_EX):
            path.write_text(data, encoding="utf-8")

    def replace_rows(
        self,
        relative: str | Path,
        key_col: str,
        key: str,
        rows: list[Dict[str, object]],
        columns: Iterable[str],
    ) -> None:
        """Drop every row whose ``key_col`` equals ``key`` then append ``rows``."""
        columns = list(columns)
        df = self.read_csv(relative, columns)
        kept = df[df[key_col].astype(str) != str(key)]
        new_rows = pd.DataFrame(rows, columns=columns).astype(str)
        frames = [frame for frame in (kept[columns], new_rows) if not frame.empty]
        result = pd.concat(frames, ignore_index=True) if frames else pd.DataFrame(columns=columns)
        self.write_csv(relative, result)

    def delete_rows(self, relative: str | Path, key_col: str, key: str) -> int:
        """Delete rows matching the key; returns how many were removed."""
        df = self.read_csv(relative)
        if df.empty or key_col not in df.columns:
            return 0
        mask = df[key_col].astype(str) == str(key)
        removed = int(mask.sum())
        if removed:
            self.write_csv(relative, df[~mask])
        return removed
