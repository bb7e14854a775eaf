# wishlist_api/database.py
"""
File-backed document store using CSV files as tables.

Every read and write of a table happens while holding that table's file lock,
so concurrent requests (threads or worker processes) never observe a
half-written file. Writes that must not clobber a concurrent update go through
`replace_record`, which compares the stored `version` column before writing.

Usage:
    from wishlist_api.database import db
    db.get_record("wishlists", "user_id", "123")
    db.insert_record("wishlists", {"user_id": "123", "version": 0}, key="user_id")
    db.replace_record("wishlists", "user_id", "123", row, expected_version=0)
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
import pandas as pd
from filelock import FileLock

from wishlist_api.config import settings
from wishlist_api.core.errors import OptimisticLockError

logger = logging.getLogger("uvicorn.error").getChild(__name__)

VERSION_FIELD = "version"


class FileBackedDB:
    """
    Manages CSV files inside data_dir.
    Table name corresponds to a file name in settings (or you may pass a full filename).
    """

    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir if data_dir is not None else settings.DATA_DIR)

    def _file_path(self, table: str) -> Path:
        """
        Resolve table -> file path. Explicit .csv filenames are used as-is
        (relative to data_dir); known tables map through settings; anything
        else falls back to table + .csv
        """
        if table.endswith(".csv"):
            return self.data_dir / Path(table)
        mapping = {
            "wishlists": settings.WISHLISTS_FILE,
        }
        filename = mapping.get(table, f"{table}.csv")
        return self.data_dir / Path(filename)

    def _lock_for(self, path: Path) -> FileLock:
        path.parent.mkdir(parents=True, exist_ok=True)
        return FileLock(str(path) + ".lock")

    def _read_df_nolock(self, path: Path) -> pd.DataFrame:
        if not path.exists() or path.stat().st_size == 0:
            return pd.DataFrame()
        # everything is read back as text; models do their own type conversion
        return pd.read_csv(path, dtype=str, keep_default_na=False)

    def _write_df_nolock(self, path: Path, df: pd.DataFrame) -> None:
        """
        Write DataFrame to `path` WITHOUT acquiring the file lock.
        Use this only when the caller already holds the lock.
        """
        df.to_csv(path, index=False)

    @staticmethod
    def _row_to_dict(df: pd.DataFrame, mask: "pd.Series") -> Dict[str, Any]:
        row = df[mask].iloc[0].to_dict()
        return {k: (None if pd.isna(v) else v) for k, v in row.items()}

    @staticmethod
    def _normalize(data: Dict[str, Any]) -> Dict[str, str]:
        return {k: ("" if v is None else str(v)) for k, v in data.items()}

    # --- high-level primitives ---

    def list_records(self, table: str) -> List[Dict[str, Any]]:
        path = self._file_path(table)
        with self._lock_for(path):
            df = self._read_df_nolock(path)
        if df.empty:
            return []
        return df.to_dict(orient="records")

    def get_record(self, table: str, key: str, value: Any) -> Optional[Dict[str, Any]]:
        path = self._file_path(table)
        with self._lock_for(path):
            df = self._read_df_nolock(path)
        if df.empty or key not in df.columns:
            return None
        mask = df[key].astype(str) == str(value)
        if not mask.any():
            return None
        return self._row_to_dict(df, mask)

    def insert_record(self, table: str, data: Dict[str, Any], key: str) -> Dict[str, Any]:
        """
        Insert `data` unless a row with the same `key` value already exists,
        in which case OptimisticLockError is raised and nothing is written.
        """
        path = self._file_path(table)
        new_row = self._normalize(data)
        with self._lock_for(path):
            df = self._read_df_nolock(path)
            if df.empty:
                df = pd.DataFrame([new_row])
            else:
                if key in df.columns and (df[key].astype(str) == new_row[key]).any():
                    raise OptimisticLockError(f"Record {key}={new_row[key]} already exists in {table}")
                df = pd.concat([df, pd.DataFrame([new_row])], ignore_index=True, sort=False).fillna("")
            self._write_df_nolock(path, df)
        logger.debug("Inserted %s=%s into %s", key, new_row[key], table)
        return data

    def replace_record(self, table: str, key: str, value: Any, data: Dict[str, Any],
                       expected_version: int) -> Dict[str, Any]:
        """
        Compare-and-swap: overwrite the row where df[key] == value with `data`,
        but only if its stored version still equals `expected_version`.
        Raises OptimisticLockError when the row is gone or the version moved on.
        """
        path = self._file_path(table)
        updates = self._normalize(data)
        with self._lock_for(path):
            df = self._read_df_nolock(path)
            if df.empty or key not in df.columns:
                raise OptimisticLockError(f"Record {key}={value} no longer exists in {table}")
            mask = df[key].astype(str) == str(value)
            if not mask.any():
                raise OptimisticLockError(f"Record {key}={value} no longer exists in {table}")

            stored_raw = df.loc[mask, VERSION_FIELD].iloc[0] if VERSION_FIELD in df.columns else ""
            stored_version = int(float(stored_raw)) if stored_raw not in (None, "") else 0
            if stored_version != int(expected_version):
                raise OptimisticLockError(
                    f"Version mismatch for {key}={value} (expected {expected_version}, got {stored_version})"
                )

            for k, v in updates.items():
                if k not in df.columns:
                    df[k] = ""
                df.loc[mask, k] = v
            self._write_df_nolock(path, df)
            return self._row_to_dict(df, mask)


# module-level singleton for convenience
db = FileBackedDB()
