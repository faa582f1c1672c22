"""
Append-only record files in parquet format.

Parquet files cannot be appended to in place, so every append is a full
read-modify-write: existing rows are read, the new rows are concatenated, the
result is written to a temp file in the target directory, flushed to disk and
renamed over the target. Readers therefore see either the previous complete
file or the new complete file.
"""

import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from decimal import InvalidOperation
from pathlib import Path
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar, Union

import pyarrow as pa
import pyarrow.parquet as pq

from fantasy_finance.core.exceptions import SchemaError, StorageIOError

logger = logging.getLogger(__name__)

R = TypeVar("R")

PathLike = Union[str, Path]


@dataclass(frozen=True)
class RecordSchema(Generic[R]):
    """Arrow layout of a record type plus its row encoder/decoder."""

    name: str
    arrow_schema: pa.Schema
    to_row: Callable[[R], dict[str, Any]]
    from_row: Callable[[dict[str, Any]], R]

    def layout(self) -> list[tuple[str, pa.DataType]]:
        return [(f.name, f.type) for f in self.arrow_schema]


class ColumnarStore(Generic[R]):
    """
    Generic append/read of typed records to parquet files.

    A store is bound to one RecordSchema. Appends to the same path are
    serialized; appends to different paths may run in parallel.
    """

    def __init__(self, schema: RecordSchema[R]):
        self._schema = schema
        self._path_locks: dict[Path, threading.Lock] = {}
        self._path_locks_guard = threading.Lock()

    def append(self, path: PathLike, records: Sequence[R]) -> None:
        """
        Add records to the end of the file at ``path``.

        Creates the file and any missing directories. Raises StorageIOError on
        disk failures and SchemaError if the existing file has another layout.
        """
        if not records:
            return
        path = Path(path)
        new_rows = self._to_table(path, records)

        with self._lock_for(path):
            existing = self._read_table(path)
            if existing is None:
                table = new_rows
            else:
                table = pa.concat_tables([existing, new_rows])
            self._write_atomic(path, table)

        logger.debug(
            "Appended %d %s record(s) to %s (%d total)",
            len(records),
            self._schema.name,
            path,
            table.num_rows,
        )

    def read_all(self, path: PathLike) -> list[R]:
        """Return every record ever appended, in write order ([] if no file)."""
        table = self._read_table(Path(path))
        if table is None:
            return []
        return [self._schema.from_row(row) for row in table.to_pylist()]

    def _lock_for(self, path: Path) -> threading.Lock:
        key = path.resolve()
        with self._path_locks_guard:
            lock = self._path_locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._path_locks[key] = lock
            return lock

    def _to_table(self, path: Path, records: Sequence[R]) -> pa.Table:
        try:
            rows = [self._schema.to_row(record) for record in records]
            return pa.Table.from_pylist(rows, schema=self._schema.arrow_schema)
        except (pa.ArrowInvalid, pa.ArrowTypeError, InvalidOperation) as exc:
            raise SchemaError(path, f"records do not fit {self._schema.name} schema: {exc}") from exc

    def _read_table(self, path: Path) -> Optional[pa.Table]:
        if not path.exists():
            return None
        try:
            table = pq.read_table(path)
        except pa.ArrowInvalid as exc:
            raise SchemaError(path, f"unreadable parquet file: {exc}") from exc
        except OSError as exc:
            raise StorageIOError(path, str(exc)) from exc

        actual = [(f.name, f.type) for f in table.schema]
        if actual != self._schema.layout():
            raise SchemaError(
                path,
                f"expected {self._schema.name} columns {self._schema.arrow_schema.names}, "
                f"found {table.schema.names}",
            )
        # Nullability flags may differ after a parquet round-trip
        return table.cast(self._schema.arrow_schema)

    def _write_atomic(self, path: Path, table: pa.Table) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{path.stem}_",
                suffix=".tmp",
                dir=path.parent,
            )
        except OSError as exc:
            raise StorageIOError(path, str(exc)) from exc

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                pq.write_table(table, f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise StorageIOError(path, str(exc)) from exc
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
