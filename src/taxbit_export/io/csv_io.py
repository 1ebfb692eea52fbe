from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Literal

import pandas as pd

from ..errors import FormatError
from ..models.record import TaxBitExportRecord
from ..models.schema import COLUMNS, SchemaVersion

logger = logging.getLogger(__name__)

OnError = Literal["raise", "collect"]

# FormatError.column for problems that belong to the file, not to one column
FILE_COLUMN = "<file>"


@dataclass
class ReadResult:
    records: list[TaxBitExportRecord] = field(default_factory=list)
    errors: list[FormatError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _check_header(columns: Iterable[str]) -> None:
    got = [str(c) for c in columns]
    for col in COLUMNS:
        if col not in got:
            raise FormatError(col, None, "missing column in header")
    for col in got:
        if col not in COLUMNS:
            raise FormatError(col, None, "unknown column in header")


def load_taxbit_csv(path: str | Path, encoding: str = "utf-8") -> pd.DataFrame:
    """
    Every cell as str. Empty cells stay "", cells missing from a short row are NaN.

    Files pandas cannot tokenize (extra fields, no header, undecodable bytes)
    raise FormatError for the whole file.
    """
    try:
        df = pd.read_csv(
            path,
            dtype=str,
            keep_default_na=False,
            encoding=encoding,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise FormatError(FILE_COLUMN, str(path), str(e)) from e

    # pandas turns a first data row with one field too many into an index column
    if not isinstance(df.index, pd.RangeIndex):
        raise FormatError(FILE_COLUMN, str(path), "data row has more fields than the header")
    return df


def read_records(
    path: str | Path,
    schema: SchemaVersion = SchemaVersion.EXTENDED,
    on_error: OnError = "raise",
    encoding: str = "utf-8",
) -> ReadResult:
    """
    Parse a TaxBit CSV file.

    on_error="raise":   first bad row raises FormatError (row_num is 1-based, header excluded)
    on_error="collect": bad rows are skipped and returned in ReadResult.errors
    """
    if on_error not in ("raise", "collect"):
        raise ValueError(f"on_error must be 'raise' or 'collect', got {on_error!r}")

    df = load_taxbit_csv(path, encoding=encoding)
    _check_header(df.columns)

    result = ReadResult()
    for row_num, row in enumerate(df.to_dict(orient="records"), start=1):
        try:
            result.records.append(TaxBitExportRecord.from_row(row, schema=schema))
        except FormatError as e:
            err = e.at_row(row_num)
            if on_error == "raise":
                raise err from e
            logger.warning("Skipping %s", err)
            result.errors.append(err)

    logger.info(
        "Read %s: records=%s errors=%s schema=%s",
        path,
        len(result.records),
        len(result.errors),
        SchemaVersion(schema).value,
    )
    return result


def write_records(
    records: Iterable[TaxBitExportRecord],
    path: str | Path,
    schema: SchemaVersion = SchemaVersion.EXTENDED,
    encoding: str = "utf-8",
) -> Path:
    rows = [r.to_row(schema) for r in records]
    df = pd.DataFrame(rows, columns=list(COLUMNS), dtype=str)

    path = Path(path)
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        df.to_csv(tmp, index=False, encoding=encoding, lineterminator="\n")
        tmp.replace(path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise

    logger.info("Wrote %s: records=%s", path, len(rows))
    return path


def dedupe_sorted(records: Iterable[TaxBitExportRecord]) -> list[TaxBitExportRecord]:
    """
    Sort and drop records equal to their predecessor.

    All records must agree on which optional amounts are present, otherwise
    sorting raises InvariantViolation.
    """
    out: list[TaxBitExportRecord] = []
    for r in sorted(records):
        if out and out[-1] == r:
            continue
        out.append(r)
    return out
