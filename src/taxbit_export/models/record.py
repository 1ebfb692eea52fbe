from __future__ import annotations

import math
from decimal import Decimal
from typing import Any, Callable, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from ..core.decimals import compare_optional, decimal_to_string_or_empty, parse_decimal
from ..core.time_ms import time_ms_to_utc_z_string, utc_string_to_time_ms
from ..errors import FormatError, InvariantViolation
from .rec_type import RECEIVED_ASSET_TYPES, SENT_ASSET_TYPES, TaxBitRecType
from .schema import COLUMNS, SchemaVersion

# get_asset() result for an Invalid record with no currency at all
NO_ASSET = "<no currency>"

_BOOL_LITERALS: dict[SchemaVersion, dict[str, bool]] = {
    SchemaVersion.BASIC: {"true": True, "false": False},
    SchemaVersion.EXTENDED: {"TRUE": True, "FALSE": False},
}


def _schema_from(info: ValidationInfo) -> SchemaVersion:
    ctx = info.context or {}
    return SchemaVersion(ctx.get("schema", SchemaVersion.EXTENDED))


class TaxBitExportRecord(BaseModel):
    """
    One row of a TaxBit export CSV.

    Field aliases are the CSV column names. TaxBitExportRecord() is the
    zero-value placeholder (type UNKNOWN); real rows come from from_row().
    Fields may be reassigned freely, nothing is re-validated on assignment.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    time: int = Field(default=0, alias="Date")
    type_txs: TaxBitRecType = Field(default=TaxBitRecType.UNKNOWN, alias="Transaction Type")
    received_quantity: Decimal | None = Field(default=None, alias="Received Quantity")
    received_currency: str = Field(default="", alias="Received Currency")
    sent_quantity: Decimal | None = Field(default=None, alias="Sent Quantity")
    sent_currency: str = Field(default="", alias="Sent Currency")
    fee_currency: str = Field(default="", alias="Fee Currency")
    fee_amount: Decimal | None = Field(default=None, alias="Fee Amount")
    market_value: Decimal | None = Field(default=None, alias="Market Value")
    source: str = Field(default="", alias="Source")
    internal_transfer: bool = Field(default=False, alias="Internal Transfer")
    external_id: str = Field(default="", alias="External ID")

    @field_validator("time", mode="before")
    @classmethod
    def _parse_time(cls, v: Any) -> Any:
        if isinstance(v, str):
            return utc_string_to_time_ms(v, column="Date")
        return v

    @field_validator("type_txs", mode="before")
    @classmethod
    def _parse_type(cls, v: Any, info: ValidationInfo) -> Any:
        if isinstance(v, str):
            return TaxBitRecType.parse(v, _schema_from(info))
        return v

    @field_validator(
        "received_quantity", "sent_quantity", "fee_amount", "market_value", mode="before"
    )
    @classmethod
    def _parse_quantity(cls, v: Any, info: ValidationInfo) -> Any:
        if isinstance(v, str):
            return parse_decimal(_ALIAS_BY_FIELD[info.field_name], v)
        return v

    @field_validator("internal_transfer", mode="before")
    @classmethod
    def _parse_internal_transfer(cls, v: Any, info: ValidationInfo) -> Any:
        if not isinstance(v, str):
            return v
        schema = _schema_from(info)
        key = v.strip()
        if schema is SchemaVersion.EXTENDED:
            key = key.upper()
        literals = _BOOL_LITERALS[schema]
        if key not in literals:
            expected = "/".join(literals)
            raise FormatError("Internal Transfer", v, f"expected {expected}")
        return literals[key]

    # --- parsing / serialization ---

    @classmethod
    def from_row(
        cls,
        row: Mapping[Any, Any],
        schema: SchemaVersion = SchemaVersion.EXTENDED,
    ) -> "TaxBitExportRecord":
        """
        Parse one CSV row keyed by column name. Column order does not matter,
        but every column must be present and no other column is allowed.
        """
        for col in COLUMNS:
            if col not in row:
                raise FormatError(col, None, "missing column")
        for key in row:
            if key not in _COLUMN_SET:
                raise FormatError(str(key), row[key], "unknown column")
        for col in COLUMNS:
            if _is_missing(row[col]):
                raise FormatError(col, None, "missing value")

        try:
            return cls.model_validate(dict(row), context={"schema": SchemaVersion(schema)})
        except ValidationError as e:
            raise _to_format_error(e) from e

    def to_row(self, schema: SchemaVersion = SchemaVersion.EXTENDED) -> dict[str, str]:
        schema = SchemaVersion(schema)
        if self.type_txs is TaxBitRecType.UNKNOWN:
            raise InvariantViolation("cannot serialize a placeholder record (type Unknown)")
        if self.type_txs is TaxBitRecType.INVALID and schema is not SchemaVersion.EXTENDED:
            raise InvariantViolation("type Invalid is only representable in the extended schema")

        if schema is SchemaVersion.EXTENDED:
            internal = "TRUE" if self.internal_transfer else "FALSE"
        else:
            internal = "true" if self.internal_transfer else "false"

        return {
            "Date": time_ms_to_utc_z_string(self.time),
            "Transaction Type": self.type_txs.label,
            "Received Quantity": decimal_to_string_or_empty(self.received_quantity),
            "Received Currency": self.received_currency,
            "Sent Quantity": decimal_to_string_or_empty(self.sent_quantity),
            "Sent Currency": self.sent_currency,
            "Fee Currency": self.fee_currency,
            "Fee Amount": decimal_to_string_or_empty(self.fee_amount),
            "Market Value": decimal_to_string_or_empty(self.market_value),
            "Source": self.source,
            "Internal Transfer": internal,
            "External ID": self.external_id,
        }

    def __str__(self) -> str:
        # Debug rendering only; to_row() is the parseable form.
        return ",".join(
            [
                time_ms_to_utc_z_string(self.time),
                self.type_txs.label,
                decimal_to_string_or_empty(self.received_quantity),
                self.received_currency,
                decimal_to_string_or_empty(self.sent_quantity),
                self.sent_currency,
                self.fee_currency,
                decimal_to_string_or_empty(self.fee_amount),
                decimal_to_string_or_empty(self.market_value),
                self.source,
                str(self.internal_transfer),
                self.external_id,
            ]
        )

    # --- classification ---

    def get_asset(self) -> str:
        t = self.type_txs
        if t in SENT_ASSET_TYPES:
            return self.sent_currency
        if t in RECEIVED_ASSET_TYPES:
            return self.received_currency
        if t is TaxBitRecType.INVALID:
            for cur in (self.received_currency, self.sent_currency, self.fee_currency):
                if cur:
                    return cur
            return NO_ASSET
        raise InvariantViolation(f"get_asset() called on a record of type {t.label}")

    # --- equality / ordering ---

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TaxBitExportRecord):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in _FIELDS)

    __hash__ = None  # type: ignore[assignment]

    def compare(self, other: "TaxBitExportRecord") -> int:
        """
        -1 / 0 / 1 by time, type, currencies, quantities, then the remaining
        metadata. Raises InvariantViolation when an optional amount is absent
        on one side and present on the other before any earlier field decides.
        """
        for name, cmp in _ORDERING:
            c = cmp(name, getattr(self, name), getattr(other, name))
            if c:
                return c
        return 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, TaxBitExportRecord):
            return NotImplemented
        return self.compare(other) < 0

    def __le__(self, other: object) -> bool:
        if not isinstance(other, TaxBitExportRecord):
            return NotImplemented
        return self.compare(other) <= 0

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, TaxBitExportRecord):
            return NotImplemented
        return self.compare(other) > 0

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, TaxBitExportRecord):
            return NotImplemented
        return self.compare(other) >= 0


def _cmp_plain(name: str, a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _cmp_optional_decimal(name: str, a: Decimal | None, b: Decimal | None) -> int:
    return compare_optional(_ALIAS_BY_FIELD[name], a, b)


_ORDERING: tuple[tuple[str, Callable[[str, Any, Any], int]], ...] = (
    ("time", _cmp_plain),
    ("type_txs", _cmp_plain),
    ("received_currency", _cmp_plain),
    ("sent_currency", _cmp_plain),
    ("fee_currency", _cmp_plain),
    ("received_quantity", _cmp_optional_decimal),
    ("sent_quantity", _cmp_optional_decimal),
    ("fee_amount", _cmp_optional_decimal),
    ("market_value", _cmp_optional_decimal),
    ("source", _cmp_plain),
    ("internal_transfer", _cmp_plain),
    ("external_id", _cmp_plain),
)

_FIELDS: tuple[str, ...] = tuple(TaxBitExportRecord.model_fields)
_ALIAS_BY_FIELD: dict[str, str] = {
    name: (f.alias or name) for name, f in TaxBitExportRecord.model_fields.items()
}
_COLUMN_SET = frozenset(COLUMNS)


def _is_missing(value: Any) -> bool:
    # None from short dict rows, NaN from short DataFrame rows
    return value is None or (isinstance(value, float) and math.isnan(value))


def _to_format_error(e: ValidationError) -> FormatError:
    err = e.errors()[0]
    original = (err.get("ctx") or {}).get("error")
    if isinstance(original, FormatError):
        return original

    loc = err.get("loc") or ()
    name = str(loc[0]) if loc else "?"
    column = _ALIAS_BY_FIELD.get(name, name)
    return FormatError(column, err.get("input"), err.get("msg", ""))
