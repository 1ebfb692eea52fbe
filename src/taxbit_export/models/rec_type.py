from __future__ import annotations

import functools
from enum import Enum

from ..errors import FormatError
from .schema import SchemaVersion


@functools.total_ordering
class TaxBitRecType(Enum):
    BUY = "Buy"
    SALE = "Sale"
    TRADE = "Trade"
    INCOME = "Income"
    EXPENSE = "Expense"
    TRANSFER_IN = "Transfer In"
    TRANSFER_OUT = "Transfer Out"
    GIFT_SENT = "Gift Sent"
    GIFT_RECEIVED = "Gift Received"
    INVALID = "Invalid"
    UNKNOWN = "Unknown"

    @property
    def label(self) -> str:
        return self.value

    @property
    def rank(self) -> int:
        return _RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, TaxBitRecType):
            return NotImplemented
        return _RANK[self] < _RANK[other]

    @classmethod
    def parse(
        cls,
        label: str,
        schema: SchemaVersion = SchemaVersion.EXTENDED,
        column: str = "Transaction Type",
    ) -> "TaxBitRecType":
        """
        "Transfer In", "TransferIn" and "transfer_in" all map to TRANSFER_IN.
        UNKNOWN is never produced.
        """
        t = _BY_KEY.get(_label_key(label))
        if t is None or t is cls.UNKNOWN:
            raise FormatError(column, label, "unknown transaction type")
        if t is cls.INVALID and schema is not SchemaVersion.EXTENDED:
            raise FormatError(column, label, f"not allowed by the {schema.value} schema")
        return t


def _label_key(label: str) -> str:
    s = (label or "").strip().lower()
    for ch in (" ", "_", "-"):
        s = s.replace(ch, "")
    return s


# Sort priority. Kept separate from declaration order.
_RANK: dict[TaxBitRecType, int] = {
    TaxBitRecType.BUY: 0,
    TaxBitRecType.SALE: 1,
    TaxBitRecType.TRADE: 2,
    TaxBitRecType.INCOME: 3,
    TaxBitRecType.EXPENSE: 4,
    TaxBitRecType.TRANSFER_IN: 5,
    TaxBitRecType.TRANSFER_OUT: 6,
    TaxBitRecType.GIFT_SENT: 7,
    TaxBitRecType.GIFT_RECEIVED: 8,
    TaxBitRecType.INVALID: 9,
    TaxBitRecType.UNKNOWN: 10,
}

_BY_KEY: dict[str, TaxBitRecType] = {_label_key(t.value): t for t in TaxBitRecType}

SENT_ASSET_TYPES = frozenset(
    {
        TaxBitRecType.EXPENSE,
        TaxBitRecType.TRANSFER_OUT,
        TaxBitRecType.GIFT_SENT,
        TaxBitRecType.SALE,
    }
)

RECEIVED_ASSET_TYPES = frozenset(
    {
        TaxBitRecType.BUY,
        TaxBitRecType.TRANSFER_IN,
        TaxBitRecType.INCOME,
        TaxBitRecType.GIFT_RECEIVED,
        TaxBitRecType.TRADE,
    }
)
