from .rec_type import TaxBitRecType
from .record import NO_ASSET, TaxBitExportRecord
from .schema import COLUMNS, SchemaVersion

__all__ = [
    "TaxBitExportRecord",
    "TaxBitRecType",
    "SchemaVersion",
    "COLUMNS",
    "NO_ASSET",
]
