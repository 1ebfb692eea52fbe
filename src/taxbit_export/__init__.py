from .errors import FormatError, InvariantViolation
from .models import COLUMNS, NO_ASSET, SchemaVersion, TaxBitExportRecord, TaxBitRecType

__version__ = "0.1.0"

__all__ = [
    "TaxBitExportRecord",
    "TaxBitRecType",
    "SchemaVersion",
    "COLUMNS",
    "NO_ASSET",
    "FormatError",
    "InvariantViolation",
    "__version__",
]
