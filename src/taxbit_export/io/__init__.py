from .csv_io import ReadResult, dedupe_sorted, read_records, write_records

__all__ = [
    "ReadResult",
    "read_records",
    "write_records",
    "dedupe_sorted",
]
