from __future__ import annotations

from enum import Enum


class SchemaVersion(str, Enum):
    """
    basic:    native true/false for Internal Transfer, no Invalid type
    extended: TRUE/FALSE (case-insensitive) for Internal Transfer, Invalid type allowed
    """

    BASIC = "basic"
    EXTENDED = "extended"


# CSV header, in wire order
COLUMNS: tuple[str, ...] = (
    "Date",
    "Transaction Type",
    "Received Quantity",
    "Received Currency",
    "Sent Quantity",
    "Sent Currency",
    "Fee Currency",
    "Fee Amount",
    "Market Value",
    "Source",
    "Internal Transfer",
    "External ID",
)
