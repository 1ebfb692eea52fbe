from decimal import Decimal

import pytest

from taxbit_export import (
    COLUMNS,
    FormatError,
    InvariantViolation,
    SchemaVersion,
    TaxBitExportRecord,
    TaxBitRecType,
)

SAMPLE = (
    "2020-03-02T07:32:05.000Z,Income,3e-7,BTC,,,,,0.0025979719720382955,"
    "BinanceUS,FALSE,2459217f-1a6f-4693-974c-d8d65f21abab"
)


def _row(line: str = SAMPLE) -> dict[str, str]:
    return dict(zip(COLUMNS, line.split(",")))


def test_parse_sample_row():
    tbr = TaxBitExportRecord.from_row(_row())
    assert tbr.time == 1583134325000
    assert tbr.type_txs is TaxBitRecType.INCOME
    assert tbr.received_quantity == Decimal("0.0000003")
    assert tbr.received_currency == "BTC"
    assert tbr.sent_quantity is None
    assert tbr.sent_currency == ""
    assert tbr.fee_currency == ""
    assert tbr.fee_amount is None
    assert tbr.market_value == Decimal("0.0025979719720382955")
    assert tbr.source == "BinanceUS"
    assert tbr.internal_transfer is False
    assert tbr.external_id == "2459217f-1a6f-4693-974c-d8d65f21abab"
    assert tbr.get_asset() == "BTC"


def test_to_row_sample():
    row = TaxBitExportRecord.from_row(_row()).to_row()
    assert list(row) == list(COLUMNS)
    assert row["Date"] == "2020-03-02T07:32:05.000Z"
    assert row["Transaction Type"] == "Income"
    assert row["Received Quantity"] == "0.0000003"
    assert row["Sent Quantity"] == ""
    assert row["Fee Amount"] == ""
    assert row["Market Value"] == "0.0025979719720382955"
    assert row["Internal Transfer"] == "FALSE"


def test_round_trip_extended():
    line = (
        "2021-07-14T10:00:00.123Z,Transfer Out,,,1.50,ETH,ETH,0.0021,2900.10,"
        "Coinbase,TRUE,abc-1"
    )
    tbr = TaxBitExportRecord.from_row(_row(line))
    again = TaxBitExportRecord.from_row(tbr.to_row())
    assert again == tbr
    assert again.internal_transfer is True
    assert again.get_asset() == "ETH"


def test_round_trip_basic():
    line = "2021-07-14T10:00:00.000Z,Buy,2,BTC,60000,USD,,,60000,Kraken,false,k-1"
    tbr = TaxBitExportRecord.from_row(_row(line), schema=SchemaVersion.BASIC)
    row = tbr.to_row(SchemaVersion.BASIC)
    assert row["Internal Transfer"] == "false"
    assert TaxBitExportRecord.from_row(row, schema=SchemaVersion.BASIC) == tbr


def test_column_order_does_not_matter():
    row = _row()
    reordered = {k: row[k] for k in reversed(COLUMNS)}
    assert TaxBitExportRecord.from_row(reordered) == TaxBitExportRecord.from_row(row)


def test_type_label_variants():
    for label in ("Transfer In", "TransferIn", "transfer_in", "TRANSFER-IN"):
        row = _row()
        row["Transaction Type"] = label
        assert TaxBitExportRecord.from_row(row).type_txs is TaxBitRecType.TRANSFER_IN


def test_internal_transfer_extended_is_case_insensitive():
    row = _row()
    row["Internal Transfer"] = "true"
    assert TaxBitExportRecord.from_row(row).internal_transfer is True


def test_internal_transfer_basic_only_native_literals():
    row = _row()
    row["Internal Transfer"] = "true"
    assert TaxBitExportRecord.from_row(row, schema=SchemaVersion.BASIC).internal_transfer is True

    row["Internal Transfer"] = "FALSE"
    with pytest.raises(FormatError) as ei:
        TaxBitExportRecord.from_row(row, schema=SchemaVersion.BASIC)
    assert ei.value.column == "Internal Transfer"


@pytest.mark.parametrize(
    "column,value",
    [
        ("Date", "2020-13-02T07:32:05.000Z"),
        ("Date", "2020-03-02T07:32:05"),
        ("Date", ""),
        ("Transaction Type", "Airdrop"),
        ("Transaction Type", "Unknown"),
        ("Received Quantity", "abc"),
        ("Market Value", "NaN"),
        ("Fee Amount", "1,5"),
        ("Internal Transfer", "yes"),
    ],
)
def test_format_errors_name_the_column(column, value):
    row = _row()
    row[column] = value
    with pytest.raises(FormatError) as ei:
        TaxBitExportRecord.from_row(row)
    assert ei.value.column == column
    assert ei.value.value == value
    assert column in str(ei.value)


def test_invalid_type_only_in_extended_schema():
    row = _row()
    row["Transaction Type"] = "Invalid"
    assert TaxBitExportRecord.from_row(row).type_txs is TaxBitRecType.INVALID

    with pytest.raises(FormatError):
        TaxBitExportRecord.from_row(row, schema=SchemaVersion.BASIC)


def test_missing_column():
    row = _row()
    del row["Source"]
    with pytest.raises(FormatError) as ei:
        TaxBitExportRecord.from_row(row)
    assert ei.value.column == "Source"


def test_unknown_column():
    row = _row()
    row["Notes"] = "hello"
    with pytest.raises(FormatError) as ei:
        TaxBitExportRecord.from_row(row)
    assert ei.value.column == "Notes"


def test_missing_value():
    row = _row()
    row["External ID"] = None
    with pytest.raises(FormatError) as ei:
        TaxBitExportRecord.from_row(row)
    assert ei.value.column == "External ID"


def test_to_row_rejects_placeholders():
    with pytest.raises(InvariantViolation):
        TaxBitExportRecord().to_row()

    tbr = TaxBitExportRecord(type_txs=TaxBitRecType.INVALID)
    assert tbr.to_row()["Transaction Type"] == "Invalid"
    with pytest.raises(InvariantViolation):
        tbr.to_row(SchemaVersion.BASIC)


def test_str_is_debug_form():
    tbr = TaxBitExportRecord.from_row(_row())
    s = str(tbr)
    assert s.startswith("2020-03-02T07:32:05.000Z,Income,0.0000003,BTC,")
    assert ",False," in s
    assert "FALSE" not in s


def test_round_trip_year_below_1000():
    row = _row()
    row["Date"] = "0999-03-01T00:00:00.000Z"
    tbr = TaxBitExportRecord.from_row(row)
    assert tbr.to_row()["Date"] == "0999-03-01T00:00:00.000Z"
    assert TaxBitExportRecord.from_row(tbr.to_row()) == tbr


def test_nan_value_is_missing():
    row = _row()
    row["Source"] = float("nan")
    with pytest.raises(FormatError) as ei:
        TaxBitExportRecord.from_row(row)
    assert ei.value.column == "Source"
