import argparse
import logging
from collections import Counter

from . import __version__
from .config import load_settings
from .logging_setup import setup_logging
from .models.schema import SchemaVersion


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="taxbit-export")
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    parser.add_argument(
        "command",
        nargs="?",
        default="status-env",
        choices=["status-env", "check", "normalize", "assets"],
        help="Command to run",
    )
    parser.add_argument("file", nargs="?", default=None, help="TaxBit export CSV")
    parser.add_argument(
        "--schema",
        choices=[s.value for s in SchemaVersion],
        default=None,
        help="Wire schema of the file. Default: TAXBIT_SCHEMA or 'extended'",
    )
    parser.add_argument(
        "--on-error",
        choices=["raise", "collect"],
        default=None,
        help="Stop at the first bad row (raise) or skip and report bad rows (collect). "
        "Default: TAXBIT_ON_ERROR or 'raise'",
    )
    parser.add_argument(
        "--out",
        type=str,
        default=None,
        help="Output CSV (used with normalize). Default: <file>.normalized.csv",
    )

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return 0

    settings = load_settings()
    setup_logging(settings.log_level)

    logger = logging.getLogger(__name__)

    schema = SchemaVersion(args.schema) if args.schema else settings.schema_version
    on_error = args.on_error or settings.on_error

    if args.command == "status-env":
        print("TAXBIT_SCHEMA =", settings.schema_version.value)
        print("TAXBIT_ON_ERROR =", settings.on_error)
        print("TAXBIT_ENCODING =", settings.encoding)
        print("LOG_LEVEL =", settings.log_level)
        return 0

    if not args.file:
        parser.error(f"{args.command} requires a FILE argument")

    from .errors import FormatError, InvariantViolation
    from .io.csv_io import dedupe_sorted, read_records, write_records

    try:
        result = read_records(args.file, schema=schema, on_error=on_error, encoding=settings.encoding)
    except FormatError as e:
        print("error:", e)
        return 1

    if args.command == "check":
        print("file =", args.file)
        print("schema =", schema.value)
        print("records =", len(result.records))
        print("errors =", len(result.errors))
        for err in result.errors[:20]:
            print("  ", err)
        if len(result.errors) > 20:
            print(f"... and {len(result.errors) - 20} more errors")
        return 0 if result.ok else 1

    if args.command == "normalize":
        out = args.out or f"{args.file}.normalized.csv"
        try:
            records = dedupe_sorted(result.records)
        except InvariantViolation as e:
            # rows that tie up to an amount present on one side only cannot be sorted
            logger.error("Cannot normalize %s: %s", args.file, e)
            print("error:", e)
            return 1
        write_records(records, out, schema=schema, encoding=settings.encoding)
        dropped = len(result.records) - len(records)
        logger.info("Normalized %s -> %s (duplicates dropped: %s)", args.file, out, dropped)
        print("records =", len(records))
        print("duplicates_dropped =", dropped)
        print("out =", out)
        return 0 if result.ok else 1

    if args.command == "assets":
        counts = Counter(r.get_asset() for r in result.records)
        for asset, n in counts.most_common():
            print(f"{asset}\t{n}")
        return 0 if result.ok else 1

    return 1
