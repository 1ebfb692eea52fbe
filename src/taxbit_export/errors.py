from __future__ import annotations


class FormatError(ValueError):
    """
    A column of an input row could not be parsed.

    Recoverable: the row-by-row caller decides whether to skip the row,
    fail the batch or collect the error.
    """

    def __init__(self, column: str, value: object, reason: str = "", row_num: int | None = None):
        self.column = column
        self.value = value
        self.reason = reason
        self.row_num = row_num
        super().__init__(self._message())

    def _message(self) -> str:
        msg = f"{self.column}: invalid value {self.value!r}"
        if self.reason:
            msg += f" ({self.reason})"
        if self.row_num is not None:
            msg = f"row {self.row_num}: {msg}"
        return msg

    def at_row(self, row_num: int) -> "FormatError":
        return FormatError(self.column, self.value, self.reason, row_num=row_num)


class InvariantViolation(RuntimeError):
    """
    Programming error or corrupted upstream data. Not meant to be caught.
    """
