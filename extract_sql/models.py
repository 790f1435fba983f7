"""Data models for extract-sql."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from .constants import DEFAULT_DELIMITER


class ScannerState(Enum):
    """States of the statement scanner.

    Attributes:
        IDLE: Between statements; skips anything that does not start one.
        SEEN_INSERT: Read ``INSERT``.
        SEEN_INTO: Read ``INSERT INTO``.
        IN_COLUMN_LIST: Read a registered table name; expecting the column list.
        COLUMN_LIST_DONE: Column list closed; expecting ``VALUES``.
        SEEN_VALUES_OPEN: Expecting the opening parenthesis of a value tuple.
        IN_VALUE_TUPLE: Inside a value tuple.
        VALUE_TUPLE_DONE: Tuple closed; expecting another tuple or ``;``.
        SEEN_COPY: Read ``COPY``.
        IN_COPY_COLUMN_LIST: Read the table name of a COPY statement.
        COPY_COLUMN_LIST_DONE: COPY column list closed; expecting ``FROM STDIN``.
        SEEN_FROM_STDIN: Read ``FROM STDIN``.
        SEEN_CUSTOM_DELIMITER: Read a ``DELIMITER`` option.
        IN_DATA_BLOCK: Reading inline COPY rows until the ``\\.`` sentinel.
        IN_BLOCK_COMMENT: Inside ``/* ... */``.
    """

    IDLE = auto()
    SEEN_INSERT = auto()
    SEEN_INTO = auto()
    IN_COLUMN_LIST = auto()
    COLUMN_LIST_DONE = auto()
    SEEN_VALUES_OPEN = auto()
    IN_VALUE_TUPLE = auto()
    VALUE_TUPLE_DONE = auto()
    SEEN_COPY = auto()
    IN_COPY_COLUMN_LIST = auto()
    COPY_COLUMN_LIST_DONE = auto()
    SEEN_FROM_STDIN = auto()
    SEEN_CUSTOM_DELIMITER = auto()
    IN_DATA_BLOCK = auto()
    IN_BLOCK_COMMENT = auto()


@dataclass(frozen=True)
class Statement:
    """Per-statement data, present only while a statement is being scanned.

    Attributes:
        table: Normalized name of the target table.
        columns: One-based column ordinal mapped to column name.
        ordinal: Position of the most recently read column or value.
        columns_open: Whether the opening parenthesis of the column list was read.
        delimiter: Field delimiter of a COPY data block.
        registered: Whether `table` is in the registry. Statements on other
            tables are only followed so that their data is skipped.
    """

    table: str
    columns: dict[int, str] = field(default_factory=dict)
    ordinal: int = 0
    columns_open: bool = False
    delimiter: str = DEFAULT_DELIMITER
    registered: bool = True


@dataclass(frozen=True)
class ScanCursor:
    """Everything the scanner knows at a point in the input.

    Attributes:
        state: Current scanner state.
        line_number: One-based number of the last line read; 0 before any input.
        pending: Unconsumed text carried over to the next line.
        statement: Statement being scanned, or None when between statements.
        resume_state: State to restore when the current block comment closes.
    """

    state: ScannerState = ScannerState.IDLE
    line_number: int = 0
    pending: str = ""
    statement: Statement | None = None
    resume_state: ScannerState | None = None


@dataclass(frozen=True)
class Transition:
    """Outcome of one scanner step.

    Attributes:
        cursor: Cursor after the step.
        remainder: Text not consumed by the step.
        found: Decoded strings to record at the cursor's current line.
        warning: Recoverable problem detected by the step, if any.
        need_input: Stop scanning this line; `remainder` becomes carry-over.
    """

    cursor: ScanCursor
    remainder: str = ""
    found: tuple[str, ...] = ()
    warning: str | None = None
    need_input: bool = False


@dataclass(frozen=True)
class Location:
    """Source position of a catalog string."""

    source: str
    line_number: int

    def __str__(self) -> str:
        return f"{self.source}:{self.line_number}"


@dataclass(frozen=True)
class ScanWarning:
    """Recoverable syntax deviation reported while scanning."""

    source: str
    line_number: int
    message: str

    def __str__(self) -> str:
        return f"{self.source}:{self.line_number}: warning: {self.message}"
