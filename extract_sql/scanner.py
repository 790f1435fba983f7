"""Statement scanner: recognizes INSERT and COPY statements line by line."""

from __future__ import annotations

import io
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from pathlib import Path

from .catalog import Catalog
from .constants import (
    BLOCK_COMMENT_CLOSE,
    BLOCK_COMMENT_OPEN_PATTERN,
    COLUMN_PATTERN,
    COPY_END_MARKER,
    COPY_PATTERN,
    COPY_STATEMENT_END_PATTERN,
    DEFAULT_DELIMITER,
    DEFAULT_ENCODING,
    DELIMITER_PATTERN,
    FROM_STDIN_PATTERN,
    IDLE_TOKEN_PATTERN,
    INSERT_PATTERN,
    INTO_PATTERN,
    OPEN_PAREN_PATTERN,
    PARTIAL_COLUMN_PATTERNS,
    PARTIAL_FROM_STDIN_PATTERN,
    PARTIAL_VALUE_PATTERNS,
    STATEMENT_END_PATTERN,
    STDIN_SOURCE,
    TABLE_PATTERN,
    TUPLE_SEPARATOR_PATTERN,
    VALUE_PATTERN,
    VALUES_PATTERN,
)
from .exceptions import ScanFileError
from .filesystem import safe_read
from .models import Location, ScanCursor, ScannerState, ScanWarning, Statement, Transition
from .preprocess import prepare_line
from .registry import TranslatableRegistry, normalize_identifier

WarningCallback = Callable[[ScanWarning], None]

_COLUMN_LIST_STATES = (ScannerState.IN_COLUMN_LIST, ScannerState.IN_COPY_COLUMN_LIST)
_COPY_OPTION_STATES = (ScannerState.SEEN_FROM_STDIN, ScannerState.SEEN_CUSTOM_DELIMITER)


def decode_literal(literal: str) -> str:
    """Decode a single-quoted SQL literal.

    Strips the surrounding quotes and collapses doubled single quotes. No
    other escape is interpreted, and malformed quoting is not rejected.

    Examples:
        decode_literal("'It''s fine'")  # "It's fine"
    """
    if len(literal) >= 2 and literal[0] == "'" and literal[-1] == "'":
        literal = literal[1:-1]
    return literal.replace("''", "'")


def _consume(text: str, match: re.Match[str]) -> str:
    return text[match.end() :]


def _need_input(cursor: ScanCursor, remainder: str = "") -> Transition:
    return Transition(cursor=cursor, remainder=remainder, need_input=True)


def _reset(cursor: ScanCursor, warning: str | None = None) -> Transition:
    """Return to IDLE, dropping the statement and the rest of the line.

    Statements on unregistered tables end without a warning.
    """
    if cursor.statement is not None and not cursor.statement.registered:
        warning = None
    idle = replace(
        cursor, state=ScannerState.IDLE, pending="", statement=None, resume_state=None
    )
    return Transition(cursor=idle, warning=warning, need_input=True)


def _is_blank(text: str) -> bool:
    return not text.strip()


def _is_partial(text: str, patterns: Iterable[re.Pattern[str]]) -> bool:
    return any(pattern.match(text) for pattern in patterns)


def _try_open_block_comment(cursor: ScanCursor, text: str) -> Transition | None:
    """Enter a block comment when one opens at the scan position."""
    if cursor.state in (ScannerState.IN_BLOCK_COMMENT, ScannerState.IN_DATA_BLOCK):
        return None

    match = BLOCK_COMMENT_OPEN_PATTERN.match(text)
    if not match:
        return None

    commented = replace(cursor, state=ScannerState.IN_BLOCK_COMMENT, resume_state=cursor.state)
    return Transition(cursor=commented, remainder=_consume(text, match))


def _in_block_comment(cursor: ScanCursor, text: str) -> Transition:
    end = text.find(BLOCK_COMMENT_CLOSE)
    if end == -1:
        return _need_input(cursor)

    restored = replace(
        cursor, state=cursor.resume_state or ScannerState.IDLE, resume_state=None
    )
    return Transition(cursor=restored, remainder=text[end + len(BLOCK_COMMENT_CLOSE) :])


def _idle(cursor: ScanCursor, text: str) -> Transition:
    match = INSERT_PATTERN.match(text)
    if match:
        return Transition(
            cursor=replace(cursor, state=ScannerState.SEEN_INSERT),
            remainder=_consume(text, match),
        )

    match = COPY_PATTERN.match(text)
    if match:
        return Transition(
            cursor=replace(cursor, state=ScannerState.SEEN_COPY),
            remainder=_consume(text, match),
        )

    match = IDLE_TOKEN_PATTERN.match(text)
    if not match:
        return _need_input(cursor)
    return Transition(cursor=cursor, remainder=_consume(text, match))


def _seen_insert(cursor: ScanCursor, text: str) -> Transition:
    match = INTO_PATTERN.match(text)
    if match:
        return Transition(
            cursor=replace(cursor, state=ScannerState.SEEN_INTO),
            remainder=_consume(text, match),
        )
    return _reset(cursor, "INSERT not followed by INTO")


def _seen_table(
    cursor: ScanCursor,
    text: str,
    registry: TranslatableRegistry,
    next_state: ScannerState,
    keyword: str,
    skip_unregistered: bool = False,
) -> Transition:
    """Read the target table and gate on the registry.

    An unregistered table normally ends the statement. With
    `skip_unregistered`, the statement is followed to its end without
    recording anything, so a COPY data block is not mistaken for SQL.
    """
    match = TABLE_PATTERN.match(text)
    if not match:
        return _reset(cursor, f"{keyword} not followed by a table name")

    table = registry.resolve(match.group("table"))
    if table is None and skip_unregistered:
        name = normalize_identifier(match.group("table"))
        statement = Statement(table=name, registered=False)
        return Transition(
            cursor=replace(cursor, state=next_state, statement=statement),
            remainder=_consume(text, match),
        )
    if table is None:
        # Unregistered tables are expected and not worth a warning.
        idle = replace(cursor, state=ScannerState.IDLE, statement=None)
        return Transition(cursor=idle, remainder=_consume(text, match))

    return Transition(
        cursor=replace(cursor, state=next_state, statement=Statement(table=table)),
        remainder=_consume(text, match),
    )


def _in_column_list(cursor: ScanCursor, text: str, delimiter: str) -> Transition:
    statement = cursor.statement
    copying = cursor.state is ScannerState.IN_COPY_COLUMN_LIST

    if not statement.columns_open:
        match = OPEN_PAREN_PATTERN.match(text)
        if match:
            opened = replace(statement, columns_open=True)
            return Transition(
                cursor=replace(cursor, statement=opened), remainder=_consume(text, match)
            )
        if copying:
            return _copy_from_stdin(cursor, text, delimiter)
        return _reset(cursor, f"Table {statement.table} not followed by a column list and VALUES")

    match = COLUMN_PATTERN.match(text)
    if not match:
        if _is_partial(text, PARTIAL_COLUMN_PATTERNS):
            return _need_input(cursor, text)
        return _reset(cursor, f"Malformed column list for {statement.table}")

    ordinal = statement.ordinal + 1
    columns = {**statement.columns, ordinal: match.group("column")}
    statement = replace(statement, columns=columns, ordinal=ordinal)

    state = cursor.state
    if match.group("end") == ")":
        if copying:
            state = ScannerState.COPY_COLUMN_LIST_DONE
        else:
            state = ScannerState.COLUMN_LIST_DONE
    return Transition(
        cursor=replace(cursor, state=state, statement=statement),
        remainder=_consume(text, match),
    )


def _column_list_done(cursor: ScanCursor, text: str) -> Transition:
    match = VALUES_PATTERN.match(text)
    if match:
        return Transition(
            cursor=replace(cursor, state=ScannerState.SEEN_VALUES_OPEN),
            remainder=_consume(text, match),
        )
    return _reset(cursor, f"Column list for {cursor.statement.table} not followed by VALUES")


def _seen_values_open(cursor: ScanCursor, text: str) -> Transition:
    match = OPEN_PAREN_PATTERN.match(text)
    if match:
        statement = replace(cursor.statement, ordinal=0)
        return Transition(
            cursor=replace(cursor, state=ScannerState.IN_VALUE_TUPLE, statement=statement),
            remainder=_consume(text, match),
        )
    return _reset(cursor, "VALUES not followed by a value tuple")


def _in_value_tuple(cursor: ScanCursor, text: str, registry: TranslatableRegistry) -> Transition:
    statement = cursor.statement
    match = VALUE_PATTERN.match(text)
    if not match:
        if _is_partial(text, PARTIAL_VALUE_PATTERNS):
            return _need_input(cursor, text)
        return _reset(cursor, f"Unsupported value in {statement.table} tuple")

    ordinal = statement.ordinal + 1
    found: tuple[str, ...] = ()
    if registry.is_translatable(statement.table, statement.columns.get(ordinal)):
        quoted = match.group("quoted")
        found = (decode_literal(quoted) if quoted is not None else match.group("bare"),)

    state = cursor.state
    if match.group("end") == ")":
        state = ScannerState.VALUE_TUPLE_DONE
    return Transition(
        cursor=replace(cursor, state=state, statement=replace(statement, ordinal=ordinal)),
        remainder=_consume(text, match),
        found=found,
    )


def _value_tuple_done(cursor: ScanCursor, text: str) -> Transition:
    match = TUPLE_SEPARATOR_PATTERN.match(text)
    if match:
        return Transition(
            cursor=replace(cursor, state=ScannerState.SEEN_VALUES_OPEN),
            remainder=_consume(text, match),
        )

    # Either ";" or a trailing clause such as ON CONFLICT; IDLE skips the latter.
    idle = replace(cursor, state=ScannerState.IDLE, statement=None)
    match = STATEMENT_END_PATTERN.match(text)
    if match:
        return Transition(cursor=idle, remainder=_consume(text, match))
    return Transition(cursor=idle, remainder=text)


def _copy_from_stdin(cursor: ScanCursor, text: str, delimiter: str) -> Transition:
    match = FROM_STDIN_PATTERN.match(text)
    if match:
        statement = replace(cursor.statement, delimiter=delimiter)
        return Transition(
            cursor=replace(cursor, state=ScannerState.SEEN_FROM_STDIN, statement=statement),
            remainder=_consume(text, match),
        )
    if PARTIAL_FROM_STDIN_PATTERN.match(text):
        return _need_input(cursor, text)
    return _reset(cursor, f"COPY {cursor.statement.table} not followed by FROM STDIN")


def _copy_options(cursor: ScanCursor, text: str) -> Transition:
    if cursor.state is ScannerState.SEEN_FROM_STDIN:
        match = DELIMITER_PATTERN.match(text)
        if match:
            delimiter = decode_literal(f"'{match.group('delimiter')}'")
            statement = replace(cursor.statement, delimiter=delimiter)
            return Transition(
                cursor=replace(
                    cursor, state=ScannerState.SEEN_CUSTOM_DELIMITER, statement=statement
                ),
                remainder=_consume(text, match),
            )

    if COPY_STATEMENT_END_PATTERN.match(text):
        # Rows start on the next line; nothing after FROM STDIN is data.
        statement = replace(cursor.statement, ordinal=1)
        return _need_input(replace(cursor, state=ScannerState.IN_DATA_BLOCK, statement=statement))

    return _reset(cursor, f"Unsupported COPY option for {cursor.statement.table}")


def _in_data_block(cursor: ScanCursor, line: str, registry: TranslatableRegistry) -> Transition:
    statement = cursor.statement
    if line == COPY_END_MARKER:
        return _reset(cursor)

    if not line:
        return _need_input(replace(cursor, statement=replace(statement, ordinal=1)))

    found = []
    for ordinal, value in enumerate(line.split(statement.delimiter), start=1):
        if registry.is_translatable(statement.table, statement.columns.get(ordinal)):
            found.append(value)

    return Transition(
        cursor=replace(cursor, statement=replace(statement, ordinal=1)),
        found=tuple(found),
        need_input=True,
    )


def step(
    cursor: ScanCursor,
    text: str,
    registry: TranslatableRegistry,
    delimiter: str = DEFAULT_DELIMITER,
) -> Transition:
    """Advance the scanner over the next token of `text`.

    Pure function: the cursor is never mutated, and anything the step finds
    or complains about is returned in the `Transition`.

    Args:
        cursor: Cursor before the step.
        text: Unconsumed text of the current line (after pre-processing).
        registry: Translatable-column registry.
        delimiter: COPY field delimiter used when a block sets none.

    Returns:
        Transition: New cursor, unconsumed remainder, strings found, optional
            warning, and whether more input is needed before continuing.

    Examples:
        registry = TranslatableRegistry({"t": ["b"]})
        step(ScanCursor(), "INSERT INTO t", registry).cursor.state  # SEEN_INSERT
    """
    state = cursor.state

    if state is ScannerState.IN_DATA_BLOCK:
        return _in_data_block(cursor, text, registry)
    if state is ScannerState.IN_BLOCK_COMMENT:
        return _in_block_comment(cursor, text)

    if _is_blank(text):
        if state in _COPY_OPTION_STATES:
            return _copy_options(cursor, text)
        # Nothing worth carrying over.
        return _need_input(cursor)

    comment = _try_open_block_comment(cursor, text)
    if comment is not None:
        return comment

    if state is ScannerState.IDLE:
        return _idle(cursor, text)
    if state is ScannerState.SEEN_INSERT:
        return _seen_insert(cursor, text)
    if state is ScannerState.SEEN_INTO:
        return _seen_table(cursor, text, registry, ScannerState.IN_COLUMN_LIST, "INSERT INTO")
    if state in _COLUMN_LIST_STATES:
        return _in_column_list(cursor, text, delimiter)
    if state is ScannerState.COLUMN_LIST_DONE:
        return _column_list_done(cursor, text)
    if state is ScannerState.SEEN_VALUES_OPEN:
        return _seen_values_open(cursor, text)
    if state is ScannerState.IN_VALUE_TUPLE:
        return _in_value_tuple(cursor, text, registry)
    if state is ScannerState.VALUE_TUPLE_DONE:
        return _value_tuple_done(cursor, text)
    if state is ScannerState.SEEN_COPY:
        return _seen_table(
            cursor, text, registry, ScannerState.IN_COPY_COLUMN_LIST, "COPY", skip_unregistered=True
        )
    if state is ScannerState.COPY_COLUMN_LIST_DONE:
        return _copy_from_stdin(cursor, text, delimiter)
    if state in _COPY_OPTION_STATES:
        return _copy_options(cursor, text)

    raise AssertionError(f"Unhandled scanner state: {state}")


def scan_lines(
    lines: Iterable[str],
    registry: TranslatableRegistry,
    catalog: Catalog,
    source: str = STDIN_SOURCE,
    warn: WarningCallback | None = None,
    delimiter: str = DEFAULT_DELIMITER,
) -> list[ScanWarning]:
    """Scan raw SQL lines and record translatable strings in `catalog`.

    One cursor is used for the whole input. Scanning never stops because of a
    malformed statement; each problem is reported as a `ScanWarning`. When the
    input ends mid-statement, whatever was recorded so far stays recorded.

    Args:
        lines: Raw input lines, with or without line terminators.
        registry: Translatable-column registry.
        catalog: Catalog receiving the strings found.
        source: Identifier used in locations and warnings.
        warn: Optional callback invoked for every warning as it happens.
        delimiter: Default COPY field delimiter.

    Returns:
        list[ScanWarning]: Warnings in input order.

    Examples:
        catalog = Catalog()
        scan_lines(open("seed.sql"), TranslatableRegistry(), catalog, "seed.sql")
    """
    warnings: list[ScanWarning] = []
    cursor = ScanCursor()

    for raw_line in lines:
        cursor, text = prepare_line(cursor, raw_line)

        while True:
            transition = step(cursor, text, registry, delimiter)
            cursor = transition.cursor

            if transition.found:
                location = Location(source, cursor.line_number)
                for value in transition.found:
                    catalog.record(value, location)

            if transition.warning is not None:
                warning = ScanWarning(source, cursor.line_number, transition.warning)
                warnings.append(warning)
                if warn is not None:
                    warn(warning)

            if transition.need_input:
                cursor = replace(cursor, pending=transition.remainder)
                break
            text = transition.remainder

    return warnings


@dataclass
class ScanResult:
    """Catalog and warnings produced by scanning one input."""

    catalog: Catalog
    warnings: list[ScanWarning]


def scan_text(
    content: str,
    registry: TranslatableRegistry | None = None,
    source: str = "<string>",
    delimiter: str = DEFAULT_DELIMITER,
) -> ScanResult:
    """Scan SQL held in a string.

    Args:
        content: SQL text.
        registry: Translatable-column registry; the built-in one when omitted.
        source: Identifier used in locations and warnings.
        delimiter: Default COPY field delimiter.

    Returns:
        ScanResult: A fresh catalog and the warnings raised.

    Examples:
        result = scan_text("INSERT INTO menu_node (id, label) VALUES (1, 'AR');")
        result.catalog.locations("AR")  # [Location("<string>", 1)]
    """
    catalog = Catalog()
    warnings = scan_lines(
        io.StringIO(content),
        registry if registry is not None else TranslatableRegistry(),
        catalog,
        source,
        delimiter=delimiter,
    )
    return ScanResult(catalog=catalog, warnings=warnings)


def scan_file(
    filepath: Path,
    registry: TranslatableRegistry,
    catalog: Catalog,
    warn: WarningCallback | None = None,
    source: str | None = None,
    encoding: str = DEFAULT_ENCODING,
    delimiter: str = DEFAULT_DELIMITER,
) -> list[ScanWarning]:
    """Scan a SQL file into `catalog`.

    Args:
        filepath: File to read.
        registry: Translatable-column registry.
        catalog: Catalog receiving the strings found.
        warn: Optional callback invoked for every warning.
        source: Identifier used in locations; defaults to `filepath` as given.
        encoding: Encoding of the file.
        delimiter: Default COPY field delimiter.

    Returns:
        list[ScanWarning]: Warnings in input order.

    Raises:
        ScanFileError: If the file cannot be opened, read, or decoded.
    """
    source = str(filepath) if source is None else source
    try:
        with safe_read(filepath, encoding) as stream:
            return scan_lines(stream, registry, catalog, source, warn, delimiter)
    except UnicodeDecodeError as error:
        raise ScanFileError(source, f"invalid {encoding} sequence: {error}") from error
    except OSError as error:
        raise ScanFileError(source, str(error)) from error
