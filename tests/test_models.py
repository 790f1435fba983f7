from extract_sql.models import Location, ScanCursor, ScannerState, ScanWarning, Statement


def test_scanner_state_members():
    assert [state.name for state in ScannerState] == [
        "IDLE",
        "SEEN_INSERT",
        "SEEN_INTO",
        "IN_COLUMN_LIST",
        "COLUMN_LIST_DONE",
        "SEEN_VALUES_OPEN",
        "IN_VALUE_TUPLE",
        "VALUE_TUPLE_DONE",
        "SEEN_COPY",
        "IN_COPY_COLUMN_LIST",
        "COPY_COLUMN_LIST_DONE",
        "SEEN_FROM_STDIN",
        "SEEN_CUSTOM_DELIMITER",
        "IN_DATA_BLOCK",
        "IN_BLOCK_COMMENT",
    ]


def test_scan_cursor_defaults():
    cursor = ScanCursor()

    assert cursor.state is ScannerState.IDLE
    assert cursor.line_number == 0
    assert cursor.pending == ""
    assert cursor.statement is None
    assert cursor.resume_state is None


def test_statement_defaults():
    statement = Statement(table="menu_node")

    assert statement.columns == {}
    assert statement.ordinal == 0
    assert statement.columns_open is False
    assert statement.delimiter == "\t"


def test_location_and_warning_formatting():
    assert str(Location("seed.sql", 12)) == "seed.sql:12"
    assert str(ScanWarning("seed.sql", 3, "INSERT not followed by INTO")) == (
        "seed.sql:3: warning: INSERT not followed by INTO"
    )
