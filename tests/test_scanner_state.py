from extract_sql.models import ScanCursor, ScannerState, Statement
from extract_sql.scanner import decode_literal, step


def _statement(**overrides) -> Statement:
    values = {"table": "t", "columns": {1: "a", 2: "b"}, "columns_open": True}
    values.update(overrides)
    return Statement(**values)


def test_idle_recognizes_insert(registry):
    transition = step(ScanCursor(), "INSERT INTO t (a, b)\n", registry)

    assert transition.cursor.state is ScannerState.SEEN_INSERT
    assert transition.remainder == " INTO t (a, b)\n"
    assert transition.need_input is False


def test_idle_recognizes_copy_and_psql_copy(registry):
    assert step(ScanCursor(), "COPY t FROM stdin;\n", registry).cursor.state is (
        ScannerState.SEEN_COPY
    )
    assert step(ScanCursor(), "\\copy t FROM stdin\n", registry).cursor.state is (
        ScannerState.SEEN_COPY
    )


def test_idle_skips_quoted_literals_whole(registry):
    transition = step(ScanCursor(), "'INSERT INTO t' INSERT\n", registry)

    assert transition.cursor.state is ScannerState.IDLE
    assert transition.remainder == " INSERT\n"


def test_idle_blank_text_needs_input_without_carry(registry):
    transition = step(ScanCursor(), "   \n", registry)

    assert transition.need_input is True
    assert transition.remainder == ""


def test_step_does_not_mutate_cursor(registry):
    cursor = ScanCursor(state=ScannerState.SEEN_INSERT, line_number=3)

    step(cursor, " INTO t\n", registry)

    assert cursor.state is ScannerState.SEEN_INSERT
    assert cursor.line_number == 3


def test_seen_insert_without_into_warns_and_resets(registry):
    cursor = ScanCursor(state=ScannerState.SEEN_INSERT, line_number=7)

    transition = step(cursor, " VALUES (1, 'x');\n", registry)

    assert transition.warning == "INSERT not followed by INTO"
    assert transition.cursor.state is ScannerState.IDLE
    assert transition.cursor.statement is None
    assert transition.need_input is True
    assert transition.remainder == ""


def test_seen_into_registered_table_starts_column_list(registry):
    cursor = ScanCursor(state=ScannerState.SEEN_INTO)

    transition = step(cursor, " public.t (a, b)\n", registry)

    assert transition.cursor.state is ScannerState.IN_COLUMN_LIST
    assert transition.cursor.statement == Statement(table="t")
    assert transition.remainder == " (a, b)\n"


def test_seen_into_unregistered_table_is_silent(registry):
    cursor = ScanCursor(state=ScannerState.SEEN_INTO)

    transition = step(cursor, " other (a, b)\n", registry)

    assert transition.cursor.state is ScannerState.IDLE
    assert transition.warning is None
    assert transition.remainder == " (a, b)\n"


def test_seen_copy_unregistered_table_is_followed_without_recording(registry):
    cursor = ScanCursor(state=ScannerState.SEEN_COPY)

    transition = step(cursor, " Public.Other (a, b) FROM stdin;\n", registry)

    assert transition.cursor.state is ScannerState.IN_COPY_COLUMN_LIST
    assert transition.cursor.statement == Statement(table="public.other", registered=False)
    assert transition.warning is None


def test_unregistered_copy_resets_without_warning(registry):
    statement = Statement(table="other", registered=False)
    cursor = ScanCursor(state=ScannerState.IN_COPY_COLUMN_LIST, statement=statement)

    transition = step(cursor, " TO stdout;\n", registry)

    assert transition.cursor.state is ScannerState.IDLE
    assert transition.warning is None


def test_column_list_builds_ordinal_map(registry):
    cursor = ScanCursor(state=ScannerState.IN_COLUMN_LIST, statement=Statement(table="t"))

    opened = step(cursor, " (a, b)\n", registry)
    assert opened.cursor.statement.columns_open is True

    first = step(opened.cursor, opened.remainder, registry)
    assert first.cursor.state is ScannerState.IN_COLUMN_LIST
    assert first.cursor.statement.columns == {1: "a"}

    second = step(first.cursor, first.remainder, registry)
    assert second.cursor.state is ScannerState.COLUMN_LIST_DONE
    assert second.cursor.statement.columns == {1: "a", 2: "b"}
    assert second.cursor.statement.ordinal == 2
    assert second.remainder == "\n"


def test_column_list_carries_identifier_awaiting_punctuation(registry):
    cursor = ScanCursor(
        state=ScannerState.IN_COLUMN_LIST, statement=Statement(table="t", columns_open=True)
    )

    transition = step(cursor, " label\n", registry)

    assert transition.need_input is True
    assert transition.remainder == " label\n"
    assert transition.cursor.state is ScannerState.IN_COLUMN_LIST


def test_column_list_done_requires_values(registry):
    cursor = ScanCursor(state=ScannerState.COLUMN_LIST_DONE, statement=_statement(ordinal=2))

    transition = step(cursor, " SELECT 1, 'x';\n", registry)

    assert transition.cursor.state is ScannerState.IDLE
    assert "not followed by VALUES" in transition.warning


def test_value_tuple_records_translatable_position(registry):
    cursor = ScanCursor(state=ScannerState.IN_VALUE_TUPLE, statement=_statement(ordinal=1))

    transition = step(cursor, " 'It''s fine')\n", registry)

    assert transition.found == ("It's fine",)
    assert transition.cursor.state is ScannerState.VALUE_TUPLE_DONE
    assert transition.cursor.statement.ordinal == 2


def test_value_tuple_skips_untranslatable_position(registry):
    cursor = ScanCursor(state=ScannerState.IN_VALUE_TUPLE, statement=_statement(ordinal=0))

    transition = step(cursor, "'Hello', 'World')\n", registry)

    assert transition.found == ()
    assert transition.cursor.state is ScannerState.IN_VALUE_TUPLE
    assert transition.remainder == " 'World')\n"


def test_value_tuple_records_bare_tokens_verbatim(registry):
    cursor = ScanCursor(state=ScannerState.IN_VALUE_TUPLE, statement=_statement(ordinal=1))

    transition = step(cursor, " Plain )\n", registry)

    assert transition.found == ("Plain",)


def test_value_tuple_ignores_casts(registry):
    cursor = ScanCursor(state=ScannerState.IN_VALUE_TUPLE, statement=_statement(ordinal=1))

    transition = step(cursor, " 'Typed'::text)\n", registry)

    assert transition.found == ("Typed",)


def test_value_tuple_carries_unterminated_literal(registry):
    cursor = ScanCursor(state=ScannerState.IN_VALUE_TUPLE, statement=_statement(ordinal=1))

    transition = step(cursor, " 'First line\n", registry)

    assert transition.need_input is True
    assert transition.remainder == " 'First line\n"
    assert transition.found == ()


def test_value_tuple_rejects_function_calls(registry):
    cursor = ScanCursor(state=ScannerState.IN_VALUE_TUPLE, statement=_statement(ordinal=1))

    transition = step(cursor, " now())\n", registry)

    assert transition.cursor.state is ScannerState.IDLE
    assert transition.warning == "Unsupported value in t tuple"


def test_value_tuple_done_transitions(registry):
    cursor = ScanCursor(state=ScannerState.VALUE_TUPLE_DONE, statement=_statement(ordinal=2))

    more = step(cursor, ",\n", registry)
    assert more.cursor.state is ScannerState.SEEN_VALUES_OPEN

    done = step(cursor, ";\n", registry)
    assert done.cursor.state is ScannerState.IDLE
    assert done.cursor.statement is None

    trailing = step(cursor, " ON CONFLICT DO NOTHING;\n", registry)
    assert trailing.cursor.state is ScannerState.IDLE
    assert trailing.warning is None
    assert trailing.remainder == " ON CONFLICT DO NOTHING;\n"


def test_seen_values_open_resets_ordinal(registry):
    cursor = ScanCursor(state=ScannerState.SEEN_VALUES_OPEN, statement=_statement(ordinal=2))

    transition = step(cursor, " (3, 'x')\n", registry)

    assert transition.cursor.state is ScannerState.IN_VALUE_TUPLE
    assert transition.cursor.statement.ordinal == 0


def test_block_comment_remembers_and_restores_state(registry):
    cursor = ScanCursor(state=ScannerState.IN_COLUMN_LIST, statement=Statement(table="t"))

    opened = step(cursor, " /* note */ (a)\n", registry)
    assert opened.cursor.state is ScannerState.IN_BLOCK_COMMENT
    assert opened.cursor.resume_state is ScannerState.IN_COLUMN_LIST

    closed = step(opened.cursor, opened.remainder, registry)
    assert closed.cursor.state is ScannerState.IN_COLUMN_LIST
    assert closed.cursor.resume_state is None
    assert closed.cursor.statement == Statement(table="t")
    assert closed.remainder == " (a)\n"


def test_block_comment_without_close_consumes_line(registry):
    cursor = ScanCursor(state=ScannerState.IN_BLOCK_COMMENT, resume_state=ScannerState.IDLE)

    transition = step(cursor, "INSERT INTO t (a, b) VALUES (1, 'x');\n", registry)

    assert transition.need_input is True
    assert transition.remainder == ""
    assert transition.cursor.state is ScannerState.IN_BLOCK_COMMENT


def test_copy_from_stdin_uses_default_delimiter(registry):
    cursor = ScanCursor(state=ScannerState.COPY_COLUMN_LIST_DONE, statement=_statement())

    transition = step(cursor, " FROM stdin;\n", registry, delimiter=";")

    assert transition.cursor.state is ScannerState.SEEN_FROM_STDIN
    assert transition.cursor.statement.delimiter == ";"


def test_custom_delimiter_then_end_of_statement(registry):
    cursor = ScanCursor(state=ScannerState.SEEN_FROM_STDIN, statement=_statement())

    with_delimiter = step(cursor, " WITH DELIMITER '|';\n", registry)
    assert with_delimiter.cursor.state is ScannerState.SEEN_CUSTOM_DELIMITER
    assert with_delimiter.cursor.statement.delimiter == "|"

    data = step(with_delimiter.cursor, with_delimiter.remainder, registry)
    assert data.cursor.state is ScannerState.IN_DATA_BLOCK
    assert data.cursor.statement.ordinal == 1
    assert data.need_input is True
    assert data.remainder == ""


def test_from_stdin_at_end_of_line_enters_data_block(registry):
    cursor = ScanCursor(state=ScannerState.SEEN_FROM_STDIN, statement=_statement())

    transition = step(cursor, "\n", registry)

    assert transition.cursor.state is ScannerState.IN_DATA_BLOCK


def test_unsupported_copy_option_warns(registry):
    cursor = ScanCursor(state=ScannerState.SEEN_FROM_STDIN, statement=_statement())

    transition = step(cursor, " WITH OIDS;\n", registry)

    assert transition.cursor.state is ScannerState.IDLE
    assert transition.warning == "Unsupported COPY option for t"


def test_data_block_records_translatable_fields(registry):
    cursor = ScanCursor(
        state=ScannerState.IN_DATA_BLOCK, statement=_statement(ordinal=1, delimiter="|")
    )

    transition = step(cursor, "1|Translatable Text|3", registry)

    assert transition.found == ("Translatable Text",)
    assert transition.need_input is True
    assert transition.cursor.state is ScannerState.IN_DATA_BLOCK


def test_data_block_ignores_comment_markers(registry):
    cursor = ScanCursor(state=ScannerState.IN_DATA_BLOCK, statement=_statement(ordinal=1))

    transition = step(cursor, "1\t/* not -- a comment", registry)

    assert transition.found == ("/* not -- a comment",)
    assert transition.cursor.state is ScannerState.IN_DATA_BLOCK


def test_data_block_sentinel_returns_to_idle(registry):
    cursor = ScanCursor(state=ScannerState.IN_DATA_BLOCK, statement=_statement(ordinal=1))

    transition = step(cursor, "\\.", registry)

    assert transition.cursor.state is ScannerState.IDLE
    assert transition.cursor.statement is None
    assert transition.warning is None


def test_data_block_empty_line_resets_ordinal(registry):
    cursor = ScanCursor(state=ScannerState.IN_DATA_BLOCK, statement=_statement(ordinal=3))

    transition = step(cursor, "", registry)

    assert transition.found == ()
    assert transition.cursor.statement.ordinal == 1


def test_decode_literal_collapses_doubled_quotes_only():
    assert decode_literal("'It''s fine'") == "It's fine"
    assert decode_literal("'back\\slash'") == "back\\slash"
    assert decode_literal("''") == ""
