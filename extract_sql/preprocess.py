"""Line pre-processing: comment stripping and carry-over."""

from __future__ import annotations

from dataclasses import replace

from .constants import BLOCK_COMMENT_CLOSE, BLOCK_COMMENT_OPEN, LINE_COMMENT
from .models import ScanCursor, ScannerState


def strip_line_comment(text: str, in_block_comment: bool = False) -> str:
    """Remove a trailing ``--`` comment from SQL text.

    The marker is ignored inside single-quoted literals, double-quoted
    identifiers, and block comments. A doubled quote inside a literal closes
    and immediately reopens it, which leaves the quoting state unchanged.

    Args:
        text: SQL text, usually a single line.
        in_block_comment: Whether `text` starts inside a ``/* ... */`` comment.

    Returns:
        str: `text` up to the first line-comment marker, or `text` unchanged.

    Examples:
        strip_line_comment("VALUES ('a--b'); -- note")  # "VALUES ('a--b'); "
        strip_line_comment("still comment -- */ x", in_block_comment=True)  # unchanged
    """
    quote: str | None = None
    in_block = in_block_comment
    position = 0

    while position < len(text):
        pair = text[position : position + 2]
        if in_block:
            if pair == BLOCK_COMMENT_CLOSE:
                in_block = False
                position += 2
                continue
        elif quote is not None:
            if text[position] == quote:
                quote = None
        elif pair == LINE_COMMENT:
            return text[:position]
        elif pair == BLOCK_COMMENT_OPEN:
            in_block = True
            position += 2
            continue
        elif text[position] in "'\"":
            quote = text[position]
        position += 1

    return text


def prepare_line(cursor: ScanCursor, raw_line: str) -> tuple[ScanCursor, str]:
    """Build the logical text buffer for the next raw input line.

    Advances the line counter, prefixes any carry-over text, and strips the
    trailing line comment. The buffer always ends with a single newline so
    that tokens split across lines stay separated. Lines inside a COPY data
    block are returned verbatim without their line terminator.

    Args:
        cursor: Cursor before the line is read.
        raw_line: Line as read from the input, with or without its terminator.

    Returns:
        tuple[ScanCursor, str]: Cursor with the new line number and an empty
            carry-over buffer, and the text to scan.

    Examples:
        cursor, text = prepare_line(ScanCursor(pending="INSERT\\n"), "INTO t -- x\\n")
        # text == "INSERT\\nINTO t \\n"
    """
    line = raw_line.rstrip("\r\n")
    next_cursor = replace(cursor, line_number=cursor.line_number + 1, pending="")

    if cursor.state is ScannerState.IN_DATA_BLOCK:
        return next_cursor, line

    in_block_comment = cursor.state is ScannerState.IN_BLOCK_COMMENT
    text = strip_line_comment(cursor.pending + line, in_block_comment)
    return next_cursor, text + "\n"
