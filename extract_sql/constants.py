"""Constants used across the extract-sql package."""

from __future__ import annotations

import re

# Comment markers
LINE_COMMENT = "--"
BLOCK_COMMENT_OPEN = "/*"
BLOCK_COMMENT_CLOSE = "*/"

# COPY data blocks
DEFAULT_DELIMITER = "\t"
COPY_END_MARKER = "\\."

DEFAULT_ENCODING = "UTF-8"
DEFAULT_MAX_FILE_SIZE = 50 * 1024 * 1024
STDIN_SOURCE = "<stdin>"

# Identifier and literal fragments
_IDENT = r'(?:"(?:[^"]|"")+"|[A-Za-z_][\w$]*)'
_QUOTED = r"'(?:[^']|'')*'"
_BARE_CHAR = r"(?!/\*)[^,()']"
_BARE = rf"(?!\s){_BARE_CHAR}(?:{_BARE_CHAR}*(?!\s){_BARE_CHAR})?"
_CAST = r"(?:\s*::\s*[A-Za-z_][\w ]*?(?:\[\])?)?"
# Block comments between a value and its terminator
_TRAILING = r"\s*(?:/\*[\s\S]*?\*/\s*)*"

# Statement tokens; every pattern is anchored at the scan position
BLOCK_COMMENT_OPEN_PATTERN = re.compile(r"\s*/\*")
INSERT_PATTERN = re.compile(r"\s*INSERT\b", re.IGNORECASE)
COPY_PATTERN = re.compile(r"\s*\\?COPY\b", re.IGNORECASE)
INTO_PATTERN = re.compile(r"\s*INTO\b", re.IGNORECASE)
TABLE_PATTERN = re.compile(rf"\s*(?P<table>{_IDENT}(?:\s*\.\s*{_IDENT})?)")
OPEN_PAREN_PATTERN = re.compile(r"\s*\(")
COLUMN_PATTERN = re.compile(rf"\s*(?P<column>{_IDENT})\s*(?P<end>[,)])")
VALUES_PATTERN = re.compile(r"\s*VALUES\b", re.IGNORECASE)
VALUE_PATTERN = re.compile(
    rf"\s*(?:(?P<quoted>{_QUOTED}){_CAST}|(?P<bare>{_BARE})){_TRAILING}(?P<end>[,)])"
)
TUPLE_SEPARATOR_PATTERN = re.compile(r"\s*,")
STATEMENT_END_PATTERN = re.compile(r"\s*;")
FROM_STDIN_PATTERN = re.compile(r"\s*FROM\s+STDIN\b", re.IGNORECASE)
DELIMITER_PATTERN = re.compile(
    r"\s*(?:WITH\s+)?(?:\(\s*)?DELIMITER\s+(?:AS\s+)?'(?P<delimiter>(?:[^']|'')+)'\s*\)?",
    re.IGNORECASE,
)
COPY_STATEMENT_END_PATTERN = re.compile(r"\s*;?\s*$")

# Whatever IDLE skips over: a whole quoted literal or identifier, a word, or
# a single character.
IDLE_TOKEN_PATTERN = re.compile(
    rf"\s*(?:{_QUOTED}|\"(?:[^\"]|\"\")*\"|[^\s'\";/]+|.)", re.DOTALL
)

# Prefixes of tokens that may be completed on the next line
PARTIAL_COLUMN_PATTERNS = (
    re.compile(r'\s*"(?:[^"]|"")*$'),
    re.compile(rf"\s*{_IDENT}\s*$"),
)
PARTIAL_VALUE_PATTERNS = (
    re.compile(r"\s*'(?:[^']|'')*$"),
    re.compile(rf"\s*{_QUOTED}{_CAST}\s*$"),
    re.compile(rf"\s*(?:{_QUOTED}{_CAST}|{_BARE}){_TRAILING}/\*(?:(?!\*/)[\s\S])*$"),
    re.compile(r"\s*[^,()'\s][^,()']*$"),
)
PARTIAL_FROM_STDIN_PATTERN = re.compile(r"\s*FROM\s*$", re.IGNORECASE)
