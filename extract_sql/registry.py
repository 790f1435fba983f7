"""Registry of columns whose literal values are user-facing text."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

# Tables shipped with translatable seed data
DEFAULT_TRANSLATABLES: dict[str, list[str]] = {
    "account_heading": ["description"],
    "batch_class": ["class"],
    "business_unit_class": ["label"],
    "contact_class": ["class"],
    "country": ["name"],
    "entity_class": ["class"],
    "language": ["description"],
    "location_class": ["class"],
    "menu_node": ["label"],
    "note_class": ["class"],
    "payment_type": ["label"],
}


def normalize_identifier(identifier: str) -> str:
    """Normalize a possibly quoted, possibly qualified SQL identifier.

    Unquoted parts are folded to lower case, quoted parts lose their quotes
    and have doubled quotes collapsed. Whitespace around a dot is dropped.

    Args:
        identifier: Identifier as written in SQL.

    Returns:
        str: Normalized identifier.

    Examples:
        normalize_identifier('Public."Menu_Node"')  # 'public.Menu_Node'
    """
    parts = []
    for part in _split_qualified(identifier):
        part = part.strip()
        if len(part) >= 2 and part[0] == '"' and part[-1] == '"':
            parts.append(part[1:-1].replace('""', '"'))
        else:
            parts.append(part.lower())
    return ".".join(parts)


def _split_qualified(identifier: str) -> Iterator[str]:
    start = 0
    quoted = False
    for position, character in enumerate(identifier):
        if character == '"':
            quoted = not quoted
        elif character == "." and not quoted:
            yield identifier[start:position]
            start = position + 1
    yield identifier[start:]


class TranslatableRegistry:
    """Read-only mapping of table name to translatable column names.

    Examples:
        registry = TranslatableRegistry({"menu_node": ["label"]})
        registry.is_translatable("public.menu_node", "label")  # True
    """

    def __init__(self, translatables: Mapping[str, Iterable[str]] | None = None):
        source = DEFAULT_TRANSLATABLES if translatables is None else translatables
        self._tables: dict[str, frozenset[str]] = {
            normalize_identifier(table): frozenset(normalize_identifier(c) for c in columns)
            for table, columns in source.items()
        }

    def resolve(self, table: str) -> str | None:
        """Return the registry key for a table name, or None when unregistered.

        A schema-qualified name matches a qualified key first, then the bare
        table name.
        """
        name = normalize_identifier(table)
        if name in self._tables:
            return name
        bare = name.rsplit(".", 1)[-1]
        if bare in self._tables:
            return bare
        return None

    def columns(self, table: str) -> frozenset[str]:
        key = self.resolve(table)
        if key is None:
            return frozenset()
        return self._tables[key]

    def is_translatable(self, table: str, column: str | None) -> bool:
        if column is None:
            return False
        return normalize_identifier(column) in self.columns(table)

    def __contains__(self, table: object) -> bool:
        return isinstance(table, str) and self.resolve(table) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._tables)

    def __len__(self) -> int:
        return len(self._tables)

    def __repr__(self) -> str:
        tables = {table: sorted(columns) for table, columns in self._tables.items()}
        return f"{type(self).__name__}({tables!r})"
