"""Translation catalog accumulation and rendering."""

from __future__ import annotations

from collections.abc import Iterator

from .models import Location


def escape_msgid(text: str) -> str:
    """Escape text for a double-quoted catalog string.

    Only backslashes and double quotes are escaped.

    Examples:
        escape_msgid('Say "hi"')  # 'Say \\"hi\\"'
    """
    return text.replace("\\", "\\\\").replace('"', '\\"')


class Catalog:
    """Distinct strings and every location they were seen at.

    Entries keep first-seen order. Locations are never deduplicated, so the
    same string recorded twice on one line yields two location lines.

    Examples:
        catalog = Catalog()
        catalog.record("Yes", Location("seed.sql", 3))
        catalog.serialize()
    """

    def __init__(self) -> None:
        self._entries: dict[str, list[Location]] = {}

    def record(self, text: str, location: Location) -> None:
        self._entries.setdefault(text, []).append(location)

    def locations(self, text: str) -> list[Location]:
        return list(self._entries.get(text, ()))

    def __contains__(self, text: object) -> bool:
        return text in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def render(self) -> list[str]:
        """Render catalog blocks, one per distinct string.

        Returns:
            list[str]: Lines, each ending with a newline. Every block lists its
                ``#:`` location lines, then ``msgid`` and an empty ``msgstr``,
                then a blank line.
        """
        lines: list[str] = []
        for text, locations in self._entries.items():
            lines.extend(f"#: {location}\n" for location in locations)
            lines.append(f'msgid "{escape_msgid(text)}"\n')
            lines.append('msgstr ""\n')
            lines.append("\n")
        return lines

    def serialize(self) -> str:
        return "".join(self.render())
