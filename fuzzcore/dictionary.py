"""Dictionary words and the bounded dictionary that mutations draw from."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field


def _format_ascii(data: bytes) -> str:
    """Render bytes as printable text, escaping quotes, backslashes and the rest."""
    out = []
    for byte in data:
        if byte == 0x5C:
            out.append("\\\\")
        elif byte == 0x22:
            out.append('\\"')
        elif 32 <= byte < 127:
            out.append(chr(byte))
        else:
            out.append(f"\\x{byte:02x}")
    return "".join(out)


class Word:
    """An immutable byte string of at most ``MAX_SIZE`` bytes."""

    MAX_SIZE = 64

    __slots__ = ("_data",)

    def __init__(self, data: bytes = b"") -> None:
        data = bytes(data)
        if len(data) > self.MAX_SIZE:
            raise ValueError(
                f"word of {len(data)} bytes exceeds the maximum of {self.MAX_SIZE}"
            )
        self._data = data

    @property
    def data(self) -> bytes:
        """The bytes of the word."""
        return self._data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Word):
            return NotImplemented
        return self._data == other._data

    def __hash__(self) -> int:
        return hash(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Word({self._data!r})"


@dataclass
class DictionaryEntry:
    """A dictionary word with an optional position hint and usage statistics."""

    word: Word = field(default_factory=Word)
    position_hint: int | None = None
    use_count: int = 0
    success_count: int = 0

    def has_position_hint(self) -> bool:
        """Return whether the entry suggests a position to insert at."""
        return self.position_hint is not None

    def get_position_hint(self) -> int:
        """Return the position hint; raise if the entry has none."""
        if self.position_hint is None:
            raise ValueError("dictionary entry has no position hint")
        return self.position_hint

    def inc_use_count(self) -> None:
        """Count one more use of this entry."""
        self.use_count += 1

    def inc_success_count(self) -> None:
        """Count one more successful use of this entry."""
        self.success_count += 1

    def format(self, after: str = "\n") -> str:
        """Return the entry as text, with its hint, followed by ``after``."""
        text = _format_ascii(self.word.data)
        if self.has_position_hint():
            text += f"@{self.position_hint}"
        return text + after


class Dictionary:
    """An ordered collection of at most ``MAX_DICT_SIZE`` entries."""

    MAX_DICT_SIZE = 1 << 14

    def __init__(self) -> None:
        self._entries: list[DictionaryEntry] = []

    def contains_word(self, word: Word) -> bool:
        """Return whether some entry holds ``word``."""
        return any(entry.word == word for entry in self._entries)

    def __iter__(self) -> Iterator[DictionaryEntry]:
        return iter(self._entries)

    def __getitem__(self, idx: int) -> DictionaryEntry:
        if not 0 <= idx < len(self._entries):
            raise IndexError(f"dictionary index {idx} out of range")
        return self._entries[idx]

    def append(self, entry: DictionaryEntry) -> None:
        """Add ``entry``; it is silently dropped once the dictionary is full."""
        if len(self._entries) < self.MAX_DICT_SIZE:
            self._entries.append(entry)

    def clear(self) -> None:
        """Remove every entry."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)