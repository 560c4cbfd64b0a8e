from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import re
from typing import Iterable

from .errors import ValidationError


ITEMS_NEEDED = 25

_ENUM_PREFIX_RE = re.compile(r"^\d+\.\s*")


@dataclass(frozen=True)
class ParseResult:
    items: list[str]
    ignored_lines: list[str]

    @property
    def center(self) -> str:
        return self.items[0]

    @property
    def pool(self) -> list[str]:
        return self.items[1:]


def _iter_nonempty_lines(text: str) -> Iterable[str]:
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        yield line


def parse_items_text(text: str) -> ParseResult:
    items: list[str] = []
    ignored: list[str] = []

    for line in _iter_nonempty_lines(text):
        label = _ENUM_PREFIX_RE.sub("", line, count=1).strip()
        if not label:
            # A bare enumeration marker such as "7."
            ignored.append(line)
            continue
        items.append(label)

    return ParseResult(items=items, ignored_lines=ignored)


def load_items(text: str) -> ParseResult:
    """Parse an item list and check it can fill a card.

    The first item becomes the center of every card; the remaining items form
    the pool. Raises ``ValidationError`` when fewer than 25 items are found.
    """
    result = parse_items_text(text)
    if len(result.items) < ITEMS_NEEDED:
        raise ValidationError(
            f"Need at least {ITEMS_NEEDED} items, but only found {len(result.items)} items"
        )
    return result


def load_items_file(path: Path) -> ParseResult:
    try:
        return load_items(path.read_text(encoding="utf-8"))
    except ValidationError as exc:
        raise ValidationError(f"{exc} in {path.name}") from exc
