from __future__ import annotations

from dataclasses import dataclass
import hashlib
import logging
import random
from typing import AbstractSet, Iterator, Sequence, Union
import warnings

from .errors import UniquenessExhausted, ValidationError


log = logging.getLogger(__name__)

GRID_SIZE = 5
CENTER_CELL = (2, 2)
CELLS_PER_CARD = GRID_SIZE * GRID_SIZE - 1


@dataclass(frozen=True)
class Card:
    grid: tuple[tuple[str, ...], ...]

    @property
    def center(self) -> str:
        row, col = CENTER_CELL
        return self.grid[row][col]

    @property
    def cells(self) -> tuple[str, ...]:
        """Non-center labels in row-major order."""
        return tuple(
            label
            for row, labels in enumerate(self.grid)
            for col, label in enumerate(labels)
            if (row, col) != CENTER_CELL
        )

    @property
    def key(self) -> str:
        return uniqueness_key(self)

    @property
    def card_id(self) -> str:
        return hashlib.sha256(self.key.encode("utf-8")).hexdigest()[:10]


@dataclass(frozen=True)
class Unique:
    card: Card
    attempts: int = 1


@dataclass(frozen=True)
class DuplicateAccepted:
    card: Card
    attempts: int


Outcome = Union[Unique, DuplicateAccepted]


def uniqueness_key(card: Card) -> str:
    # Labels come from single input lines, so none contains a newline.
    return "\n".join(sorted(card.cells))


def shuffle(items: Sequence[str], rng: random.Random) -> list[str]:
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def _check_pool(pool: Sequence[str]) -> None:
    if len(pool) < CELLS_PER_CARD:
        raise ValidationError(
            f"Need at least {CELLS_PER_CARD} pool items besides the center, got {len(pool)}"
        )


def generate(pool: Sequence[str], center: str, rng: random.Random) -> Card:
    _check_pool(pool)
    selected = iter(shuffle(pool, rng)[:CELLS_PER_CARD])

    rows: list[tuple[str, ...]] = []
    for row in range(GRID_SIZE):
        rows.append(
            tuple(
                center if (row, col) == CENTER_CELL else next(selected)
                for col in range(GRID_SIZE)
            )
        )
    return Card(grid=tuple(rows))


def next_unique(
    pool: Sequence[str],
    center: str,
    used_keys: AbstractSet[str],
    rng: random.Random,
    max_attempts: int = 1000,
    number: int | None = None,
) -> Outcome:
    """Draw cards until one has an item set not in ``used_keys``.

    After ``max_attempts`` colliding draws the last candidate is accepted as
    ``DuplicateAccepted`` and a ``UniquenessExhausted`` warning is issued,
    naming the card by ``number`` when given.
    ``used_keys`` is never modified.
    """
    if max_attempts <= 0:
        raise ValidationError("max_attempts must be > 0")

    card = None
    for attempt in range(1, max_attempts + 1):
        card = generate(pool, center, rng)
        if card.key not in used_keys:
            return Unique(card=card, attempts=attempt)
        log.debug("Card %s collides with an earlier card (attempt %d)", card.card_id, attempt)

    prefix = f"Card {number:02d}: no" if number is not None else "No"
    warnings.warn(
        f"{prefix} unique card after {max_attempts} attempts; accepting a duplicate",
        UniquenessExhausted,
        stacklevel=2,
    )
    return DuplicateAccepted(card=card, attempts=max_attempts)


def iter_unique_cards(
    pool: Sequence[str],
    center: str,
    count: int,
    *,
    seed: int | None = None,
    rng: random.Random | None = None,
    max_attempts_per_card: int = 1000,
) -> Iterator[Outcome]:
    _check_pool(pool)
    if count <= 0:
        raise ValidationError("count must be > 0")
    if max_attempts_per_card <= 0:
        raise ValidationError("max_attempts_per_card must be > 0")

    rng = rng if rng is not None else random.Random(seed)
    return _iter_outcomes(pool, center, count, rng, max_attempts_per_card)


def _iter_outcomes(
    pool: Sequence[str],
    center: str,
    count: int,
    rng: random.Random,
    max_attempts: int,
) -> Iterator[Outcome]:
    used_keys: frozenset[str] = frozenset()
    for number in range(1, count + 1):
        outcome = next_unique(pool, center, used_keys, rng, max_attempts, number=number)
        used_keys = used_keys | {outcome.card.key}
        yield outcome


def generate_unique_set(
    pool: Sequence[str],
    center: str,
    count: int,
    *,
    seed: int | None = None,
    rng: random.Random | None = None,
    max_attempts_per_card: int = 1000,
) -> list[Card]:
    outcomes = iter_unique_cards(
        pool,
        center,
        count,
        seed=seed,
        rng=rng,
        max_attempts_per_card=max_attempts_per_card,
    )
    return [outcome.card for outcome in outcomes]
