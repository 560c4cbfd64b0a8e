import random
import warnings

import pytest

from trope_bingo.core.errors import UniquenessExhausted, ValidationError
from trope_bingo.core.generator import (
    CELLS_PER_CARD,
    Card,
    DuplicateAccepted,
    Unique,
    generate,
    generate_unique_set,
    iter_unique_cards,
    next_unique,
    shuffle,
    uniqueness_key,
)
from trope_bingo.core.parser import load_items


TROPES = [
    "Snowstorm", "Small town", "Meet-cute", "Big city job", "Hot cocoa",
    "Tree farm", "Widowed dad", "Ex returns", "Bakery", "Ugly sweater",
    "Sleigh ride", "Secret prince", "Inn in trouble", "Childhood friend", "Santa cameo",
    "Cookie contest", "Fake dating", "Ice skating", "Lost ornament", "Wise elder",
    "Snowball fight", "Town festival", "Workaholic", "Mistletoe", "Holiday parade",
    "Gingerbread house", "Carolers", "Matching pajamas", "Almost kiss", "First snow",
]


def _assert_well_formed(card: Card, center: str, pool: list[str]) -> None:
    assert len(card.grid) == 5
    assert all(len(row) == 5 for row in card.grid)
    assert card.grid[2][2] == center
    assert len(card.cells) == CELLS_PER_CARD
    assert len(set(card.cells)) == CELLS_PER_CARD
    assert set(card.cells) <= set(pool)


def test_example_list_keeps_snowstorm_in_center():
    parsed = load_items("\n".join(f"{i}. {t}" for i, t in enumerate(TROPES, start=1)))
    assert parsed.center == "Snowstorm"

    cards = generate_unique_set(parsed.pool, parsed.center, 20, seed=7)
    assert len(cards) == 20
    for card in cards:
        _assert_well_formed(card, "Snowstorm", TROPES[1:])


def test_shuffle_is_a_permutation_and_leaves_input_alone():
    items = [f"Item {i}" for i in range(40)]
    original = list(items)
    shuffled = shuffle(items, random.Random(3))
    assert items == original
    assert sorted(shuffled) == sorted(items)
    assert shuffled != items


def test_shuffle_is_deterministic_for_a_seed():
    items = [f"Item {i}" for i in range(40)]
    assert shuffle(items, random.Random(11)) == shuffle(items, random.Random(11))


def test_shuffle_handles_empty_and_single():
    rng = random.Random(0)
    assert shuffle([], rng) == []
    assert shuffle(["only"], rng) == ["only"]


def test_generate_takes_first_24_in_shuffle_order():
    pool = [f"Item {i}" for i in range(30)]
    card = generate(pool, "Center", random.Random(5))
    expected = shuffle(pool, random.Random(5))[:CELLS_PER_CARD]
    assert list(card.cells) == expected
    assert card.center == "Center"


def test_generate_requires_24_pool_items():
    with pytest.raises(ValidationError):
        generate([f"Item {i}" for i in range(23)], "Center", random.Random(1))


def test_uniqueness_key_ignores_order():
    pool = [f"Item {i}" for i in range(24)]
    a = generate(pool, "Center", random.Random(1))
    b = generate(pool, "Center", random.Random(2))
    assert a.grid != b.grid
    assert uniqueness_key(a) == uniqueness_key(b) == "\n".join(sorted(pool))
    assert a.card_id == b.card_id


def test_large_pool_gives_pairwise_distinct_keys():
    pool = [f"Item {i}" for i in range(100)]
    outcomes = list(iter_unique_cards(pool, "Center", 20, seed=2024))
    assert len(outcomes) == 20
    assert all(isinstance(o, Unique) for o in outcomes)
    keys = [o.card.key for o in outcomes]
    assert len(set(keys)) == 20
    for outcome in outcomes:
        _assert_well_formed(outcome.card, "Center", pool)


def test_same_seed_same_cards():
    pool = [f"Item {i}" for i in range(50)]
    assert generate_unique_set(pool, "C", 5, seed=9) == generate_unique_set(pool, "C", 5, seed=9)


def test_explicit_rng_is_used():
    pool = [f"Item {i}" for i in range(50)]
    first = generate_unique_set(pool, "C", 3, rng=random.Random(42))
    second = generate_unique_set(pool, "C", 3, rng=random.Random(42))
    assert first == second


def test_pool_of_exactly_24_accepts_duplicates_with_warning():
    pool = [f"Item {i}" for i in range(24)]
    with pytest.warns(UniquenessExhausted):
        outcomes = list(iter_unique_cards(pool, "Center", 3, seed=1, max_attempts_per_card=5))

    assert isinstance(outcomes[0], Unique)
    assert outcomes[0].attempts == 1
    assert [type(o) for o in outcomes[1:]] == [DuplicateAccepted, DuplicateAccepted]
    assert all(o.attempts == 5 for o in outcomes[1:])
    assert len({o.card.key for o in outcomes}) == 1
    for outcome in outcomes:
        _assert_well_formed(outcome.card, "Center", pool)


def test_next_unique_does_not_touch_used_keys():
    pool = [f"Item {i}" for i in range(24)]
    used = {"\n".join(sorted(pool))}
    with pytest.warns(UniquenessExhausted):
        outcome = next_unique(pool, "Center", used, random.Random(0), max_attempts=3)
    assert isinstance(outcome, DuplicateAccepted)
    assert outcome.attempts == 3
    assert used == {"\n".join(sorted(pool))}


def test_next_unique_retries_past_a_collision():
    pool = [f"Item {i}" for i in range(25)]
    first = generate(pool, "Center", random.Random(8))
    # Same seed reproduces `first` on the first draw, so at least one retry is needed.
    outcome = next_unique(pool, "Center", {first.key}, random.Random(8), max_attempts=1000)
    assert isinstance(outcome, Unique)
    assert outcome.attempts >= 2
    assert outcome.card.key != first.key


@pytest.mark.parametrize(
    "kwargs",
    [
        {"count": 0},
        {"count": -1},
        {"count": 1, "max_attempts_per_card": 0},
    ],
)
def test_iter_unique_cards_rejects_bad_arguments_eagerly(kwargs):
    pool = [f"Item {i}" for i in range(30)]
    with pytest.raises(ValidationError):
        iter_unique_cards(pool, "Center", seed=1, **kwargs)


def test_generate_unique_set_requires_24_pool_items():
    with pytest.raises(ValidationError):
        generate_unique_set([f"Item {i}" for i in range(10)], "Center", 1, seed=1)


def _card_with(cells: list[str]) -> Card:
    labels = iter(cells)
    return Card(grid=tuple(
        tuple("Center" if (row, col) == (2, 2) else next(labels) for col in range(5))
        for row in range(5)
    ))


def test_uniqueness_key_keeps_labels_with_pipes_apart():
    shared = [f"Item {i}" for i in range(22)]
    a = _card_with(["a|b", "c"] + shared)
    b = _card_with(["a", "b|c"] + shared)
    assert uniqueness_key(a) != uniqueness_key(b)


def test_each_duplicate_card_gets_its_own_warning():
    pool = [f"Item {i}" for i in range(24)]
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("default")
        outcomes = list(iter_unique_cards(pool, "Center", 4, seed=3, max_attempts_per_card=2))

    messages = [str(w.message) for w in caught if issubclass(w.category, UniquenessExhausted)]
    assert sum(isinstance(o, DuplicateAccepted) for o in outcomes) == 3
    assert [m.split(":")[0] for m in messages] == ["Card 02", "Card 03", "Card 04"]
