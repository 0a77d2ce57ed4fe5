from __future__ import annotations

import pytest

from application.normalizer import normalize, split_free_text


def test_dedupes_case_insensitively_in_first_seen_order():
    assert normalize(["Tomato", "tomato ", "ONION", "tomato"]) == ["tomato", "onion"]


def test_drops_non_strings_and_blanks():
    assert normalize(["  ", "", None, 42, {"name": "x"}, " Rice "]) == ["rice"]


@pytest.mark.parametrize(
    ("entry", "kept"),
    [
        ("a", False),
        ("ab", True),
        ("x" * 29, True),
        ("x" * 30, False),
    ],
)
def test_length_bounds(entry, kept):
    assert (normalize([entry]) == [entry]) is kept


def test_custom_max_length_is_inclusive():
    assert normalize(["abcde", "abcdef"], max_length=5) == ["abcde"]


def test_truncates_to_max_items():
    raw = [f"item {i}" for i in range(30)]
    result = normalize(raw)
    assert len(result) == 20
    assert result[0] == "item 0"
    assert normalize(raw, max_items=15) == raw[:15]


def test_duplicates_do_not_count_towards_limit():
    raw = ["egg", "egg", "egg", "milk", "flour"]
    assert normalize(raw, max_items=3) == ["egg", "milk", "flour"]


def test_empty_input_gives_empty_list():
    assert normalize([]) == []
    assert normalize(["a", " "]) == []


@pytest.mark.parametrize(
    "raw",
    [
        ["Tomato", "tomato ", "ONION", "tomato"],
        ["  Red Onions ", "GARLIC", "a", "x" * 40, 3.5, "garlic"],
        [f"Thing {i}" for i in range(50)],
        [],
    ],
)
def test_idempotent(raw):
    once = normalize(raw)
    assert normalize(once) == once


def test_split_free_text():
    assert split_free_text("Tomatoes, red onion; rice\nGarlic ,, ") == [
        "Tomatoes", " red onion", " rice", "Garlic ",
    ]
    assert normalize(split_free_text("Tomatoes, red onion; rice\nGarlic")) == [
        "tomatoes", "red onion", "rice", "garlic",
    ]
    assert split_free_text("") == []
