"""Shared level fixtures for the puzzle engine tests."""

import copy

import pytest

from src.puzzle import parse_level


def edge(a, b, words, next_moves=None):
    """Build one exploration tree edge in the level file format."""
    return {
        "move": {"from": {"row": a[0], "col": a[1]}, "to": {"row": b[0], "col": b[1]}},
        "wordsFormed": list(words),
        "nextMoves": next_moves or [],
    }


CATS_PAYLOAD = {
    "initialGrid": [
        ["A", "C", "T", "S"],
        ["X", "Y", "Z", "W"],
    ],
    "explorationTree": [
        edge((0, 0), (0, 1), ["CATS"]),
    ],
    "wordLength": 4,
    "maxDepthReached": 1,
}

# Two branches reach depth 3. The (2,1)-(2,2) branch is listed first, but the
# (0,0)-(0,1) branch sorts first by cell order.
BRANCHING_PAYLOAD = {
    "initialGrid": [
        ["A", "B", "C"],
        ["D", "E", "F"],
        ["G", "H", "I"],
    ],
    "explorationTree": [
        edge((2, 1), (2, 2), ["FIVE"], [
            edge((0, 1), (1, 1), ["NINE"], [
                edge((0, 0), (1, 0), ["EIGHT"]),
            ]),
        ]),
        edge((1, 1), (1, 2), ["FOUR"]),
        edge((0, 0), (0, 1), ["ONE"], [
            edge((1, 0), (1, 1), ["TWO"], [
                edge((2, 0), (2, 1), ["SIX"]),
            ]),
            edge((0, 2), (1, 2), ["TEN"]),
        ]),
    ],
    "wordLength": 3,
    "maxDepthReached": 3,
}


@pytest.fixture
def cats_payload():
    return copy.deepcopy(CATS_PAYLOAD)


@pytest.fixture
def branching_payload():
    return copy.deepcopy(BRANCHING_PAYLOAD)


@pytest.fixture
def cats_level(cats_payload):
    return parse_level(cats_payload)


@pytest.fixture
def branching_level(branching_payload):
    return parse_level(branching_payload)
