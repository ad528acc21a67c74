"""
Pytest configuration and shared fixtures for unistore tests.
"""

import pytest

from unistore import create_action, create_reducer, create_store, on


incremented = create_action("counter/incremented")
decremented = create_action("counter/decremented")
incremented_by_amount = create_action("counter/incrementedByAmount", lambda amount: amount)


def _increment(state, action):
    return {**state, "value": state["value"] + 1}


def _decrement(state, action):
    return {**state, "value": state["value"] - 1}


def _increment_by_amount(state, action):
    return {**state, "value": state["value"] + action.payload}


counter_reducer = create_reducer(
    {"value": 0},
    on(incremented, _increment),
    on(decremented, _decrement),
    on(incremented_by_amount, _increment_by_amount),
)


@pytest.fixture
def reducer():
    """Counter reducer over {"value": int} dicts."""
    return counter_reducer


@pytest.fixture
def store(reducer):
    """A fresh counter store starting at {"value": 0}."""
    return create_store(reducer)


@pytest.fixture
def calls():
    """A list listeners can append to."""
    return []
