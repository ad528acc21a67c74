"""
Tests for reducer helpers.
"""

import pytest
from immutables import Map

from unistore import Action, create_reducer, combine_reducers, create_store, init_store, on
from tests.conftest import counter_reducer, incremented


class TestCreateReducer:
    def test_none_state_yields_initial_state(self):
        assert counter_reducer(None, init_store()) == {"value": 0}
        assert counter_reducer(None, init_store()) is counter_reducer.initial_state

    def test_unknown_action_returns_same_object(self):
        state = {"value": 3}

        assert counter_reducer(state, Action("other")) is state

    def test_handlers_exposed(self):
        assert set(counter_reducer.handlers) == {
            "counter/incremented",
            "counter/decremented",
            "counter/incrementedByAmount",
        }

    def test_tuple_handlers(self):
        reducer = create_reducer(
            0,
            (incremented, lambda state, action: state + 1),
            ("counter/reset", lambda state, action: 0),
        )

        assert reducer(5, incremented()) == 6
        assert reducer(5, Action("counter/reset")) == 0

    def test_rejects_unknown_handler_shape(self):
        with pytest.raises(TypeError):
            create_reducer(0, "not a handler")

    def test_on_accepts_string_type(self):
        handler = lambda state, action: state

        assert on("todos/added", handler) == {"todos/added": handler}


class TestCombineReducers:
    @pytest.fixture
    def root_reducer(self):
        todos = create_reducer(
            (),
            on("todos/added", lambda state, action: state + (action.payload,)),
        )
        return combine_reducers({"counter": counter_reducer, "todos": todos})

    def test_initial_state(self, root_reducer):
        state = root_reducer(None, init_store())

        assert isinstance(state, Map)
        assert state["counter"] == {"value": 0}
        assert state["todos"] == ()

    def test_unchanged_slices_keep_root_identity(self, root_reducer):
        state = root_reducer(None, init_store())

        assert root_reducer(state, Action("unknown")) is state

    def test_changed_slice_produces_new_root(self, root_reducer):
        state = root_reducer(None, init_store())

        next_state = root_reducer(state, Action("todos/added", "write docs"))

        assert next_state is not state
        assert next_state["todos"] == ("write docs",)
        assert next_state["counter"] is state["counter"]

    def test_with_store(self, root_reducer):
        store = create_store(root_reducer)
        before = store.get_state()

        store.dispatch(incremented())
        store.dispatch(Action("noop"))

        assert store.get_state()["counter"] == {"value": 1}
        assert store.get_state() is not before
        assert root_reducer.reducers.keys() == {"counter", "todos"}
