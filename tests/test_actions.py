"""
Tests for Action records, action creators and dispatch-time normalization.
"""

import pytest
from immutables import Map
from pydantic import BaseModel

from unistore import Action, InvalidActionError, create_action, is_action, to_action


class AddTodo(BaseModel):
    type: str = "todos/added"
    text: str


class TestAction:
    def test_is_immutable(self):
        action = Action("counter/incremented", 1)

        with pytest.raises(AttributeError):
            action.type = "other"
        with pytest.raises(AttributeError):
            action.extra = True
        with pytest.raises(AttributeError):
            del action.payload

    def test_equality_and_hash(self):
        assert Action("a", 1) == Action("a", 1)
        assert Action("a", 1) != Action("a", 2)
        assert Action("a") != {"type": "a"}
        assert len({Action("a", 1), Action("a", 1)}) == 1

    @pytest.mark.parametrize("bad_type", ["", None, 3])
    def test_requires_non_empty_string_type(self, bad_type):
        with pytest.raises(InvalidActionError):
            Action(bad_type)


class TestCreateAction:
    def test_without_payload(self):
        incremented = create_action("counter/incremented")

        assert incremented() == Action("counter/incremented")
        assert incremented.type == "counter/incremented"

    def test_with_prepare_fn(self):
        added = create_action("counter/added", lambda amount, times=1: amount * times)

        assert added(2, times=3) == Action("counter/added", 6)

    def test_single_positional_argument_becomes_payload(self):
        renamed = create_action("user/renamed")

        assert renamed("ada").payload == "ada"

    def test_dict_payload_is_frozen(self):
        loaded = create_action("todos/loaded")

        action = loaded({"items": ["a", "b"]})

        assert isinstance(action.payload, Map)
        assert action.payload["items"] == ("a", "b")

    def test_keyword_arguments_become_map_payload(self):
        moved = create_action("point/moved")

        action = moved(x=1, y=2)

        assert action.payload == Map({"x": 1, "y": 2})

    def test_match(self):
        incremented = create_action("counter/incremented")

        assert incremented.match(incremented())
        assert not incremented.match(Action("counter/decremented"))
        assert not incremented.match({"type": "counter/incremented"})

    def test_rejects_empty_type(self):
        with pytest.raises(InvalidActionError):
            create_action("")


class TestToAction:
    def test_action_passes_through(self):
        action = Action("a")

        assert to_action(action) is action

    def test_mapping_extra_fields_become_payload(self):
        action = to_action({"type": "counter/added", "amount": 2})

        assert action.type == "counter/added"
        assert action.payload == Map({"amount": 2})

    def test_mapping_payload_key(self):
        action = to_action({"type": "counter/added", "payload": 5})

        assert action == Action("counter/added", 5)

    def test_mapping_without_extra_fields(self):
        assert to_action({"type": "counter/incremented"}) == Action("counter/incremented")

    def test_pydantic_model_with_type_field(self):
        model = AddTodo(text="write tests")

        action = to_action(model)

        assert action.type == "todos/added"
        assert action.payload is model

    @pytest.mark.parametrize(
        "value",
        [
            {"amount": 1},
            {"type": 3},
            {"type": ""},
            None,
            "counter/incremented",
            42,
            lambda: None,
        ],
    )
    def test_invalid_values(self, value):
        with pytest.raises(InvalidActionError):
            to_action(value)
        assert not is_action(value)

    def test_dispatching_invalid_action_raises(self, store):
        before = store.get_state()

        with pytest.raises(InvalidActionError):
            store.dispatch({"payload": 1})

        assert store.get_state() is before

    def test_dispatching_function_without_thunk_middleware_raises(self, store):
        with pytest.raises(InvalidActionError):
            store.dispatch(lambda dispatch, get_state: None)
