"""Tests for patch / merge_into."""

import pytest

from depot import ObservableDict, reaction
from depot.merge import merge_into, patch


class TestMergeInto:
    def test_updates_nested_key_and_keeps_sibling(self):
        target = ObservableDict({"a": {"b": 0, "c": 5}})
        merge_into(target, {"a": {"b": 1}})
        assert target["a"]["b"] == 1
        assert target["a"]["c"] == 5

    def test_ignores_keys_only_in_partial(self):
        target = ObservableDict({"a": 1})
        merge_into(target, {"a": 2, "new": 3})
        assert target["a"] == 2
        assert "new" not in target

    def test_keeps_nested_object_identity(self):
        target = ObservableDict({"a": {"b": 0}})
        nested = target["a"]
        merge_into(target, {"a": {"b": 1}})
        assert target["a"] is nested

    def test_type_mismatch_overwrites(self):
        target = ObservableDict({"a": {"b": 0}, "n": 1})
        merge_into(target, {"a": 7, "n": {"x": 1}})
        assert target["a"] == 7
        assert target["n"]["x"] == 1

    def test_none_overwrites(self):
        target = ObservableDict({"a": {"b": 0}})
        merge_into(target, {"a": None})
        assert target["a"] is None

    def test_lists_are_replaced(self):
        target = ObservableDict({"items": [1, 2, 3]})
        merge_into(target, {"items": [4]})
        assert list(target["items"]) == [4]

    def test_plain_dict_target(self):
        target = {"a": {"b": 0, "c": 1}}
        merge_into(target, {"a": {"b": 2}})
        assert target == {"a": {"b": 2, "c": 1}}


class TestPatch:
    def test_mapping_form_notifies_once(self):
        target = ObservableDict({"a": {"b": 0}, "x": 0})
        seen = []
        reaction(lambda: target, lambda t: seen.append(1), deep=True)
        patch(target, {"a": {"b": 1}, "x": 1})
        assert seen == [1]

    def test_mutator_form_notifies_once(self):
        target = ObservableDict({"a": {"b": 0}, "x": 0})
        seen = []
        reaction(lambda: target, lambda t: seen.append(1), deep=True)

        def mutate(state):
            state["a"]["b"] = 1
            state["x"] = 1
            state["added"] = True

        patch(target, mutate)
        assert seen == [1]
        assert target["added"] is True

    def test_rejects_other_values(self):
        with pytest.raises(TypeError):
            patch(ObservableDict(), 42)
