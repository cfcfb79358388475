"""Unit tests for JSON structure inference."""

import pytest

from pgassist.core.structure import (
    ArrayNode,
    EmptyArrayNode,
    NullNode,
    ObjectNode,
    PrimitiveNode,
    TruncatedNode,
    decode_json_value,
    infer_structure,
)


def test_nested_object_with_array_of_objects():
    node = infer_structure({"a": [{"b": 1}]}, 5)

    assert isinstance(node, ObjectNode)
    array = node.fields["a"]
    assert isinstance(array, ArrayNode)
    assert isinstance(array.element, ObjectNode)
    assert array.element.fields["b"] == PrimitiveNode("number")
    assert node.describe() == {"a": [{"b": "number"}]}


@pytest.mark.parametrize(
    "value,type_name",
    [("x", "string"), (3, "number"), (2.5, "number"), (True, "boolean"), (False, "boolean")],
)
def test_primitives(value, type_name):
    assert infer_structure(value) == PrimitiveNode(type_name)


def test_null_and_empty_array():
    assert infer_structure(None) == NullNode()
    assert infer_structure([]) == EmptyArrayNode()
    assert infer_structure({"tags": []}).describe() == {"tags": []}


def test_only_first_array_element_is_sampled():
    node = infer_structure([1, "two", {"three": 3}])
    assert node == ArrayNode(PrimitiveNode("number"))


def test_key_order_is_preserved():
    node = infer_structure({"z": 1, "a": 2, "m": 3})
    assert list(node.fields) == ["z", "a", "m"]


@pytest.mark.parametrize("value", [{"a": 1}, [1, 2], {"nested": {"deep": True}}])
def test_zero_depth_truncates_immediately(value):
    assert infer_structure(value, 0) == TruncatedNode()


def test_depth_bound_truncates_deep_values():
    value = {"l1": {"l2": {"l3": {"l4": 1}}}}
    assert infer_structure(value, 2).describe() == {"l1": {"l2": "..."}}


def test_decode_json_value():
    assert decode_json_value('{"a": [1]}') == {"a": [1]}
    assert decode_json_value(b"[true]") == [True]
    assert decode_json_value({"already": "decoded"}) == {"already": "decoded"}
