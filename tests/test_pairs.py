import pytest

from resty_requests.networking.errors import (
    ConfigurationError,
    KeyValueShapeError,
)
from resty_requests.networking.pairs import OrderedList, to_pairs
from resty_requests.networking.predicates import (
    ConservativeShapes,
    IntrospectingShapes,
)


def test_none_gives_empty_list():
    assert to_pairs(None) == []


def test_list_input_is_returned_unchanged():
    value = [1, 2, 3]

    assert to_pairs(value) is value


def test_ordered_list_is_returned_unchanged():
    value = OrderedList([("b", 2), ("a", 1)])

    assert to_pairs(value) is value
    assert list(value) == [("b", 2), ("a", 1)]


def test_mapping_is_converted_in_insertion_order():
    pairs = to_pairs({"a": 1, "b": 2})

    assert pairs == [("a", 1), ("b", 2)]


def test_mapping_conversion_neither_omits_nor_duplicates():
    source = {"x": 1, "y": 2, "z": 3}

    pairs = to_pairs(source)

    assert len(pairs) == len(source)
    assert dict(pairs) == source


def test_one_based_mapping_is_list_like_when_introspecting():
    value = {1: ("a", 1), 2: ("b", 2)}

    assert to_pairs(value, IntrospectingShapes()) == [("a", 1), ("b", 2)]


def test_one_based_mapping_is_map_like_when_conservative():
    value = {1: "a", 2: "b"}

    assert to_pairs(value, ConservativeShapes()) == [(1, "a"), (2, "b")]


@pytest.mark.parametrize("value", [42, 4.2, "a=1", b"a=1", True, object()])
def test_non_container_raises_shape_error(value):
    with pytest.raises(KeyValueShapeError, match="key/value containers"):
        to_pairs(value)


def test_shape_error_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        to_pairs(42)


def test_ordered_list_repr():
    assert repr(OrderedList([("a", 1)])) == "OrderedList([('a', 1)])"
