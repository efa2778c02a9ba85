"""Tests for addresses, read and write."""

import copy

import pytest
import yaml

from yaml_translator.core.address import Address, clone_tree, read, write
from yaml_translator.core.exceptions import AddressNotFound


@pytest.fixture
def document():
    return {
        "menu": {"items": [{"label": "Open"}, {"label": "Close"}]},
        "a.b": "dotted key",
        "a": {"b": "nested key"},
        404: "Not found",
    }


def test_read_nested_mapping_and_sequence(document):
    assert read(document, Address(["menu", "items", 1, "label"])) == "Close"


def test_parse_and_str_round_trip():
    address = Address.parse("menu.items.0.label")
    assert tuple(address) == ("menu", "items", "0", "label")
    assert str(address) == "menu.items.0.label"
    assert address.key == "label"
    assert address.parent == Address(["menu", "items", "0"])


def test_parsed_address_reads_sequence_and_non_string_keys(document):
    assert read(document, Address.parse("menu.items.0.label")) == "Open"
    assert read(document, Address.parse("404")) == "Not found"


def test_dotted_keys_stay_distinct(document):
    assert read(document, Address(["a.b"])) == "dotted key"
    assert read(document, Address(["a", "b"])) == "nested key"
    assert Address(["a.b"]) != Address(["a", "b"])


def test_empty_address_reads_root(document):
    assert read(document, Address()) is document


def test_write_does_not_mutate_input(document):
    snapshot = copy.deepcopy(document)
    updated = write(document, Address(["menu", "items", 0, "label"]), "Ouvrir")

    assert document == snapshot
    assert read(updated, Address(["menu", "items", 0, "label"])) == "Ouvrir"
    assert read(updated, Address(["menu", "items", 1, "label"])) == "Close"


@pytest.mark.parametrize("segments", [
    ["missing"],
    ["menu", "items", 5, "label"],
    ["menu", "items", "label"],
    ["menu", 0],
    ["a.b", "c"],
    ["menu", "items", True],
])
def test_unresolvable_addresses_raise(document, segments):
    with pytest.raises(AddressNotFound) as exc_info:
        read(document, Address(segments))
    assert exc_info.value.code == "address_not_found"


def test_write_raises_for_missing_target(document):
    with pytest.raises(AddressNotFound):
        write(document, Address(["menu", "title"]), "Menu")


ALIASED_YAML = "base: &b\n  title: Hello there\ncopy: *b\n"


def test_write_on_aliased_nodes_changes_one_address():
    document = yaml.safe_load(ALIASED_YAML)
    assert document["base"] is document["copy"]

    updated = write(document, Address(("base", "title")), "Bonjour")

    assert read(updated, Address(("base", "title"))) == "Bonjour"
    assert read(updated, Address(("copy", "title"))) == "Hello there"
    assert document["base"]["title"] == "Hello there"


def test_clone_tree_unshares_containers():
    shared = {"label": "Open"}
    document = {"a": shared, "b": [shared, shared]}
    clone = clone_tree(document)

    assert clone == document
    assert clone["a"] is not clone["b"][0]
    assert clone["b"][0] is not clone["b"][1]


def test_clone_tree_rejects_recursive_nodes():
    node = []
    node.append(node)
    with pytest.raises(ValueError):
        clone_tree(node)
