from __future__ import annotations

from maprouter.name_index import NameIndex, TrieNode, clean_string


def _index() -> NameIndex:
    index = NameIndex()
    index.add("Blue Bottle Coffee", 1)
    index.add("Blue Door", 2)
    index.add("Top Dog", 3)
    index.add("Top Dog!", 4)
    index.add("76", 5)
    return index


def test_clean_string_keeps_letters_and_spaces_only() -> None:
    assert clean_string("Top Dog!") == "top dog"
    assert clean_string("St. Mary's 2nd") == "st marys nd"
    assert clean_string("76") == ""


def test_find_returns_original_names_under_prefix() -> None:
    index = _index()
    assert index.find("blue") == ["Blue Bottle Coffee", "Blue Door"]
    assert index.find("BLUE B") == ["Blue Bottle Coffee"]
    assert index.find("blue bottle coffee") == ["Blue Bottle Coffee"]


def test_find_collapses_names_with_the_same_cleaned_key() -> None:
    index = _index()
    assert index.find("top") == ["Top Dog", "Top Dog!"]
    assert index.location_ids("top dog") == {3, 4}


def test_find_unknown_prefix_returns_none() -> None:
    index = _index()
    assert index.find("zebra") is None
    assert index.find("bluex") is None


def test_names_cleaning_to_empty_live_at_root() -> None:
    index = _index()
    assert index.root.terminal
    assert "76" in index.root.names
    everything = index.find("")
    assert everything is not None
    assert set(everything) == {"Blue Bottle Coffee", "Blue Door", "Top Dog", "Top Dog!", "76"}


def test_find_trie_node_is_exact_and_uncleaned() -> None:
    index = _index()
    node = index.find_trie_node("blue door")
    assert node is not None and node.terminal
    assert node.location_ids == {2}
    assert index.find_trie_node("Blue Door") is None
    # Interior nodes exist but are not terminal.
    interior = index.find_trie_node("blue")
    assert interior is not None and not interior.terminal
    assert index.location_ids("blue") == set()


def test_len_counts_insertions() -> None:
    assert len(_index()) == 5
    assert NameIndex().find("a") is None


def test_prefix_lookup_is_case_insensitive_and_collisions_share_ids() -> None:
    index = NameIndex()
    index.add("Dwinelle Hall", 7)
    index.add("A.B.", 1)
    index.add("AB", 2)
    assert "Dwinelle Hall" in (index.find("DWIN") or [])
    assert "Dwinelle Hall" in (index.find("dwin") or [])
    assert index.find("zzz") is None
    assert index.find("ab") == ["A.B.", "AB"]
    assert index.location_ids("ab") == {1, 2}


def test_walk_falls_back_from_lower_to_upper_case_edges_only() -> None:
    index = NameIndex()
    index.root.links["D"] = TrieNode(terminal=True, names={"Dx"}, location_ids={1})
    assert index.find("d") == ["Dx"]
    assert index.find("D") == ["Dx"]
    assert index.find("e") is None

    # An upper-case query is lowered first, so a lower-case edge is still reachable.
    index.add("east", 2)
    assert index.find("E") == ["east"]
