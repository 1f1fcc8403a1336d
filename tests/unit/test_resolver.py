"""Unit tests for group and node token resolution"""

import pytest

from clashpick.common.errors import NoMatchingGroupsError, NoSelectionError
from clashpick.common.types import ProxyOrGroup
from clashpick.controller.client import catalog_build
from clashpick.selection.resolver import groups_resolve, index_parse, node_resolve


class TestIndexParse:
    """Test index interpretation of tokens"""

    def test_in_range(self):
        """Test integers inside the range are accepted"""
        assert index_parse("0", 2) == 0
        assert index_parse("1", 2) == 1

    def test_out_of_range_and_negative(self):
        """Test integers outside 0..length-1 are rejected"""
        assert index_parse("2", 2) is None
        assert index_parse("-1", 2) is None

    def test_not_a_number(self):
        """Test non-numeric tokens are rejected"""
        assert index_parse("Proxy", 2) is None
        assert index_parse("1.5", 2) is None

    def test_int_literal_extras_rejected(self):
        """Test underscores, padding and non-ASCII digits are not indices"""
        assert index_parse("0_1", 2) is None
        assert index_parse(" 1", 2) is None
        assert index_parse("1\n", 2) is None
        assert index_parse("\u0661", 2) is None

    def test_explicit_sign(self):
        """Test a leading plus sign is still a plain integer"""
        assert index_parse("+1", 2) == 1


class TestGroupsResolveTokens:
    """Test non-interactive group resolution"""

    def test_name_match(self, sample_catalog, scripted_reader):
        """Test a group name resolves to itself"""
        reader = scripted_reader()
        assert groups_resolve(["Proxy"], sample_catalog, reader) == ["Proxy"]
        assert reader.prompts == []

    def test_every_index_maps_to_selectable_group(self, sample_catalog, scripted_reader):
        """Test str(i) resolves to selectable_groups[i]"""
        for i, group in enumerate(sample_catalog.selectable_groups):
            assert groups_resolve([str(i)], sample_catalog, scripted_reader()) == [group.name]

    def test_order_kept_and_duplicates_allowed(self, sample_catalog, scripted_reader):
        """Test tokens keep their order and repeats are not removed"""
        result = groups_resolve(["Video", "0", "Proxy"], sample_catalog, scripted_reader())
        assert result == ["Video", "Proxy", "Proxy"]

    def test_invalid_tokens_dropped(self, sample_catalog, scripted_reader):
        """Test unknown tokens are skipped when others match"""
        result = groups_resolve(["nope", "Video", "9"], sample_catalog, scripted_reader())
        assert result == ["Video"]

    def test_non_group_entry_not_matched_by_name(self, sample_catalog, scripted_reader):
        """Test a known proxy that is not a Selector is not a group"""
        reader = scripted_reader("0")
        with pytest.raises(NoMatchingGroupsError):
            groups_resolve(["Auto", "A"], sample_catalog, reader)

    def test_all_invalid_never_prompts(self, sample_catalog, scripted_reader):
        """Test all-invalid tokens fail without entering interactive mode"""
        reader = scripted_reader("0")
        with pytest.raises(NoMatchingGroupsError):
            groups_resolve(["nope", "5", "-1"], sample_catalog, reader)
        assert reader.prompts == []

    def test_loose_integer_spellings_are_not_indices(self, sample_catalog, scripted_reader):
        """Test "0_1" and " 1" match no group instead of group 1"""
        reader = scripted_reader("0")
        with pytest.raises(NoMatchingGroupsError):
            groups_resolve(["0_1", " 1"], sample_catalog, reader)
        assert reader.prompts == []

    def test_name_takes_priority_over_index(self, scripted_reader):
        """Test a group literally named '1' wins over index 1"""
        proxies = {
            "GLOBAL": ProxyOrGroup("GLOBAL", ("1", "0"), "1", "Selector"),
            "1": ProxyOrGroup("1", ("x",), "x", "Selector"),
            "0": ProxyOrGroup("0", ("y",), "y", "Selector"),
            "x": ProxyOrGroup("x", kind="Direct"),
            "y": ProxyOrGroup("y", kind="Direct"),
        }
        catalog = catalog_build(proxies)
        assert [g.name for g in catalog.selectable_groups] == ["1", "0"]

        assert groups_resolve(["1"], catalog, scripted_reader()) == ["1"]


class TestGroupsResolveInteractive:
    """Test the interactive fallback when no tokens are given"""

    def test_lists_groups_and_accepts_index(self, sample_catalog, scripted_reader, capsys):
        """Test groups are listed and an index answer is accepted"""
        reader = scripted_reader("1")
        assert groups_resolve([], sample_catalog, reader) == ["Video"]

        out = capsys.readouterr().out
        assert "0.\tProxy Now: [A]" in out
        assert "1.\tVideo Now: [JP-01]" in out
        assert reader.prompts == ["\nSelect group: [Group name/Index] "]

    def test_reprompts_on_blank_and_bad_input(self, sample_catalog, scripted_reader, capsys):
        """Test blank and unknown answers re-prompt"""
        reader = scripted_reader("", "  ", "nope", " Proxy ")
        assert groups_resolve([], sample_catalog, reader) == ["Proxy"]

        out = capsys.readouterr().out
        assert out.count("You must specify a group.") == 2
        assert out.count("Bad input.") == 1
        assert len(reader.prompts) == 4

    def test_input_closed(self, sample_catalog, scripted_reader):
        """Test end of input raises NoSelectionError"""
        with pytest.raises(NoSelectionError):
            groups_resolve([], sample_catalog, scripted_reader(""))


class TestNodeResolve:
    """Test node resolution within a group"""

    def test_optional_empty_skips(self, sample_catalog, scripted_reader):
        """Test optional mode returns '' on the first empty line"""
        reader = scripted_reader("", "0")
        group = sample_catalog.by_name["Proxy"]
        assert node_resolve("Select a node", group, sample_catalog, True, reader) == ""
        assert reader.prompts == ["Select a node: [Node name/Index] "]

    def test_mandatory_empty_reprompts(self, sample_catalog, scripted_reader, capsys):
        """Test mandatory mode keeps asking until a node is given"""
        reader = scripted_reader("", "", "B")
        group = sample_catalog.by_name["Proxy"]
        assert node_resolve("Test", group, sample_catalog, False, reader) == "B"
        assert capsys.readouterr().out.count("You must specify a node.") == 2

    def test_index_refers_to_group_members(self, sample_catalog, scripted_reader):
        """Test an index picks from the group's member list"""
        group = sample_catalog.by_name["Video"]
        assert node_resolve("Select", group, sample_catalog, True, scripted_reader("1")) == "JP-01"

    def test_name_outside_group_accepted(self, sample_catalog, scripted_reader):
        """Test any catalog entry may be named directly"""
        group = sample_catalog.by_name["Proxy"]
        assert node_resolve("Select", group, sample_catalog, True, scripted_reader("HK-01")) == "HK-01"

    def test_bad_input_reprompts(self, sample_catalog, scripted_reader, capsys):
        """Test unknown names and out-of-range indices re-prompt"""
        reader = scripted_reader("7", "Nowhere", "0")
        group = sample_catalog.by_name["Proxy"]
        assert node_resolve("Select", group, sample_catalog, True, reader) == "A"
        assert capsys.readouterr().out.count("Bad input.") == 2

    def test_input_closed(self, sample_catalog, scripted_reader):
        """Test end of input raises NoSelectionError"""
        group = sample_catalog.by_name["Proxy"]
        with pytest.raises(NoSelectionError):
            node_resolve("Select", group, sample_catalog, False, scripted_reader("", ""))
