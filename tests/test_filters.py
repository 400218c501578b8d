"""
Tests for the filter engine and selection state.
"""

from __future__ import annotations

import pytest

from antipattern_insights.insights import (
    SelectionState,
    distinct_patterns,
    distinct_services,
    filter_insights,
)


class TestFilterInsights:
    """Tests for the filter predicate."""

    def test_empty_selection_is_unrestricted(self, sample_insights):
        assert filter_insights(sample_insights) == sample_insights

    def test_by_service(self, sample_insights):
        result = filter_insights(sample_insights, {"Service-A"})
        assert {i.service for i in result} == {"Service-A"}
        assert len(result) == 2

    def test_by_pattern(self, sample_insights):
        result = filter_insights(sample_insights, (), {"Cyclic Dependencies"})
        assert [i.service for i in result] == ["Service-A", "Service-C"]

    def test_both_axes(self, sample_insights):
        result = filter_insights(sample_insights, {"Service-A"}, {"Cyclic Dependencies"})
        assert len(result) == 1
        assert result[0].count == 3

    def test_unknown_selection_matches_nothing(self, sample_insights):
        assert filter_insights(sample_insights, {"ghost"}) == []

    @pytest.mark.parametrize("services,patterns", [
        ((), ()),
        ({"Service-A"}, ()),
        ((), {"Bottleneck Services"}),
        ({"Service-A", "gateway"}, {"Long Service Chains", "Cyclic Dependencies"}),
    ])
    def test_idempotent(self, sample_insights, services, patterns):
        once = filter_insights(sample_insights, services, patterns)
        assert filter_insights(once, services, patterns) == once

    def test_monotonic_in_services(self, sample_insights):
        sizes = [
            len(filter_insights(sample_insights, services))
            for services in ({"Service-A"}, {"Service-A", "Service-B"}, {"Service-A", "Service-B", "gateway"})
        ]
        assert sizes == sorted(sizes)

    def test_monotonic_in_patterns(self, sample_insights):
        small = filter_insights(sample_insights, (), {"Cyclic Dependencies"})
        large = filter_insights(sample_insights, (), {"Cyclic Dependencies", "Bottleneck Services"})
        assert len(large) >= len(small)


class TestDistinctValues:
    """Tests for distinct service/pattern extraction."""

    def test_first_seen_order(self, sample_insights):
        assert distinct_services(sample_insights) == ["Service-A", "Service-B", "gateway", "Service-C"]
        assert distinct_patterns(sample_insights) == [
            "Bottleneck Services", "Cyclic Dependencies", "Long Service Chains",
        ]


class TestSelectionState:
    """Tests for SelectionState."""

    def test_initialize_defaults_selects_everything(self, sample_insights):
        state = SelectionState().initialize_defaults(sample_insights)
        assert state.initialized
        assert state.selected_services == set(distinct_services(sample_insights))
        assert state.selected_patterns == set(distinct_patterns(sample_insights))

    def test_initialize_defaults_only_once(self, sample_insights):
        state = SelectionState().initialize_defaults(sample_insights[:1])
        again = state.clear().initialize_defaults(sample_insights)
        assert again.selected_services == frozenset()
        assert again.selected_patterns == frozenset()

    def test_empty_collection_leaves_defaults_pending(self, sample_insights):
        state = SelectionState().initialize_defaults([])
        assert not state.initialized
        assert state.initialize_defaults(sample_insights).initialized

    def test_existing_selection_kept(self, sample_insights):
        state = SelectionState(selected_services=frozenset({"Service-B"})).initialize_defaults(sample_insights)
        assert state.selected_services == {"Service-B"}
        assert state.selected_patterns == set(distinct_patterns(sample_insights))

    def test_toggle(self):
        state = SelectionState().toggle_service("a").toggle_service("b").toggle_service("a")
        assert state.selected_services == {"b"}
        assert SelectionState().toggle_pattern("p").selected_patterns == {"p"}

    def test_apply(self, sample_insights):
        state = SelectionState().with_patterns(["Long Service Chains"])
        assert [i.service for i in state.apply(sample_insights)] == ["gateway"]

    def test_immutable(self):
        state = SelectionState()
        state.with_services(["a"])
        assert state.selected_services == frozenset()

    def test_to_dict_sorted(self):
        state = SelectionState().with_services(["b", "a"]).with_patterns(["z", "y"])
        assert state.to_dict() == {
            "selected_services": ["a", "b"],
            "selected_patterns": ["y", "z"],
        }
