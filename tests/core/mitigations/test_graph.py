"""Tests for mutual-feedback detection and sybil clustering."""

from __future__ import annotations

from skilltrust.core.mitigations.graph import (
    analyze_graph,
    detect_mutual_pairs,
    detect_self_ratings,
    detect_sybil_clusters,
    sybil_membership,
)


class TestMutualPairs:
    """A pair is mutual when both directions exist."""

    def test_reciprocal_ratings_form_pair(self, make_entry) -> None:
        entries = [make_entry("bob", "alice"), make_entry("alice", "bob")]
        pairs = detect_mutual_pairs(entries)
        assert len(pairs) == 1
        assert (pairs[0].address_a, pairs[0].address_b) == ("alice", "bob")
        assert set(pairs[0].entry_ids) == {e.id for e in entries}

    def test_one_way_rating_is_not_mutual(self, make_entry) -> None:
        assert detect_mutual_pairs([make_entry("bob", "alice")]) == []

    def test_revoked_edge_breaks_pair(self, make_entry) -> None:
        entries = [make_entry("bob", "alice"), make_entry("alice", "bob").revoke()]
        assert detect_mutual_pairs(entries) == []

    def test_self_loop_never_pairs(self, make_entry) -> None:
        entries = [make_entry("alice", "alice"), make_entry("alice", "alice")]
        assert detect_mutual_pairs(entries) == []

    def test_repeated_entries_all_collected(self, make_entry) -> None:
        entries = [
            make_entry("bob", "alice"),
            make_entry("bob", "alice"),
            make_entry("alice", "bob"),
        ]
        pairs = detect_mutual_pairs(entries)
        assert len(pairs[0].entry_ids) == 3


class TestSybilClusters:
    """Connected components of the mutual-edge subgraph."""

    def test_ring_of_five_is_one_cluster(self, make_entry) -> None:
        ring = [f"sybil-{i}" for i in range(1, 6)]
        entries = [
            make_entry(target, source)
            for source in ring
            for target in ring
            if source != target
        ]
        clusters = detect_sybil_clusters(entries)
        assert clusters == [frozenset(ring)]

    def test_chain_of_pairs_merges(self, make_entry) -> None:
        entries = [
            make_entry("b", "a"), make_entry("a", "b"),
            make_entry("c", "b"), make_entry("b", "c"),
        ]
        assert detect_sybil_clusters(entries) == [frozenset({"a", "b", "c"})]

    def test_disjoint_pairs_sorted_largest_first(self, make_entry) -> None:
        entries = [
            make_entry("y", "x"), make_entry("x", "y"),
            make_entry("b", "a"), make_entry("a", "b"),
            make_entry("c", "b"), make_entry("b", "c"),
        ]
        clusters = detect_sybil_clusters(entries)
        assert clusters == [frozenset({"a", "b", "c"}), frozenset({"x", "y"})]

    def test_self_loops_do_not_form_cluster(self, make_entry) -> None:
        entries = [make_entry("alice", "alice"), make_entry("bob", "bob")]
        assert detect_sybil_clusters(entries) == []

    def test_empty_snapshot(self) -> None:
        assert detect_sybil_clusters([]) == []


class TestGraphPredicate:
    """Entries on mutual edges or touching a cluster match."""

    def test_mutual_entries_match(self, make_entry) -> None:
        forward = make_entry("bob", "alice")
        backward = make_entry("alice", "bob")
        analysis = analyze_graph([forward, backward])
        assert analysis.matches(forward)
        assert analysis.matches(backward)

    def test_outsider_rating_cluster_member_matches(self, make_entry) -> None:
        outsider = make_entry("alice", "carol")
        analysis = analyze_graph([
            make_entry("bob", "alice"), make_entry("alice", "bob"), outsider,
        ])
        assert analysis.matches(outsider)

    def test_cluster_member_rating_unrelated_subject_matches(self, make_entry) -> None:
        side = make_entry("skill-x", "alice")
        analysis = analyze_graph([
            make_entry("bob", "alice"), make_entry("alice", "bob"), side,
        ])
        assert analysis.matches(side)

    def test_self_rating_matches_without_clustering(self, make_entry) -> None:
        own = make_entry("skill-a", "skill-a")
        other = make_entry("skill-a", "u1")
        analysis = analyze_graph([own, other])
        assert own.id in analysis.mutual_entry_ids
        assert analysis.matches(own)
        assert not analysis.matches(other)
        assert analysis.pairs == ()
        assert analysis.clusters == ()

    def test_revoked_self_rating_ignored(self, make_entry) -> None:
        own = make_entry("skill-a", "skill-a").revoke()
        assert detect_self_ratings([own]) == frozenset()
        assert not analyze_graph([own]).matches(own)

    def test_unrelated_entry_does_not_match(self, make_entry) -> None:
        clean = make_entry("skill-x", "carol")
        analysis = analyze_graph([
            make_entry("bob", "alice"), make_entry("alice", "bob"), clean,
        ])
        assert not analysis.matches(clean)


class TestSybilMembership:

    def test_membership_covers_reviewers_and_subjects(self, make_entry) -> None:
        entries = [
            make_entry("bob", "alice"),
            make_entry("alice", "bob"),
            make_entry("skill-x", "carol"),
        ]
        membership = sybil_membership(entries)
        assert membership == {
            "alice": True,
            "bob": True,
            "carol": False,
            "skill-x": False,
        }

    def test_self_rater_is_not_a_member(self, make_entry) -> None:
        membership = sybil_membership([make_entry("skill-a", "skill-a")])
        assert membership == {"skill-a": False}

    def test_revoked_only_addresses_omitted(self, make_entry) -> None:
        membership = sybil_membership([make_entry("skill-x", "ghost").revoke()])
        assert membership == {}
