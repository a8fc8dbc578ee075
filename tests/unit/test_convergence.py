"""Tests for exclusive commit sets and the convergence cache."""

import pytest

from mainver.graph import AncestryIndex, ConvergenceCache, ExclusionContext
from mainver.models import Branch


@pytest.fixture
def feature_repo(repo):
    """main: A, develop: A - B, feature/a: A - B - C - D."""
    repo.make_a_commit("A")
    repo.branch_to("develop")
    repo.make_a_commit("B")
    repo.branch_to("feature/a")
    repo.make_a_commit("C")
    repo.make_a_commit("D")
    return repo


@pytest.fixture
def cache(feature_repo):
    graph = feature_repo.graph()
    return ConvergenceCache(graph, AncestryIndex(graph))


def shas(repo, *messages):
    by_message = {commit.message: sha for sha, commit in repo.commits.items()}
    return frozenset(by_message[m] for m in messages)


class TestExclusionContext:
    def test_signature_ignores_order(self):
        assert ExclusionContext.of(["a", "b"]) == ExclusionContext.of(["b", "a"])
        assert hash(ExclusionContext.of(["a", "b"])) == hash(ExclusionContext.of(["b", "a"]))

    def test_branches_and_tips_are_interchangeable(self):
        assert ExclusionContext.of([Branch(name="develop", tip="a")]) == ExclusionContext.of(["a"])

    def test_empty(self):
        assert len(ExclusionContext()) == 0


class TestConvergenceCache:
    """Tests for ConvergenceCache.exclusive()."""

    def test_exclusive_commits(self, feature_repo, cache):
        develop = feature_repo.branches["develop"]
        feature = feature_repo.branches["feature/a"]

        result = cache.exclusive(feature, ExclusionContext.of([develop]))

        assert result == shas(feature_repo, "C", "D")

    def test_exclusive_against_older_source(self, feature_repo, cache):
        main = feature_repo.branches["main"]
        feature = feature_repo.branches["feature/a"]

        result = cache.exclusive(feature, ExclusionContext.of([main]))

        assert result == shas(feature_repo, "B", "C", "D")

    def test_repeated_query_returns_same_object(self, feature_repo, cache):
        context = ExclusionContext.of([feature_repo.branches["develop"]])
        feature = feature_repo.branches["feature/a"]

        first = cache.exclusive(feature, context)
        second = cache.exclusive(feature, context)

        assert second is first
        assert cache.stats.misses == 1
        assert cache.stats.hits == 1

    def test_cache_equal_contexts_share_the_entry(self, feature_repo, cache):
        develop = feature_repo.branches["develop"]
        main = feature_repo.branches["main"]
        feature = feature_repo.branches["feature/a"]

        first = cache.exclusive(feature, ExclusionContext.of([develop, main]))
        second = cache.exclusive(
            Branch(name="feature/a", tip=feature), ExclusionContext.of([main, develop])
        )

        assert second is first
        assert len(cache) == 1

    def test_empty_context_is_full_ancestry(self, feature_repo):
        graph = feature_repo.graph()
        ancestry = AncestryIndex(graph)
        cache = ConvergenceCache(graph, ancestry)
        feature = feature_repo.branches["feature/a"]

        assert cache.exclusive(feature, ExclusionContext()) is ancestry.reachable(feature)

    def test_tip_inside_context_is_empty(self, feature_repo, cache):
        develop = feature_repo.branches["develop"]
        feature = feature_repo.branches["feature/a"]

        assert cache.exclusive(develop, ExclusionContext.of([feature])) == frozenset()

    def test_excluded_ancestry_is_built_once_per_context(self, feature_repo, cache):
        context = ExclusionContext.of([feature_repo.branches["main"]])

        cache.exclusive(feature_repo.branches["develop"], context)
        cache.exclusive(feature_repo.branches["feature/a"], context)

        assert cache.stats.context_entries == 1
        assert cache.stats.exclusive_entries == 2

    def test_exclusive_through_merges(self, converged_repo, convergence_config):
        graph = converged_repo.graph()
        cache = ConvergenceCache(graph, AncestryIndex(graph))

        result = cache.exclusive(
            converged_repo.branches["develop"],
            ExclusionContext.of([converged_repo.branches["main"]]),
        )

        assert len(result) == 5
        assert converged_repo.branches["main"] not in result
