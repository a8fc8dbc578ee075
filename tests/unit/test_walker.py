"""Tests for the mainline walker."""

import pytest

from mainver.budget import CalculationBudget
from mainver.errors import BudgetExceededError, WalkerStateError, WarningKind
from mainver.mainline import CommitEvent, MainlineWalker, MergeEvent, VersionCalculator, WalkState
from mainver.models import IncrementStrategy


def make_walker(repo, config, target, start_after=None, budget=None):
    calculator = VersionCalculator(repo.graph(), config)
    run = calculator.new_run()
    walker = MainlineWalker(
        calculator.graph,
        run.ancestry,
        run.divergence,
        calculator.configs,
        run.branches,
        run.branch(target),
        start_after=start_after,
        warnings=run.warnings,
        budget=budget,
    )
    return walker, run


def sha(repo, message):
    return next(s for s, c in repo.commits.items() if c.message == message)


class TestMainlineWalker:
    """Tests for event generation along the first-parent chain."""

    def test_events_oldest_first_with_owners(self, converged_repo, convergence_config):
        walker, _ = make_walker(converged_repo, convergence_config, "develop")

        events = list(walker.events())

        assert [(type(e), e.commit.summary, e.owner) for e in events] == [
            (CommitEvent, "Initial commit", "main"),
            (CommitEvent, "Develop commit", "develop"),
            (MergeEvent, "Merge branch 'feature-1' into develop", "develop"),
            (MergeEvent, "Merge branch 'feature-2' into develop", "develop"),
        ]

    def test_merges_are_attributed_to_their_branch(self, converged_repo, convergence_config):
        walker, run = make_walker(converged_repo, convergence_config, "develop")

        merges = [e for e in walker.events() if isinstance(e, MergeEvent)]

        assert [m.branch.name for m in merges] == ["feature-1", "feature-2"]
        assert [m.increment for m in merges] == [IncrementStrategy.PATCH] * 2
        assert merges[0].merged_commits == (sha(converged_repo, "Feature 1 commit"),)
        assert merges[1].merged_commits == (sha(converged_repo, "Feature 2 commit"),)
        assert run.warnings == []

    def test_owner_configuration_is_attached(self, converged_repo, convergence_config):
        walker, _ = make_walker(converged_repo, convergence_config, "develop")

        events = list(walker.events())

        assert events[0].config.key == "main"
        assert events[1].config.key == "develop"

    def test_start_after_version_source(self, converged_repo, convergence_config):
        source = sha(converged_repo, "Develop commit")
        walker, _ = make_walker(converged_repo, convergence_config, "develop", start_after=source)

        events = list(walker.events())

        assert [e.commit.summary for e in events] == [
            "Merge branch 'feature-1' into develop",
            "Merge branch 'feature-2' into develop",
        ]

    def test_merged_commits_oldest_first(self, repo, convergence_config):
        repo.make_a_commit("A")
        repo.branch_to("develop")
        repo.make_a_commit("B")
        repo.branch_to("feature/big")
        for n in range(3):
            repo.make_a_commit(f"Feature {n}")
        repo.checkout("develop")
        repo.merge_no_ff("feature/big")
        walker, _ = make_walker(repo, convergence_config, "develop")

        merge = list(walker.events())[-1]

        assert merge.merged_commits == tuple(sha(repo, f"Feature {n}") for n in range(3))

    def test_nearest_branch_wins(self, repo, convergence_config):
        repo.make_a_commit("A")
        repo.branch_to("develop")
        repo.make_a_commit("B")
        repo.branch_to("feature/base")
        repo.make_a_commit("C")
        repo.branch_to("feature/stacked")
        repo.make_a_commit("D")
        repo.checkout("develop")
        repo.merge_no_ff("feature/base")
        walker, _ = make_walker(repo, convergence_config, "develop")

        merge = list(walker.events())[-1]

        assert merge.branch.name == "feature/base"

    def test_branch_that_moved_on_is_still_attributed(self, repo, gitflow_config):
        repo.make_a_commit("A")
        repo.branch_to("develop")
        repo.make_a_commit("B")
        repo.branch_to("feature/x")
        repo.make_a_commit("C")
        repo.checkout("develop")
        repo.merge_no_ff("feature/x")
        repo.checkout("feature/x")
        repo.make_a_commit("E")
        walker, _ = make_walker(repo, gitflow_config, "develop")

        merge = list(walker.events())[-1]

        assert merge.branch.name == "feature/x"
        assert merge.increment == IncrementStrategy.MINOR

    def test_deleted_branch_is_unattributed(self, converged_repo, convergence_config):
        converged_repo.delete_branch("feature-1")
        walker, run = make_walker(converged_repo, convergence_config, "develop")

        merges = [e for e in walker.events() if isinstance(e, MergeEvent)]

        assert merges[0].branch is None
        assert merges[0].increment == IncrementStrategy.NONE
        assert merges[1].branch.name == "feature-2"
        assert [w.kind for w in run.warnings] == [WarningKind.AMBIGUOUS_MERGE]
        assert run.warnings[0].commit == merges[0].commit.id

    def test_budget_aborts_collecting_a_large_merge(self, repo, convergence_config):
        repo.make_a_commit("A")
        repo.branch_to("develop")
        repo.make_a_commit("B")
        repo.branch_to("feature/huge")
        for _ in range(CalculationBudget.CHECK_EVERY + 10):
            repo.make_a_commit()
        repo.checkout("develop")
        repo.merge_no_ff("feature/huge")
        walker, _ = make_walker(
            repo, convergence_config, "develop", budget=CalculationBudget(max_seconds=-1)
        )

        with pytest.raises(BudgetExceededError):
            list(walker.events())
        assert walker.state == WalkState.DONE


class TestWalkState:
    def test_state_transitions(self, converged_repo, convergence_config):
        walker, _ = make_walker(converged_repo, convergence_config, "develop")
        assert walker.state == WalkState.UNVISITED

        events = walker.events()
        assert walker.state == WalkState.WALKING

        list(events)
        assert walker.state == WalkState.DONE

    def test_walk_cannot_be_restarted(self, converged_repo, convergence_config):
        walker, _ = make_walker(converged_repo, convergence_config, "develop")
        list(walker.events())

        with pytest.raises(WalkerStateError):
            walker.events()

    def test_walk_cannot_be_reentered(self, converged_repo, convergence_config):
        walker, _ = make_walker(converged_repo, convergence_config, "develop")
        walker.events()

        with pytest.raises(WalkerStateError, match="walking"):
            walker.events()
