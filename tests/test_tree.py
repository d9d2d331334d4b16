"""Tests for branch-and-bound nodes, pruning and bound maintenance."""
import gc
import math

import numpy as np
import pytest

from bnbknapsack.bnb import (
    BBNode,
    BBStats,
    BBStatus,
    branch,
    classify,
    compute_gap,
    compute_upper_bound,
    is_variable_branched_on,
    refresh_upper_bound,
    round_solution,
    select_branching_variable,
    update_incumbent,
)
from bnbknapsack.constants import LPStatus, PruneReason
from bnbknapsack.errors import NoBranchingVariableError


def make_root(objective=44.0, solution=(1.0, 1.0, 0.5, 0.0), integer=False):
    return BBNode.root(
        lp_objective=objective,
        lp_status=LPStatus.OPTIMAL,
        lp_solution=np.array(solution),
        integer_feasible=integer,
    )


def make_child(parent, node_id, variable, value, objective, status=LPStatus.OPTIMAL,
               integer=False, solution=(0.0, 0.0, 0.0, 0.0)):
    return BBNode.child(
        parent,
        node_id=node_id,
        variable=variable,
        variable_value=value,
        lp_objective=objective,
        lp_status=status,
        lp_solution=np.array(solution),
        integer_feasible=integer,
    )


class TestBBNode:
    """Tests for the node data model."""

    def test_root_sentinel(self):
        root = make_root()

        assert root.is_root
        assert root.variable is None
        assert root.parent is None
        assert root.depth == 0
        assert root.fixed_assignments() == {}

    def test_child_links(self):
        root = make_root()
        left = make_child(root, 1, 2, 0, 43.0)

        assert not left.is_root
        assert left.parent is root
        assert left.depth == 1
        assert left.fixed_assignments() == {2: 0}

    def test_fixed_assignments_extend_parent(self):
        """Test that a node's fixings are its parent's plus exactly one."""
        root = make_root()
        a = make_child(root, 1, 2, 0, 43.0)
        b = make_child(a, 2, 3, 1, 42.0)

        parent_fixed = a.fixed_assignments()
        fixed = b.fixed_assignments()
        assert fixed == {2: 0, 3: 1}
        assert {k: v for k, v in fixed.items() if k != b.variable} == parent_fixed

    def test_repeated_variable_raises(self):
        root = make_root()
        a = make_child(root, 1, 2, 0, 43.0)
        with pytest.raises(ValueError, match="already fixed"):
            make_child(a, 2, 2, 1, 42.0)

    def test_non_binary_value_raises(self):
        with pytest.raises(ValueError, match="0 or 1"):
            make_child(make_root(), 1, 0, 2, 40.0)

    def test_attach_children_once(self):
        """Test that children are attached as a pair, exactly once."""
        root = make_root()
        left = make_child(root, 1, 2, 0, 43.0)
        right = make_child(root, 2, 2, 1, 43.5)

        assert root.is_leaf
        root.attach_children(left, right)
        assert root.children == (left, right)
        assert not root.is_leaf

        with pytest.raises(ValueError, match="already has children"):
            root.attach_children(left, right)

    def test_attach_foreign_child_raises(self):
        root = make_root()
        other = make_root()
        left = make_child(root, 1, 2, 0, 43.0)
        stranger = make_child(other, 2, 2, 1, 43.5)

        with pytest.raises(ValueError, match="not created from"):
            root.attach_children(left, stranger)

    def test_attach_mismatched_variables_raises(self):
        root = make_root()
        left = make_child(root, 1, 2, 0, 43.0)
        right = make_child(root, 2, 3, 1, 43.5)

        with pytest.raises(ValueError, match="same variable"):
            root.attach_children(left, right)

    def test_parent_reference_is_weak(self):
        """Test that a child does not keep its parent alive."""
        root = make_root()
        child = make_child(root, 1, 2, 0, 43.0)

        del root
        gc.collect()

        assert child.parent is None
        with pytest.raises(RuntimeError, match="outlived"):
            child.fixed_assignments()

    def test_iter_subtree_preorder(self):
        root = make_root()
        left = make_child(root, 1, 2, 0, 43.0)
        right = make_child(root, 2, 2, 1, 43.5)
        root.attach_children(left, right)
        ll = make_child(left, 3, 3, 0, 38.0)
        lr = make_child(left, 4, 3, 1, 42.0)
        left.attach_children(ll, lr)

        assert [n.node_id for n in root.iter_subtree()] == [0, 1, 3, 4, 2]


class TestClassify:
    """Tests for the pruning classification and its priority order."""

    def test_open_node(self):
        root = make_root()
        status = BBStatus(root=root, upper_bound=44.0)
        assert classify(root, status) == PruneReason.NONE

    @pytest.mark.parametrize("lp_status", [LPStatus.INFEASIBLE, LPStatus.OTHER_FAILURE])
    def test_feasibility_first(self, lp_status):
        """Test that a failed relaxation wins over every other reason."""
        root = make_root()
        node = make_child(root, 1, 0, 1, -math.inf, status=lp_status, integer=True)
        status = BBStatus(root=root, upper_bound=44.0, lower_bound=40.0)

        assert classify(node, status) == PruneReason.FEASIBILITY

    def test_optimality_before_bounds(self):
        """Test that an integer node is pruned by optimality even below the bound."""
        root = make_root()
        node = make_child(root, 1, 2, 0, 30.0, integer=True)
        status = BBStatus(root=root, upper_bound=44.0, lower_bound=38.0)

        assert classify(node, status) == PruneReason.OPTIMALITY

    def test_optimality_even_when_improving(self):
        root = make_root()
        node = make_child(root, 1, 2, 0, 42.0, integer=True)
        status = BBStatus(root=root, upper_bound=44.0, lower_bound=38.0)

        assert classify(node, status) == PruneReason.OPTIMALITY

    def test_bounds_strictly_below(self):
        root = make_root()
        node = make_child(root, 1, 2, 0, 37.9)
        status = BBStatus(root=root, upper_bound=44.0, lower_bound=38.0)

        assert classify(node, status) == PruneReason.BOUNDS

    def test_equal_to_lower_bound_stays_open(self):
        """Test that a node whose bound matches the incumbent is not pruned."""
        root = make_root()
        node = make_child(root, 1, 2, 0, 38.0)
        status = BBStatus(root=root, upper_bound=44.0, lower_bound=38.0)

        assert classify(node, status) == PruneReason.NONE


class TestIncumbent:
    """Tests for incumbent updates and rounding."""

    def test_round_half_up(self):
        assert round_solution([0.0, 0.4999, 0.5, 0.9999, 1.0]) == [0, 0, 1, 1, 1]

    def test_update_on_improvement(self):
        root = make_root()
        status = BBStatus(root=root, upper_bound=44.0)
        stats = BBStats()
        node = make_child(root, 1, 2, 0, 38.0, integer=True, solution=(1.0, 0.99999, 0.0, 0.0))

        assert update_incumbent(status, node, stats)
        assert status.lower_bound == 38.0
        assert status.incumbent == [1, 1, 0, 0]
        assert stats.incumbent_updates == 1

    def test_no_update_when_equal(self):
        """Test that only a strictly better value replaces the incumbent."""
        root = make_root()
        status = BBStatus(root=root, upper_bound=44.0, lower_bound=38.0, incumbent=[1, 1, 0, 0])
        node = make_child(root, 1, 2, 0, 38.0, integer=True, solution=(0.0, 1.0, 1.0, 1.0))

        assert not update_incumbent(status, node)
        assert status.incumbent == [1, 1, 0, 0]

    def test_no_update_from_fractional_or_failed(self):
        root = make_root()
        status = BBStatus(root=root, upper_bound=44.0)
        fractional = make_child(root, 1, 2, 0, 43.0)
        failed = make_child(root, 2, 2, 1, 50.0, status=LPStatus.OTHER_FAILURE, integer=True)

        assert not update_incumbent(status, fractional)
        assert not update_incumbent(status, failed)
        assert status.lower_bound == -math.inf


class TestUpperBound:
    """Tests for the leaf-based upper bound."""

    def build(self):
        root = make_root()
        left = make_child(root, 1, 2, 0, 43.0)
        right = make_child(root, 2, 2, 1, 43.5)
        root.attach_children(left, right)
        ll = make_child(left, 3, 3, 0, 38.0, integer=True)
        lr = make_child(left, 4, 3, 1, 42.5)
        left.attach_children(ll, lr)
        return root, left, right, ll, lr

    def test_maximum_over_open_leaves(self):
        """Test that resolved leaves count as -inf and the maximum propagates up."""
        root, *_ = self.build()
        status = BBStatus(root=root, upper_bound=44.0, lower_bound=38.0)

        assert compute_upper_bound(status) == 43.5

    def test_bounds_pruned_leaf_ignored(self):
        root, left, right, ll, lr = self.build()
        rl = make_child(right, 5, 3, 0, 40.0)
        rr = make_child(right, 6, 3, 1, 43.2)
        right.attach_children(rl, rr)
        status = BBStatus(root=root, upper_bound=44.0, lower_bound=42.8)

        # lr (42.5) and rl (40.0) are below the lower bound, only rr is open
        assert compute_upper_bound(status) == 43.2

    def test_infeasible_leaf_ignored(self):
        root = make_root()
        left = make_child(root, 1, 2, 0, 43.0)
        right = make_child(root, 2, 2, 1, -math.inf, status=LPStatus.INFEASIBLE)
        root.attach_children(left, right)
        status = BBStatus(root=root, upper_bound=44.0)

        assert compute_upper_bound(status) == 43.0

    def test_smaller_open_leaf_does_not_close_gap(self):
        """Test that an open leaf level with the incumbent leaves the gap open."""
        root, left, right, ll, lr = self.build()
        status = BBStatus(root=root, upper_bound=44.0, lower_bound=42.5, incumbent=[0, 1, 1, 1])

        # lr (42.5) stays open at the lower bound but right (43.5) may hold better
        assert refresh_upper_bound(status) == 43.5
        assert compute_gap(status.upper_bound, status.lower_bound) > 0.0

    def test_refresh_recomputes(self):
        """Test that the stored bound is replaced by the recomputed one."""
        root, *_ = self.build()
        status = BBStatus(root=root, upper_bound=42.0, lower_bound=38.0)

        assert refresh_upper_bound(status) == 43.5
        assert status.upper_bound == 43.5

    def test_refresh_never_below_lower_bound(self):
        root, *_ = self.build()
        status = BBStatus(root=root, upper_bound=39.0, lower_bound=40.0, incumbent=[0, 1, 1, 1])

        assert refresh_upper_bound(status) >= status.lower_bound
        assert compute_gap(status.upper_bound, status.lower_bound) >= 0.0

    def test_refresh_collapses_when_resolved(self):
        """Test that a fully resolved tree proves the incumbent optimal."""
        root = make_root()
        left = make_child(root, 1, 2, 0, 38.0, integer=True)
        right = make_child(root, 2, 2, 1, -math.inf, status=LPStatus.INFEASIBLE)
        root.attach_children(left, right)
        status = BBStatus(root=root, upper_bound=44.0, lower_bound=38.0, incumbent=[1, 1, 0, 0])

        assert refresh_upper_bound(status) == 38.0

    def test_refresh_without_incumbent_keeps_bound(self):
        root = make_root()
        left = make_child(root, 1, 2, 0, -math.inf, status=LPStatus.INFEASIBLE)
        right = make_child(root, 2, 2, 1, -math.inf, status=LPStatus.INFEASIBLE)
        root.attach_children(left, right)
        status = BBStatus(root=root, upper_bound=44.0)

        assert refresh_upper_bound(status) == 44.0


class TestGap:
    def test_nan_without_incumbent(self):
        """Test that the gap is undefined and never passes the tolerance test."""
        gap = compute_gap(44.0, -math.inf)

        assert math.isnan(gap)
        assert not gap <= 1e-3

    def test_relative_gap(self):
        assert compute_gap(40.0, 38.0) == pytest.approx(0.05)

    def test_closed_gap(self):
        assert compute_gap(42.0, 42.0) == 0.0


class TestBranchingVariable:
    def test_branched_on_walks_whole_path(self):
        root = make_root()
        left = make_child(root, 1, 2, 0, 43.0)
        root.attach_children(left, make_child(root, 2, 2, 1, 43.5))
        ll = make_child(left, 3, 0, 1, 42.0)

        assert is_variable_branched_on(ll, 2)
        assert is_variable_branched_on(ll, 0)
        assert not is_variable_branched_on(ll, 1)
        assert not is_variable_branched_on(root, 2)

    def test_smallest_fractional_index(self, small_problem):
        root = make_root(solution=(1.0, 0.4, 0.5, 0.0))

        assert select_branching_variable(small_problem, root) == 1

    def test_skips_index_fixed_on_path(self, small_problem):
        """Test that a fractional value on an already fixed index is not branched again."""
        root = make_root()
        child = make_child(root, 1, 2, 1, 43.0, solution=(1.0, 0.0, 0.5, 0.6))

        assert select_branching_variable(small_problem, child) == 3

    def test_only_fixed_fractional_raises(self, small_problem):
        root = make_root()
        child = make_child(root, 1, 2, 1, 43.0, solution=(1.0, 0.0, 0.5, 1.0))

        with pytest.raises(NoBranchingVariableError, match="already fixed"):
            select_branching_variable(small_problem, child)


class TestBranch:
    def test_children_fix_zero_then_one(self, small_problem, greedy_oracle):
        res = greedy_oracle.solve_relaxation(small_problem, {})
        root = make_root(res.objective, res.solution)
        stats = BBStats()

        left, right = branch(small_problem, greedy_oracle, root, 2, 1, stats)

        assert root.children == (left, right)
        assert (left.variable, left.variable_value) == (2, 0)
        assert (right.variable, right.variable_value) == (2, 1)
        assert (left.node_id, right.node_id) == (1, 2)
        assert stats.lp_solves == 2
        assert stats.nodes_created == 2
        assert left.lp_objective == pytest.approx(38.0 + 16.0 / 3.0)

    def test_child_sees_every_fixing_on_its_path(self, small_problem, make_failing_oracle):
        """Test that each child relaxation is solved with the full path."""
        oracle = make_failing_oracle({})
        root = make_root()
        left, _ = branch(small_problem, oracle, root, 2, 1)
        branch(small_problem, oracle, left, 3, 3)

        assert oracle.calls[-2:] == [{2: 0, 3: 0}, {2: 0, 3: 1}]
