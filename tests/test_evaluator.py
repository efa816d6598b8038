"""
Evaluator 纯函数测试，不需要数据库
"""
import pytest

from services.evaluator import (
    NATURALLY_FULFILLED, OVERRIDDEN, PLANNED_FULFILLED, UNFULFILLED,
    evaluate, evaluate_tree, summarize,
)
from services.requirement_tree import BranchNode, LeafNode, TextNode


def leaf(id, members, amount=1, forced=False):
    return LeafNode(id, f"leaf {id}", amount, forced, group_id=id, members=members)


def first_year_branch():
    return BranchNode(10, "First-year programming", 1, children=[
        leaf(1, {"CS135", "CS136"}),
        leaf(2, {"MATH135"}),
    ])


class TestLeaf:

    def test_counts_completed_members(self):
        node = leaf(1, {"CS135", "CS136", "CS245"}, amount=2)
        result = evaluate(node, {"CS135", "CS136", "MATH135"}, set())
        assert result.natural is True
        assert result.completed_count == 2
        assert result.planned_count == 0

    def test_planned_courses_only_count_toward_with_planned(self):
        node = leaf(1, {"CS135", "CS136"}, amount=2)
        result = evaluate(node, {"CS135"}, {"CS136"})
        assert result.natural is False
        assert result.with_planned is True
        assert result.state == PLANNED_FULFILLED

    def test_course_in_both_sets_counted_once(self):
        node = leaf(1, {"CS135", "CS136"}, amount=2)
        result = evaluate(node, {"CS135"}, {"CS135"})
        assert result.with_planned is False
        assert result.planned_count == 0

    def test_without_group_is_never_fulfilled(self):
        node = LeafNode(1, "empty", 1)
        result = evaluate(node, {"CS135"}, {"CS136"})
        assert (result.natural, result.with_planned) == (False, False)

    def test_amount_larger_than_group_is_never_fulfilled(self):
        node = leaf(1, {"CS135"}, amount=3)
        result = evaluate(node, {"CS135"}, set())
        assert result.natural is False
        assert result.with_planned is False


class TestText:

    def test_text_is_never_natural(self):
        result = evaluate(TextNode(1, "co-op", 1), {"CS135"}, {"CS136"})
        assert result.natural is False
        assert result.with_planned is False
        assert result.state == UNFULFILLED

    def test_forced_text_is_displayed_fulfilled(self):
        result = evaluate(TextNode(1, "co-op", 1, forced=True), set(), set())
        assert result.fulfilled is True
        assert result.natural is False
        assert result.state == OVERRIDDEN


class TestBranch:

    def test_example_scenario(self):
        branch = first_year_branch()
        assert evaluate(branch, {"CS135"}, set()).natural is True
        assert evaluate(branch, set(), set()).natural is False

    @pytest.mark.parametrize("completed,expected", [
        ({"A", "B"}, True),
        ({"A", "B", "C"}, True),
        ({"A"}, False),
        (set(), False),
    ])
    def test_threshold(self, completed, expected):
        branch = BranchNode(10, "two of three", 2, children=[
            leaf(1, {"A"}), leaf(2, {"B"}), leaf(3, {"C"}),
        ])
        assert evaluate(branch, completed, set()).natural is expected

    def test_amount_larger_than_children_is_never_fulfilled(self):
        branch = BranchNode(10, "bad", 3, children=[leaf(1, {"A"}), leaf(2, {"B"})])
        result = evaluate(branch, {"A", "B"}, set())
        assert result.natural is False
        assert result.with_planned is False

    def test_forced_child_counts_only_for_with_planned(self):
        branch = BranchNode(10, "one of two", 1, children=[
            TextNode(1, "co-op", 1, forced=True),
            leaf(2, {"B"}),
        ])
        result = evaluate(branch, set(), set())
        assert result.natural is False
        assert result.with_planned is True
        assert result.state == PLANNED_FULFILLED

    def test_nested_branches(self):
        inner = BranchNode(20, "inner", 2, children=[leaf(1, {"A"}), leaf(2, {"B"})])
        outer = BranchNode(30, "outer", 1, children=[inner, leaf(3, {"C"})])
        assert evaluate(outer, {"A", "B"}, set()).natural is True
        assert evaluate(outer, {"A"}, set()).natural is False
        assert evaluate(outer, {"A"}, {"B"}).with_planned is True

    def test_children_results_follow_child_order(self):
        result = evaluate(first_year_branch(), {"MATH135"}, set())
        assert [r.node.id for r in result.children] == [1, 2]
        assert [r.natural for r in result.children] == [False, True]


class TestMonotonicity:

    def test_adding_completed_course_never_decreases_natural(self):
        tree = BranchNode(30, "outer", 2, children=[
            first_year_branch(),
            leaf(3, {"CS245", "CS246"}, amount=2),
            leaf(4, {"MATH137"}),
        ])
        courses = ["CS135", "MATH135", "CS245", "CS246", "MATH137", "CS999"]
        completed = set()
        previous = evaluate(tree, completed, set())
        for code in courses:
            completed.add(code)
            current = evaluate(tree, completed, set())
            assert current.natural >= previous.natural
            for before, after in zip(previous.children, current.children):
                assert after.natural >= before.natural
            previous = current
        assert previous.natural is True


class TestStateMachine:

    def test_states(self):
        assert evaluate(leaf(1, {"A"}), set(), set()).state == UNFULFILLED
        assert evaluate(leaf(1, {"A"}), {"A"}, set()).state == NATURALLY_FULFILLED
        assert evaluate(leaf(1, {"A"}), set(), {"A"}).state == PLANNED_FULFILLED
        assert evaluate(leaf(1, {"A"}, forced=True), set(), {"A"}).state == OVERRIDDEN

    def test_natural_wins_over_forced(self):
        result = evaluate(leaf(1, {"A"}, forced=True), {"A"}, set())
        assert result.state == NATURALLY_FULFILLED
        assert result.can_override is False

    def test_can_override_until_natural(self):
        assert evaluate(leaf(1, {"A"}), set(), {"A"}).can_override is True
        assert evaluate(leaf(1, {"A"}), {"A"}, set()).can_override is False

    def test_to_dict(self):
        payload = evaluate(leaf(1, {"A", "B"}, amount=2), {"A"}, {"B"}).to_dict()
        assert payload == {
            'natural': False,
            'with_planned': True,
            'fulfilled': False,
            'state': PLANNED_FULFILLED,
            'can_override': True,
            'completed_count': 1,
            'planned_count': 1,
        }


def test_unknown_node_type_raises():
    with pytest.raises(TypeError):
        evaluate(object(), set(), set())


def test_summarize():
    results = evaluate_tree(
        [leaf(1, {"A"}), leaf(2, {"B"}), TextNode(3, "co-op", 1, forced=True)],
        {"A"},
        {"B"},
    )
    assert summarize(results) == {
        'total': 3,
        'fulfilled': 2,
        'planned': 1,
        'complete': False,
    }


def test_summarize_empty_tree_is_not_complete():
    assert summarize([])['complete'] is False
