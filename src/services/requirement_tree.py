"""
Requirement 树的只读视图

把 ORM 行（Requirement / PlanRequirement）转换成三种不可变节点：
TextNode / LeafNode / BranchNode。Evaluator 只认这三种，
新增形状时必须在 evaluator 里显式处理
"""
from config import settings
from models.requirement_node import NODE_TEXT, NODE_LEAF, NODE_BRANCH
from .errors import TreeDepthError


class _Node:
    __slots__ = ('id', 'name', 'amount', 'forced')

    def __init__(self, id, name, amount, forced=False):
        self.id = id
        self.name = name
        self.amount = amount
        self.forced = bool(forced)


class TextNode(_Node):
    """说明性节点，只能手动标记完成"""

    __slots__ = ()
    kind = NODE_TEXT

    def __repr__(self):
        return f"<TextNode {self.id}: {self.name}>"


class LeafNode(_Node):
    """
    课程池节点

    group_id / members 为 None 表示还没有课程组（还没加过课）
    """

    __slots__ = ('group_id', 'members')
    kind = NODE_LEAF

    def __init__(self, id, name, amount, forced=False, group_id=None, members=None):
        super().__init__(id, name, amount, forced)
        self.group_id = group_id
        self.members = frozenset(members) if members is not None else None

    def __repr__(self):
        size = len(self.members) if self.members is not None else '-'
        return f"<LeafNode {self.id}: {self.name} pick {self.amount} of {size}>"


class BranchNode(_Node):
    """子节点满足 amount 个即满足"""

    __slots__ = ('children',)
    kind = NODE_BRANCH

    def __init__(self, id, name, amount, forced=False, children=()):
        super().__init__(id, name, amount, forced)
        self.children = tuple(children)

    def __repr__(self):
        return f"<BranchNode {self.id}: {self.name} pick {self.amount} of {len(self.children)}>"


def build_node(row, max_depth=None, _depth=1):
    """
    递归转换一个 ORM 节点

    Args:
        row: Requirement 或 PlanRequirement
        max_depth: 深度上限，默认取配置 MAX_TREE_DEPTH

    Returns:
        TextNode | LeafNode | BranchNode

    Raises:
        TreeDepthError: 超过深度上限（通常意味着脏数据里有环）
    """
    if max_depth is None:
        max_depth = settings.max_tree_depth
    if _depth > max_depth:
        raise TreeDepthError(row.id, max_depth)

    forced = bool(row.force_completed)

    if row.kind == NODE_TEXT:
        return TextNode(row.id, row.name, row.amount, forced)

    if row.kind == NODE_BRANCH:
        children = [
            build_node(child, max_depth, _depth + 1)
            for child in row.sorted_children
        ]
        return BranchNode(row.id, row.name, row.amount, forced, children)

    group = row.course_group
    if group is None:
        return LeafNode(row.id, row.name, row.amount, forced)
    return LeafNode(
        row.id, row.name, row.amount, forced,
        group_id=group.id,
        members=group.course_codes
    )


def build_tree(rows, max_depth=None):
    """转换一组顶层节点（按 id 排序）"""
    return [build_node(row, max_depth) for row in sorted(rows, key=lambda r: r.id)]


def serialize_group(group):
    if group is None:
        return None
    return {
        'id': group.id,
        'name': group.name,
        'course_codes': sorted(group.course_codes),
    }


def serialize_node(row, result=None):
    """
    ORM 节点 -> dict，带完整子树和课程组成员

    Args:
        row: Requirement / PlanRequirement
        result: 对应的 Fulfillment，None 表示不带完成度
    """
    children = row.sorted_children
    child_results = result.children if result is not None and result.children else [None] * len(children)
    payload = {
        'id': row.id,
        'name': row.name,
        'amount': row.amount,
        'kind': row.kind,
        'is_text': row.is_text,
        'force_completed': bool(row.force_completed),
        'course_group_id': row.course_group_id,
        'course_group': serialize_group(row.course_group),
        'children': [
            serialize_node(child, child_result)
            for child, child_result in zip(children, child_results)
        ],
    }
    if result is not None:
        payload['fulfillment'] = result.to_dict()
    return payload

