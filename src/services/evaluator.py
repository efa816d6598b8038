"""
Requirement 树完成度计算

纯函数，没有副作用，对任何结构合法的树都不会抛异常。
amount 超过子节点数 / 课程数的节点只是永远不满足。

每个节点给出两组值：
- natural：只看已修课程，忽略手动标记
- with_planned：已修 + 计划中的课程；branch 节点里手动标记完成的子节点也计入

force_completed 只影响显示值 fulfilled，不改变 natural / with_planned
"""
from .requirement_tree import TextNode, LeafNode, BranchNode

# 节点状态
UNFULFILLED = 'unfulfilled'
NATURALLY_FULFILLED = 'naturally_fulfilled'
PLANNED_FULFILLED = 'planned_fulfilled'
OVERRIDDEN = 'overridden'


class Fulfillment:
    """一个节点的计算结果（含子节点结果）"""

    __slots__ = ('node', 'natural', 'with_planned',
                 'completed_count', 'planned_count', 'children')

    def __init__(self, node, natural, with_planned,
                 completed_count=None, planned_count=None, children=()):
        self.node = node
        self.natural = natural
        self.with_planned = with_planned
        self.completed_count = completed_count
        self.planned_count = planned_count
        self.children = tuple(children)

    @property
    def forced(self):
        return self.node.forced

    @property
    def fulfilled(self):
        """显示用的完成状态"""
        return self.natural or self.forced

    @property
    def fulfilled_with_planned(self):
        return self.with_planned or self.forced

    @property
    def can_override(self):
        # 已经自然满足时手动标记没有意义，前端应禁用
        return not self.natural

    @property
    def state(self):
        if self.natural:
            return NATURALLY_FULFILLED
        if self.forced:
            return OVERRIDDEN
        if self.with_planned:
            return PLANNED_FULFILLED
        return UNFULFILLED

    def to_dict(self):
        payload = {
            'natural': self.natural,
            'with_planned': self.with_planned,
            'fulfilled': self.fulfilled,
            'state': self.state,
            'can_override': self.can_override,
        }
        if self.completed_count is not None:
            payload['completed_count'] = self.completed_count
            payload['planned_count'] = self.planned_count
        return payload

    def __repr__(self):
        return f"<Fulfillment {self.node.id} {self.state}>"


def evaluate(node, completed, planned):
    """
    计算一个节点（递归计算子节点）

    Args:
        node: TextNode / LeafNode / BranchNode
        completed: 已修课程代码集合
        planned: 计划中课程代码集合

    Returns:
        Fulfillment
    """
    if isinstance(node, TextNode):
        return Fulfillment(node, natural=False, with_planned=False)

    if isinstance(node, LeafNode):
        if node.members is None:
            return Fulfillment(node, False, False, completed_count=0, planned_count=0)
        done = node.members & completed
        # 同一门课不会既已修又计划中，这里仍然去重
        upcoming = (node.members & planned) - done
        c, p = len(done), len(upcoming)
        return Fulfillment(
            node,
            natural=c >= node.amount,
            with_planned=(c + p) >= node.amount,
            completed_count=c,
            planned_count=p,
        )

    if isinstance(node, BranchNode):
        results = [evaluate(child, completed, planned) for child in node.children]
        natural_count = sum(1 for r in results if r.natural)
        planned_count = sum(1 for r in results if r.with_planned or r.forced)
        return Fulfillment(
            node,
            natural=natural_count >= node.amount,
            with_planned=planned_count >= node.amount,
            children=results,
        )

    raise TypeError(f"Unknown requirement node type: {type(node).__name__}")


def evaluate_tree(nodes, completed, planned):
    """计算一组顶层节点"""
    completed = frozenset(completed)
    planned = frozenset(planned)
    return [evaluate(node, completed, planned) for node in nodes]


def summarize(results):
    """
    顶层节点统计

    Returns:
        dict: total / fulfilled / planned（只靠计划中课程才满足的个数）/ complete
    """
    total = len(results)
    fulfilled = sum(1 for r in results if r.fulfilled)
    planned = sum(1 for r in results if r.fulfilled_with_planned and not r.fulfilled)
    return {
        'total': total,
        'fulfilled': fulfilled,
        'planned': planned,
        'complete': total > 0 and fulfilled == total,
    }
