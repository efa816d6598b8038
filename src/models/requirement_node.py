"""
Requirement 树节点的公共行为
模板节点（Requirement）和计划节点（PlanRequirement）结构相同，只是归属不同

节点按形状分三种：
- text：说明性文字，没有课程组也没有子节点，只能通过 force_completed 完成
- leaf：挂一个课程组（首次加课前可以为空），没有子节点
- branch：至少一个子节点，不挂课程组
"""

NODE_TEXT = 'text'
NODE_LEAF = 'leaf'
NODE_BRANCH = 'branch'


class RequirementNodeMixin:
    """两种节点表共用的形状判断"""

    # 模板节点没有这一列，永远是 False
    force_completed = False

    @property
    def kind(self):
        if self.is_text:
            return NODE_TEXT
        if self.children:
            return NODE_BRANCH
        return NODE_LEAF

    @property
    def sorted_children(self):
        return sorted(self.children, key=lambda child: child.id)

    def walk(self):
        """前序遍历自身及全部后代"""
        yield self
        for child in self.sorted_children:
            yield from child.walk()

    def __str__(self):
        return f"{self.name} [{self.kind}] (amount {self.amount})"
