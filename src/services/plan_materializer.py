"""
Plan 物化（copy-on-write）

学生第一次修改学位要求时，把共享数据拷贝成私有的，并且只拷贝一次：

1. 学生还在直接使用模板：把整棵模板树（含每个课程组）拷贝进新 Plan，
   用 IdMap 把调用方传入的模板 id 翻译成计划里的 id
2. 学生已有 Plan：
   - 节点还没有课程组：新建一个私有组挂上去
   - 课程组是私有的：直接返回
   - 课程组还被模板 / 院系引用（共享）：只拷贝这一个组并改指向

任何路径都不会写模板或共享课程组。这里只 flush 不提交，
调用方用 database.transaction() 包住整个写操作，
拷贝到一半失败时整个事务回滚，不会留下半棵树
"""
import logging

from config import settings
from models import Plan, PlanRequirement
from models.requirement_node import NODE_BRANCH
from repositories import CourseGroupRepository, DegreeRepository
from .course_group_service import CourseGroupService
from .errors import (
    InvalidInputError, NoDegreeSelectedError, PlanIncompleteError,
    RequirementNotFoundError, TemplateNotFoundError, TreeDepthError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


class IdMap:
    """
    整树拷贝时的 旧 id -> 新 id 映射

    一个模板课程组可能被多个节点引用，每个节点都会得到自己的拷贝；
    按课程组查找时取 id 最小的那个节点
    """

    def __init__(self):
        self._pairs = []
        self.requirements = {}
        self.groups = {}
        self._requirement_by_group = {}

    def add(self, source, copy):
        self._pairs.append((source, copy))

    def resolve(self):
        """flush 之后调用，此时新对象都有 id 了"""
        for source, copy in sorted(self._pairs, key=lambda pair: pair[0].id):
            self.requirements[source.id] = copy.id
            if source.course_group_id is not None and source.course_group_id not in self.groups:
                self.groups[source.course_group_id] = copy.course_group_id
                self._requirement_by_group[source.course_group_id] = copy.id

    def requirement_for_group(self, group_id):
        return self._requirement_by_group.get(group_id)

    def __len__(self):
        return len(self._pairs)


class ResolvedGroup:
    """resolve_private_group 的结果：可以安全原地修改的课程组"""

    def __init__(self, plan, requirement, group, forked_plan=False, cloned_group=False, created_group=False):
        self.plan = plan
        self.requirement = requirement
        self.group = group
        self.forked_plan = forked_plan
        self.cloned_group = cloned_group
        self.created_group = created_group

    @property
    def plan_id(self):
        return self.plan.id

    @property
    def group_id(self):
        return self.group.id

    @property
    def requirement_id(self):
        return self.requirement.id

    def __repr__(self):
        return f"<ResolvedGroup plan={self.plan_id} req={self.requirement_id} group={self.group_id}>"


class PlanMaterializer:
    """copy-on-write 物化器，所有修改课程组的操作都必须先经过这里"""

    def __init__(self, session, max_depth=None):
        self.session = session
        self.degrees = DegreeRepository(session)
        self.groups = CourseGroupRepository(session)
        self.group_service = CourseGroupService(session)
        self.max_depth = max_depth or settings.max_tree_depth

    # ------------------------------------------------------------------
    # 读取
    # ------------------------------------------------------------------

    def load_user(self, user_id):
        user = self.degrees.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def get_plan(self, user):
        """
        返回用户的计划，没有则 None

        Raises:
            PlanIncompleteError: 计划带着未完成标记（上次拷贝中途失败）
        """
        plan = user.plan
        if plan is not None and not plan.is_materialized:
            raise PlanIncompleteError(plan.id)
        return plan

    def get_template(self, user):
        """
        Raises:
            TemplateNotFoundError: template_id 指向不存在的模板
        """
        template = self.degrees.get_template(user.template_id)
        if template is None:
            raise TemplateNotFoundError(user.template_id)
        return template

    # ------------------------------------------------------------------
    # 整树拷贝
    # ------------------------------------------------------------------

    def fork_template(self, user):
        """
        把用户当前模板整棵拷贝成私有计划

        先打未完成标记，全部节点和课程组拷完后才清掉

        Returns:
            tuple: (Plan, IdMap)
        """
        template = self.get_template(user)

        plan = Plan(
            name=f"{template.name} (Custom)",
            template_name=template.name,
            template_id=template.id,
            is_materialized=False,
        )
        user.plan = plan
        self.session.flush()

        id_map = IdMap()
        self._copy_nodes(plan, template.root_requirements, None, id_map, depth=1)
        self.session.flush()
        id_map.resolve()

        user.template_id = None
        plan.is_materialized = True
        self.session.flush()

        logger.info(
            "用户 %s 从模板 %s 拷贝出计划 %s（%d 个节点）",
            user.id, template.id, plan.id, len(id_map)
        )
        return plan, id_map

    def _copy_nodes(self, plan, nodes, parent, id_map, depth):
        if nodes and depth > self.max_depth:
            raise TreeDepthError(nodes[0].id, self.max_depth)

        for node in sorted(nodes, key=lambda n: n.id):
            group = None
            if node.course_group is not None:
                group = self.group_service.clone_group(node.course_group)

            copy = PlanRequirement(
                name=node.name,
                amount=node.amount,
                is_text=node.is_text,
                force_completed=False,
                course_group=group,
            )
            copy.parent = parent
            plan.requirements.append(copy)
            id_map.add(node, copy)

            self._copy_nodes(plan, node.sorted_children, copy, id_map, depth + 1)

    def ensure_plan(self, user_id):
        """
        确保用户有私有计划，必要时从模板拷贝

        Returns:
            tuple: (User, Plan, IdMap | None)，IdMap 仅在本次发生拷贝时返回

        Raises:
            UserNotFoundError / NoDegreeSelectedError / TemplateNotFoundError
        """
        user = self.load_user(user_id)
        plan = self.get_plan(user)
        if plan is not None:
            return user, plan, None
        if user.template_id is not None:
            plan, id_map = self.fork_template(user)
            return user, plan, id_map
        raise NoDegreeSelectedError(user_id)

    # ------------------------------------------------------------------
    # 单个课程组
    # ------------------------------------------------------------------

    def find_plan_requirement(self, plan, group_id=None, requirement_id=None):
        """按节点 id 或课程组 id 在计划里找节点"""
        if requirement_id is not None:
            return self.degrees.get_plan_requirement(plan.id, requirement_id)
        return self.degrees.find_plan_requirement_by_group(plan.id, group_id)

    def translate_requirement(self, id_map, group_id=None, requirement_id=None):
        """把调用方传的模板 id 翻译成刚拷贝出的计划节点 id"""
        if requirement_id is not None:
            return id_map.requirements.get(requirement_id)
        return id_map.requirement_for_group(group_id)

    def resolve_requirement(self, user_id, group_id=None, requirement_id=None):
        """
        找到用户计划里的目标节点（必要时先整树拷贝）

        Returns:
            tuple: (Plan, PlanRequirement, forked: bool)
        """
        if (group_id is None) == (requirement_id is None):
            raise InvalidInputError(
                "Exactly one of group_id / requirement_id is required",
                errors=["group_id|requirement_id: exactly one required"]
            )

        user, plan, id_map = self.ensure_plan(user_id)

        if id_map is not None:
            plan_requirement_id = self.translate_requirement(id_map, group_id, requirement_id)
            requirement = (
                self.degrees.get_plan_requirement(plan.id, plan_requirement_id)
                if plan_requirement_id is not None else None
            )
        else:
            requirement = self.find_plan_requirement(plan, group_id, requirement_id)

        if requirement is None:
            raise RequirementNotFoundError(
                group_id=group_id, requirement_id=requirement_id
            )
        return plan, requirement, id_map is not None

    def is_private(self, plan, group):
        """只被本计划引用的组才能原地修改"""
        if self.groups.is_shared(group.id):
            return False
        return self.groups.plan_reference_count(group.id, exclude_plan_id=plan.id) == 0

    def resolve_private_group(self, user_id, group_id=None, requirement_id=None):
        """
        返回用户可以原地修改的课程组，按需做最少的拷贝

        Args:
            user_id: 用户 ID
            group_id: 课程组 ID（与 requirement_id 二选一）
            requirement_id: 节点 ID（text 节点 / 还没有课程组的 leaf 用这个）

        Returns:
            ResolvedGroup

        Raises:
            UserNotFoundError, NoDegreeSelectedError, RequirementNotFoundError,
            TemplateNotFoundError, InvalidInputError（目标是 branch 节点）
        """
        plan, requirement, forked = self.resolve_requirement(user_id, group_id, requirement_id)

        if requirement.kind == NODE_BRANCH:
            raise InvalidInputError(
                "Courses can only be added to a requirement without sub-requirements",
                requirement_id=requirement.id
            )

        group = requirement.course_group
        if group is None:
            group = self.group_service.create_group(requirement.name)
            requirement.course_group = group
            self.session.flush()
            logger.info("计划 %s 节点 %s 新建私有课程组 %s", plan.id, requirement.id, group.id)
            return ResolvedGroup(plan, requirement, group, forked_plan=forked, created_group=True)

        if self.is_private(plan, group):
            return ResolvedGroup(plan, requirement, group, forked_plan=forked)

        copy = self.group_service.clone_group(group)
        requirement.course_group = copy
        self.session.flush()
        logger.info(
            "计划 %s 节点 %s 拷贝共享课程组 %s -> %s",
            plan.id, requirement.id, group.id, copy.id
        )
        return ResolvedGroup(plan, requirement, copy, forked_plan=forked, cloned_group=True)

    # ------------------------------------------------------------------
    # 删除
    # ------------------------------------------------------------------

    def delete_plan(self, user):
        """
        删除用户计划，并回收只属于它的课程组

        仍被模板 / 院系 / 其他计划引用的组不会删除

        Returns:
            list: 被删除的课程组 ID
        """
        plan = user.plan
        if plan is None:
            return []

        plan_id = plan.id
        group_ids = {r.course_group_id for r in plan.requirements if r.course_group_id is not None}

        user.plan = None
        self.session.flush()

        protected = self.groups.protected_ids(group_ids)
        deleted = []
        for group_id in sorted(group_ids - protected):
            group = self.groups.get(group_id)
            if group is not None:
                self.groups.delete(group)
                deleted.append(group_id)

        logger.info("删除计划 %s，回收 %d 个私有课程组", plan_id, len(deleted))
        return deleted
