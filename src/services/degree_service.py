"""
Degree 业务逻辑服务
对外的学位读写入口：每个写操作一个事务，修改课程组前一律经过 PlanMaterializer
"""
import logging

from jsonschema import Draft7Validator

from database import transaction
from models import Plan, PlanRequirement
from repositories import CourseGroupRepository, CourseRepository, DegreeRepository
from .course_group_service import CourseGroupService
from .errors import (
    CourseNotFoundError, InvalidInputError, NotFoundError,
    RequirementNotFoundError,
)
from .evaluator import evaluate, evaluate_tree, summarize
from .plan_materializer import PlanMaterializer
from .requirement_tree import build_node, build_tree, serialize_node
from .schedule_service import ScheduleService

logger = logging.getLogger(__name__)

DEGREE_NONE = 'none'
DEGREE_TEMPLATE = 'template'
DEGREE_PLAN = 'plan'

# selectDegree 自定义 requirement 的格式
REQUIREMENT_OVERRIDES_SCHEMA = {
    'type': 'array',
    'items': {
        'type': 'object',
        'required': ['name', 'amount'],
        'additionalProperties': False,
        'properties': {
            'name': {'type': 'string', 'minLength': 1},
            'amount': {'type': 'integer', 'minimum': 0},
            'is_text': {'type': 'boolean'},
            'course_group_id': {'type': 'integer'},
            'faculty_group_ids': {'type': 'array', 'items': {'type': 'integer'}},
            'course_codes': {'type': 'array', 'items': {'type': 'string', 'minLength': 1}},
        },
    },
}


def validate_overrides(overrides):
    """
    校验自定义 requirement 列表

    Returns:
        list[str]: 校验错误，空列表表示通过
    """
    validator = Draft7Validator(REQUIREMENT_OVERRIDES_SCHEMA)
    messages = []
    for err in sorted(validator.iter_errors(overrides), key=lambda e: list(e.path)):
        path = ' -> '.join(str(p) for p in err.absolute_path) or '(root)'
        messages.append(f"[{path}] {err.message}")
    return messages


class DegreeService:
    """学位读写业务逻辑类"""

    def __init__(self, session):
        """
        初始化服务

        Args:
            session: SQLAlchemy 数据库会话
        """
        self.session = session
        self.degrees = DegreeRepository(session)
        self.courses = CourseRepository(session)
        self.groups = CourseGroupRepository(session)
        self.group_service = CourseGroupService(session)
        self.schedule = ScheduleService(session)
        self.materializer = PlanMaterializer(session)

    # ------------------------------------------------------------------
    # 读取
    # ------------------------------------------------------------------

    def get_degree_state(self, user_id, with_fulfillment=True):
        """
        用户当前学位要求树

        Returns:
            dict: {
                kind: "template" | "plan" | "none",
                template / plan: 基本信息,
                tree: [节点 dict],
                summary: {total, fulfilled, planned, complete}
            }
        """
        user = self.materializer.load_user(user_id)
        plan = self.materializer.get_plan(user)

        if plan is not None:
            rows = plan.root_requirements
            state = {
                'kind': DEGREE_PLAN,
                'plan': {
                    'id': plan.id,
                    'name': plan.name,
                    'template_name': plan.template_name,
                },
            }
        elif user.template_id is not None:
            template = self.materializer.get_template(user)
            rows = template.root_requirements
            state = {
                'kind': DEGREE_TEMPLATE,
                'template': {'id': template.id, 'name': template.name},
            }
        else:
            return {'kind': DEGREE_NONE, 'tree': [], 'summary': summarize([])}

        rows = sorted(rows, key=lambda r: r.id)
        if not with_fulfillment:
            state['tree'] = [serialize_node(row) for row in rows]
            return state

        completed, planned = self.schedule.get_course_sets(user_id)
        results = evaluate_tree(build_tree(rows), completed, planned)
        state['tree'] = [serialize_node(row, result) for row, result in zip(rows, results)]
        state['summary'] = summarize(results)
        return state

    def get_progress(self, user_id):
        """只要顶层统计（"学位是否完成"）"""
        return self.get_degree_state(user_id)['summary']

    # ------------------------------------------------------------------
    # 写操作
    # ------------------------------------------------------------------

    def add_course_to_requirement(self, user_id, course_code, group_id=None,
                                  requirement_id=None, term=None):
        """
        往 requirement 的课程组加一门课；给了 term 时同时排课

        加课和排课是一个整体，任一失败都整体回滚

        Returns:
            dict: {group_id, plan_id, requirement_id, course_code, term}

        Raises:
            AlreadyMemberError: 课程已在该组中
            CourseNotFoundError / RequirementNotFoundError / NoDegreeSelectedError 等
        """
        if not course_code or not isinstance(course_code, str):
            raise InvalidInputError(
                "courseCode (string) is required", errors=["course_code: required"]
            )

        with transaction(self.session):
            if not self.courses.exists(course_code):
                raise CourseNotFoundError(course_code)

            resolved = self.materializer.resolve_private_group(
                user_id, group_id=group_id, requirement_id=requirement_id
            )
            self.group_service.add_course(resolved.group, course_code)

            entry = None
            if term is not None:
                entry = self.schedule.place_course(user_id, course_code, term)

        logger.info(
            "用户 %s 向课程组 %s 添加 %s", user_id, resolved.group_id, course_code
        )
        return {
            'group_id': resolved.group_id,
            'plan_id': resolved.plan_id,
            'requirement_id': resolved.requirement_id,
            'course_code': course_code,
            'term': entry.term if entry is not None else None,
        }

    def remove_course_from_requirement(self, user_id, group_id, course_code, requirement_id=None):
        """
        从 requirement 的课程组删一门课（共享组会先拷贝成私有的）

        Returns:
            dict: {deleted, group_id, plan_id}

        Raises:
            NotAMemberError: 课程不在该组中
        """
        if not course_code or not isinstance(course_code, str):
            raise InvalidInputError(
                "courseCode (string) is required", errors=["course_code: required"]
            )

        with transaction(self.session):
            resolved = self.materializer.resolve_private_group(
                user_id, group_id=group_id, requirement_id=requirement_id
            )
            self.group_service.remove_course(resolved.group, course_code)

        logger.info(
            "用户 %s 从课程组 %s 删除 %s", user_id, resolved.group_id, course_code
        )
        return {
            'deleted': course_code,
            'group_id': resolved.group_id,
            'plan_id': resolved.plan_id,
        }

    def set_force_completed(self, user_id, requirement_id, value):
        """
        手动标记 / 取消标记节点完成

        用户还在用模板时先整树拷贝；requirement_id 可以是模板节点 id

        Raises:
            InvalidInputError: value 不是 bool，或节点已自然满足却要标记完成
        """
        if not isinstance(value, bool):
            raise InvalidInputError(
                "forceCompleted (boolean) is required", errors=["force_completed: boolean required"]
            )

        with transaction(self.session):
            user, plan, id_map = self.materializer.ensure_plan(user_id)
            plan_requirement_id = (
                id_map.requirements.get(requirement_id) if id_map is not None else requirement_id
            )
            requirement = (
                self.degrees.get_plan_requirement(plan.id, plan_requirement_id)
                if plan_requirement_id is not None else None
            )
            if requirement is None:
                raise RequirementNotFoundError(requirement_id=requirement_id)

            completed, planned = self.schedule.get_course_sets(user_id)
            if value and evaluate(build_node(requirement), completed, planned).natural:
                raise InvalidInputError(
                    "Requirement is already fulfilled", requirement_id=requirement.id
                )

            requirement.force_completed = value
            self.session.flush()

        result = evaluate(build_node(requirement), completed, planned)
        return {'plan_id': plan.id, 'node': serialize_node(requirement, result)}

    def select_degree(self, user_id, template_id, overrides=None, name=None):
        """
        选择（或重选）学位

        旧计划整体删除并回收其私有课程组；
        - 不带 overrides：直接使用模板
        - 带 overrides：按调用方给的 requirement 新建计划

        overrides 每项：{name, amount, is_text?, course_group_id?,
                         faculty_group_ids?, course_codes?}

        Returns:
            dict: 新的 get_degree_state
        """
        overrides = list(overrides or [])
        errors = validate_overrides(overrides)
        if errors:
            raise InvalidInputError("Invalid requirements", errors=errors)

        with transaction(self.session):
            user = self.materializer.load_user(user_id)
            template = self.degrees.get_template(template_id)
            if template is None:
                raise NotFoundError(f"Template {template_id} not found", template_id=template_id)

            self.materializer.delete_plan(user)

            if not overrides:
                user.template_id = template.id
                self.session.flush()
                logger.info("用户 %s 选择模板 %s", user_id, template.id)
            else:
                self._create_custom_plan(user, template, overrides, name)

        return self.get_degree_state(user_id)

    def _create_custom_plan(self, user, template, overrides, name):
        plan = Plan(
            name=name or f"{template.name} (Custom)",
            template_name=template.name,
            template_id=template.id,
            is_materialized=False,
        )
        user.plan = plan
        self.session.flush()

        for override in overrides:
            is_text = override.get('is_text', False)
            group = None if is_text else self._resolve_override_group(override)
            plan.requirements.append(PlanRequirement(
                name=override['name'],
                amount=override['amount'],
                is_text=is_text,
                force_completed=False,
                course_group=group,
            ))

        user.template_id = None
        plan.is_materialized = True
        self.session.flush()
        logger.info(
            "用户 %s 自定义计划 %s（%d 个 requirement）", user.id, plan.id, len(overrides)
        )
        return plan

    def _resolve_override_group(self, override):
        """
        自定义 requirement 的课程组：
        - 指定 course_group_id：共享组直接引用（修改时再拷贝），其他组拷贝一份
        - 只有一个组且没有单独课程：同上，共享组直接引用，其他组拷贝
        - 其他情况：各组成员 ∪ course_codes 建一个新组

        计划里的组要么是私有的，要么被模板 / 院系共享，不会直接引用别人的普通组
        """
        if override.get('course_group_id') is not None:
            return self._shared_or_copy(override['course_group_id'])

        faculty_group_ids = override.get('faculty_group_ids') or []
        course_codes = override.get('course_codes') or []

        if len(faculty_group_ids) == 1 and not course_codes:
            return self._shared_or_copy(faculty_group_ids[0])

        codes = set(course_codes)
        for group_id in faculty_group_ids:
            codes |= self.group_service.get_group(group_id).course_codes

        if not codes:
            return None
        return self.group_service.create_group(override['name'], codes)

    def _shared_or_copy(self, group_id):
        group = self.group_service.get_group(group_id)
        if self.groups.is_shared(group.id):
            return group
        return self.group_service.clone_group(group)
