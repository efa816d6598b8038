"""
计划数据完整性检查

只读，不修复。检查项：
- 未完成拷贝的计划（is_materialized = False）
- 同一个课程组被多个计划引用（私有组被共享了）
- 没有任何引用的课程组（泄漏）
- 用户 template_id 指向不存在的模板
"""
import logging
from collections import defaultdict

from models import PlanRequirement, Template, User
from repositories import CourseGroupRepository, DegreeRepository

logger = logging.getLogger(__name__)


class PlanIntegrityChecker:
    """计划 / 课程组完整性检查器"""

    def __init__(self, session):
        self.session = session
        self.degrees = DegreeRepository(session)
        self.groups = CourseGroupRepository(session)

        # 问题记录
        self.issues = {
            'incomplete_plans': [],
            'groups_shared_across_plans': [],
            'leaked_groups': [],
            'dangling_templates': [],
        }

    @property
    def has_issues(self):
        return any(self.issues.values())

    def run(self):
        """
        运行全部检查

        Returns:
            dict: 每类问题一个列表
        """
        for key in self.issues:
            self.issues[key] = []

        self._check_incomplete_plans()
        self._check_shared_plan_groups()
        self._check_leaked_groups()
        self._check_dangling_templates()

        if self.has_issues:
            logger.warning(
                "完整性检查发现问题: %s",
                {key: len(value) for key, value in self.issues.items() if value}
            )
        else:
            logger.info("完整性检查通过")
        return self.issues

    def _check_incomplete_plans(self):
        for plan in self.degrees.list_plans():
            if not plan.is_materialized:
                self.issues['incomplete_plans'].append({
                    'plan_id': plan.id,
                    'user_id': plan.user_id,
                })

    def _check_shared_plan_groups(self):
        plans_by_group = defaultdict(set)
        rows = (
            self.session.query(PlanRequirement.course_group_id, PlanRequirement.plan_id)
            .filter(PlanRequirement.course_group_id.isnot(None))
            .all()
        )
        for group_id, plan_id in rows:
            plans_by_group[group_id].add(plan_id)

        for group_id in sorted(plans_by_group):
            plan_ids = plans_by_group[group_id]
            if len(plan_ids) > 1:
                self.issues['groups_shared_across_plans'].append({
                    'group_id': group_id,
                    'plan_ids': sorted(plan_ids),
                })

    def _check_leaked_groups(self):
        for group in self.groups.unreferenced():
            self.issues['leaked_groups'].append({
                'group_id': group.id,
                'name': group.name,
            })

    def _check_dangling_templates(self):
        rows = (
            self.session.query(User.id, User.template_id)
            .outerjoin(Template, User.template_id == Template.id)
            .filter(User.template_id.isnot(None), Template.id.is_(None))
            .order_by(User.id)
            .all()
        )
        for user_id, template_id in rows:
            self.issues['dangling_templates'].append({
                'user_id': user_id,
                'template_id': template_id,
            })
