"""
学位相关数据访问层：用户、模板、计划及其 requirement 节点
"""
from models import User, Template, Plan, PlanRequirement


class DegreeRepository:
    """用户 / 模板 / 计划数据访问类"""

    def __init__(self, session):
        self.session = session

    # ------------------------------------------------------------------
    # User
    # ------------------------------------------------------------------

    def get_user(self, user_id):
        return self.session.get(User, user_id)

    # ------------------------------------------------------------------
    # Template
    # ------------------------------------------------------------------

    def get_template(self, template_id):
        return self.session.get(Template, template_id)

    def get_template_by_name(self, name):
        return self.session.query(Template).filter(Template.name == name).first()

    def list_templates(self):
        return self.session.query(Template).order_by(Template.name).all()

    # ------------------------------------------------------------------
    # Plan
    # ------------------------------------------------------------------

    def get_plan_requirement(self, plan_id, requirement_id):
        """只返回属于该计划的节点"""
        return (
            self.session.query(PlanRequirement)
            .filter(
                PlanRequirement.id == requirement_id,
                PlanRequirement.plan_id == plan_id
            )
            .first()
        )

    def find_plan_requirement_by_group(self, plan_id, group_id):
        """该计划中引用某课程组的第一个节点（按 id）"""
        return (
            self.session.query(PlanRequirement)
            .filter(
                PlanRequirement.plan_id == plan_id,
                PlanRequirement.course_group_id == group_id
            )
            .order_by(PlanRequirement.id)
            .first()
        )

    def list_plans(self):
        return self.session.query(Plan).order_by(Plan.id).all()
