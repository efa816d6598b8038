"""
CourseGroup 数据访问层

"是否共享" 用引用行数判断：被任一模板 requirement 或院系默认组引用即为共享
"""
from sqlalchemy import func
from models import CourseGroup, CourseGroupLink, Requirement, PlanRequirement, Faculty


class CourseGroupRepository:
    """CourseGroup 数据访问类"""

    def __init__(self, session):
        self.session = session

    def get(self, group_id):
        return self.session.get(CourseGroup, group_id)

    def list_all(self):
        return self.session.query(CourseGroup).order_by(CourseGroup.name, CourseGroup.id).all()

    def add(self, group):
        self.session.add(group)
        self.session.flush()
        return group

    def delete(self, group):
        self.session.delete(group)
        self.session.flush()

    def get_link(self, group_id, course_code):
        return self.session.get(CourseGroupLink, (group_id, course_code))

    def template_reference_count(self, group_id):
        """有多少模板 requirement 引用这个组"""
        return (
            self.session.query(func.count(Requirement.id))
            .filter(Requirement.course_group_id == group_id)
            .scalar()
        )

    def faculty_reference_count(self, group_id):
        """有多少院系把它当默认组"""
        return (
            self.session.query(func.count(Faculty.name))
            .filter(Faculty.course_group_id == group_id)
            .scalar()
        )

    def plan_reference_count(self, group_id, exclude_plan_id=None):
        """有多少计划节点引用这个组"""
        q = (
            self.session.query(func.count(PlanRequirement.id))
            .filter(PlanRequirement.course_group_id == group_id)
        )
        if exclude_plan_id is not None:
            q = q.filter(PlanRequirement.plan_id != exclude_plan_id)
        return q.scalar()

    def is_shared(self, group_id):
        """被模板或院系引用的组对学生只读"""
        return (
            self.template_reference_count(group_id) > 0
            or self.faculty_reference_count(group_id) > 0
        )

    def protected_ids(self, group_ids):
        """
        在给定的组里找出仍被模板 / 院系 / 计划引用、不能删除的组

        Args:
            group_ids: 课程组 ID 集合

        Returns:
            set: 受保护的组 ID
        """
        ids = set(group_ids)
        if not ids:
            return set()
        protected = set()
        for column in (Requirement.course_group_id,
                       Faculty.course_group_id,
                       PlanRequirement.course_group_id):
            rows = self.session.query(column).filter(column.in_(ids)).distinct().all()
            protected.update(row[0] for row in rows)
        return protected

    def unreferenced(self):
        """没有任何 requirement / 院系引用的组"""
        referenced = set()
        for column in (Requirement.course_group_id,
                       Faculty.course_group_id,
                       PlanRequirement.course_group_id):
            rows = self.session.query(column).filter(column.isnot(None)).distinct().all()
            referenced.update(row[0] for row in rows)
        return [g for g in self.list_all() if g.id not in referenced]
