"""
CourseGroup 数据模型
一组课程代码（无序集合），作为 leaf requirement 的可选课程池

多个 requirement 可以引用同一个 course group（共享），
是否共享通过统计引用它的行数判断，见 CourseGroupRepository
"""
from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from . import Base


class CourseGroup(Base):
    """课程组表"""
    __tablename__ = 'course_groups'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)

    # 成员课程，删除课程组时级联删除
    links = relationship(
        "CourseGroupLink",
        back_populates="group",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CourseGroupLink.course_code"
    )

    @property
    def course_codes(self):
        """成员课程代码集合"""
        return {link.course_code for link in self.links}

    def has_course(self, course_code):
        return any(link.course_code == course_code for link in self.links)

    def __repr__(self):
        return f"<CourseGroup {self.id}: {self.name} ({len(self.links)} courses)>"
