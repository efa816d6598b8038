"""
CourseGroupLink 数据模型
课程组成员关系，(group_id, course_code) 唯一
"""
from sqlalchemy import Column, Integer, String, ForeignKey, PrimaryKeyConstraint
from sqlalchemy.orm import relationship
from . import Base


class CourseGroupLink(Base):
    """课程组-课程关联表"""
    __tablename__ = 'course_group_links'

    group_id = Column(
        Integer,
        ForeignKey('course_groups.id', ondelete='CASCADE'),
        nullable=False
    )
    course_code = Column(
        String(20),
        ForeignKey('courses.code', ondelete='CASCADE'),
        nullable=False,
        index=True
    )

    # 关系
    group = relationship("CourseGroup", back_populates="links")
    course = relationship("Course")

    __table_args__ = (
        PrimaryKeyConstraint('group_id', 'course_code'),
    )

    def __repr__(self):
        return f"<CourseGroupLink {self.group_id} → {self.course_code}>"
