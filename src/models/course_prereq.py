"""
CoursePrereq 数据模型
先修关系（有向边，不保证无环）
"""
from sqlalchemy import Column, String, ForeignKey, PrimaryKeyConstraint
from sqlalchemy.orm import relationship
from . import Base


class CoursePrereq(Base):
    """先修关系表"""
    __tablename__ = 'course_prereqs'

    course_code = Column(
        String(20),
        ForeignKey('courses.code', ondelete='CASCADE'),
        nullable=False
    )
    prereq_code = Column(
        String(20),
        ForeignKey('courses.code', ondelete='CASCADE'),
        nullable=False,
        index=True
    )

    # 关系
    course = relationship("Course", foreign_keys=[course_code], back_populates="prereqs")
    prereq = relationship("Course", foreign_keys=[prereq_code])

    __table_args__ = (
        PrimaryKeyConstraint('course_code', 'prereq_code'),
    )

    def __repr__(self):
        return f"<CoursePrereq {self.prereq_code} → {self.course_code}>"
