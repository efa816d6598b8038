"""
TermCourse 数据模型
学生把某门课排进某个学期，(user_id, course_code) 唯一
"""
from sqlalchemy import Column, String, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from . import Base


class TermCourse(Base):
    """学生课表表"""
    __tablename__ = 'term_courses'

    id = Column(Integer, primary_key=True, autoincrement=True)

    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    course_code = Column(String(20), ForeignKey('courses.code', ondelete='RESTRICT'), nullable=False)
    term = Column(String(2), nullable=False)  # "1A" .. "4B"

    # 关系
    user = relationship("User", back_populates="term_courses")
    course = relationship("Course")

    __table_args__ = (
        UniqueConstraint('user_id', 'course_code', name='uq_term_course_user_course'),
    )

    def __repr__(self):
        return f"<TermCourse user={self.user_id} {self.course_code} @ {self.term}>"
