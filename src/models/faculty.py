"""
Faculty 数据模型
表示一个院系（如 CS、MATH），可以挂一个院系默认课程组
"""
from sqlalchemy import Column, String, Integer, ForeignKey
from sqlalchemy.orm import relationship
from . import Base


class Faculty(Base):
    """院系表"""
    __tablename__ = 'faculties'

    # 主键：院系代码
    name = Column(String(50), primary_key=True)  # "CS"

    # 院系默认课程组（该院系全部课程），模板和计划都可以直接引用
    course_group_id = Column(
        Integer,
        ForeignKey('course_groups.id', ondelete='SET NULL'),
        nullable=True,
        index=True
    )

    # 关系
    course_group = relationship("CourseGroup")
    courses = relationship(
        "Course",
        back_populates="faculty",
        order_by="Course.code"
    )

    def __repr__(self):
        return f"<Faculty {self.name} group={self.course_group_id}>"
