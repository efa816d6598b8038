"""
Course 数据模型
课程目录中的一门课，只读参考数据
"""
from sqlalchemy import Column, String, Integer, ForeignKey
from sqlalchemy.orm import relationship
from . import Base


class Course(Base):
    """课程表"""
    __tablename__ = 'courses'

    # 主键：课程代码，如 "CS135"
    code = Column(String(20), primary_key=True)

    # 基本信息
    title = Column(String(255), nullable=False)
    faculty_name = Column(
        String(50),
        ForeignKey('faculties.name', ondelete='SET NULL'),
        nullable=True,
        index=True
    )
    level = Column(Integer, nullable=False, default=0)  # 100 / 200 / ...

    # 关系
    faculty = relationship("Faculty", back_populates="courses")

    # 先修边：本课程 → 先修课程
    prereqs = relationship(
        "CoursePrereq",
        foreign_keys="CoursePrereq.course_code",
        back_populates="course",
        cascade="all, delete-orphan"
    )

    @property
    def prerequisite_codes(self):
        """先修课程代码集合"""
        return {p.prereq_code for p in self.prereqs}

    def __repr__(self):
        return f"<Course {self.code}: {self.title}>"

    def __str__(self):
        return f"{self.code} - {self.title}"
