"""
Requirement 数据模型
模板（Template）中的 requirement 树节点
"""
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from . import Base
from .requirement_node import RequirementNodeMixin


class Requirement(RequirementNodeMixin, Base):
    """模板 requirement 节点表"""
    __tablename__ = 'requirements'

    id = Column(Integer, primary_key=True, autoincrement=True)

    # 外键：所属模板
    template_id = Column(
        Integer,
        ForeignKey('templates.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )

    # 父节点，NULL 表示顶层
    parent_id = Column(
        Integer,
        ForeignKey('requirements.id', ondelete='CASCADE'),
        nullable=True,
        index=True
    )

    # 节点信息
    name = Column(String(255), nullable=False)
    amount = Column(Integer, nullable=False, default=1)  # 需要满足几门课 / 几个子节点
    is_text = Column(Boolean, nullable=False, default=False)

    # 课程池（leaf 节点）
    course_group_id = Column(
        Integer,
        ForeignKey('course_groups.id', ondelete='RESTRICT'),
        nullable=True,
        index=True
    )

    # 关系
    template = relationship("Template", back_populates="requirements")
    course_group = relationship("CourseGroup")
    parent = relationship(
        "Requirement",
        back_populates="children",
        remote_side="Requirement.id"
    )
    children = relationship(
        "Requirement",
        back_populates="parent",
        cascade="all, delete-orphan",
        order_by="Requirement.id"
    )

    def __repr__(self):
        return f"<Requirement {self.id}: {self.name} amount={self.amount}>"
