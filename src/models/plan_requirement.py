"""
PlanRequirement 数据模型
学生计划（Plan）中的 requirement 树节点

course_group_id 指向的课程组要么是本计划私有的，
要么同时被模板 / 院系引用（共享）。共享的组在第一次被修改前
由 PlanMaterializer 拷贝成私有的
"""
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from . import Base
from .requirement_node import RequirementNodeMixin


class PlanRequirement(RequirementNodeMixin, Base):
    """计划 requirement 节点表"""
    __tablename__ = 'plan_requirements'

    id = Column(Integer, primary_key=True, autoincrement=True)

    # 外键：所属计划
    plan_id = Column(
        Integer,
        ForeignKey('plans.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )

    # 父节点，NULL 表示顶层
    parent_id = Column(
        Integer,
        ForeignKey('plan_requirements.id', ondelete='CASCADE'),
        nullable=True,
        index=True
    )

    # 节点信息
    name = Column(String(255), nullable=False)
    amount = Column(Integer, nullable=False, default=1)
    is_text = Column(Boolean, nullable=False, default=False)

    # 手动标记完成，不影响 natural 计算
    force_completed = Column(Boolean, nullable=False, default=False)

    # 课程池；删除计划时不级联删除课程组
    course_group_id = Column(
        Integer,
        ForeignKey('course_groups.id', ondelete='SET NULL'),
        nullable=True,
        index=True
    )

    # 关系
    plan = relationship("Plan", back_populates="requirements")
    course_group = relationship("CourseGroup")
    parent = relationship(
        "PlanRequirement",
        back_populates="children",
        remote_side="PlanRequirement.id"
    )
    children = relationship(
        "PlanRequirement",
        back_populates="parent",
        cascade="all, delete-orphan",
        order_by="PlanRequirement.id"
    )

    def __repr__(self):
        forced = " forced" if self.force_completed else ""
        return f"<PlanRequirement {self.id}: {self.name} amount={self.amount}{forced}>"
