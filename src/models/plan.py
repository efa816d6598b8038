"""
Plan 数据模型
学生私有的学位计划，结构上是某个模板的拷贝（或完全自定义）

is_materialized：拷贝完成标记。拷贝在一个事务里完成，
正常情况下读不到 False 的计划；读到说明上次拷贝中途失败
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from . import Base


class Plan(Base):
    """学生学位计划表"""
    __tablename__ = 'plans'

    id = Column(Integer, primary_key=True, autoincrement=True)

    # 每个学生最多一个计划
    user_id = Column(
        Integer,
        ForeignKey('users.id', ondelete='CASCADE'),
        unique=True,
        nullable=False
    )

    name = Column(String(255), nullable=False)

    # 来源模板名，仅作标签；拷贝完成后不再跟模板联动
    template_name = Column(String(255), nullable=True)
    template_id = Column(
        Integer,
        ForeignKey('templates.id', ondelete='SET NULL'),
        nullable=True
    )

    is_materialized = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=datetime.now, nullable=False)

    # 关系
    user = relationship("User", back_populates="plan")
    template = relationship("Template")
    requirements = relationship(
        "PlanRequirement",
        back_populates="plan",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PlanRequirement.id"
    )

    @property
    def root_requirements(self):
        """顶层节点，按 id 排序"""
        return [r for r in self.requirements if r.parent_id is None and r.parent is None]

    def __repr__(self):
        return f"<Plan {self.id}: {self.name} user={self.user_id}>"
