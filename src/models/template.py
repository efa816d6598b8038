"""
Template 数据模型
共享的标准学位要求，学生操作永远不会修改它
"""
from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from . import Base


class Template(Base):
    """学位模板表"""
    __tablename__ = 'templates'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)  # "Computer Science, Honours, 2025"

    # 全部节点（含子孙），删除模板时级联删除
    requirements = relationship(
        "Requirement",
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="Requirement.id"
    )

    @property
    def root_requirements(self):
        """顶层节点，按 id 排序"""
        return [r for r in self.requirements if r.parent_id is None and r.parent is None]

    def __repr__(self):
        return f"<Template {self.id}: {self.name}>"
