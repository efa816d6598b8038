"""
User 数据模型
表示系统用户（学生）

学位状态三选一：
- template_id 非空：直接使用模板，还没有任何自定义
- plan 非空：已经有私有计划（template_id 此时为空）
- 都为空：还没选学位
"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from config import settings
from . import Base


class User(Base):
    """用户表"""
    __tablename__ = 'users'

    # 主键：自增整数
    id = Column(Integer, primary_key=True, autoincrement=True)

    # 账号信息
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=True)

    # 当前选中的模板（未自定义时）
    template_id = Column(
        Integer,
        ForeignKey('templates.id', ondelete='SET NULL'),
        nullable=True,
        index=True
    )

    # 当前学期，早于它的学期算已修
    current_term = Column(String(2), nullable=False, default=lambda: settings.default_term)

    # 时间戳
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    # 关系
    template = relationship("Template")
    plan = relationship(
        "Plan",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan"
    )
    term_courses = relationship(
        "TermCourse",
        back_populates="user",
        cascade="all, delete-orphan"  # 删除用户时级联删除其课表
    )

    def __repr__(self):
        return f"<User {self.id}: {self.name}>"

    def __str__(self):
        return f"{self.id} - {self.name}"
