"""
数据模型包
"""
from sqlalchemy.orm import declarative_base

# 创建 ORM 基类
Base = declarative_base()

# 导出所有模型 — 课程目录（只读参考数据）
from .faculty import Faculty
from .course import Course
from .course_prereq import CoursePrereq

# 导出所有模型 — 课程组
from .course_group import CourseGroup
from .course_group_link import CourseGroupLink

# 导出所有模型 — 学位要求
from .requirement_node import RequirementNodeMixin
from .template import Template
from .requirement import Requirement
from .plan import Plan
from .plan_requirement import PlanRequirement

# 导出所有模型 — 用户相关
from .user import User
from .term_course import TermCourse

__all__ = [
    'Base',
    # 课程目录
    'Faculty',
    'Course',
    'CoursePrereq',
    # 课程组
    'CourseGroup',
    'CourseGroupLink',
    # 学位要求
    'RequirementNodeMixin',
    'Template',
    'Requirement',
    'Plan',
    'PlanRequirement',
    # 用户相关
    'User',
    'TermCourse',
]
