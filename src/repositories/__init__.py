"""
数据访问层（Repository）包
"""
from .course_repository import CourseRepository
from .course_group_repository import CourseGroupRepository
from .degree_repository import DegreeRepository
from .schedule_repository import ScheduleRepository

__all__ = ['CourseRepository', 'CourseGroupRepository', 'DegreeRepository', 'ScheduleRepository']
