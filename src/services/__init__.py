"""
业务逻辑层（Service）包
"""
from .catalog_service import CatalogService
from .course_group_service import CourseGroupService
from .degree_service import DegreeService
from .integrity_service import PlanIntegrityChecker
from .plan_materializer import PlanMaterializer
from .schedule_service import ScheduleService
from .template_service import TemplateService

__all__ = [
    'CatalogService',
    'CourseGroupService',
    'DegreeService',
    'PlanIntegrityChecker',
    'PlanMaterializer',
    'ScheduleService',
    'TemplateService',
]
