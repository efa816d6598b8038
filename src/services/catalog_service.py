"""
Catalog 业务逻辑服务
负责从 YAML 文件导入课程目录（院系、课程、先修关系）
"""
import json
import logging
import os
import re

import yaml
from jsonschema import Draft7Validator

from database import transaction
from models import Course, CoursePrereq, CourseGroup, CourseGroupLink, Faculty
from repositories import CourseRepository

logger = logging.getLogger(__name__)

_SCHEMA_PATH = os.path.join(
    os.path.dirname(__file__),       # src/services/
    '..', '..', 'data', 'catalog', 'schema.json'
)

_SCHEMA = None  # 延迟加载


def _load_schema():
    """加载 JSON Schema（只读一次，缓存在模块级别）"""
    global _SCHEMA
    if _SCHEMA is None:
        with open(os.path.normpath(_SCHEMA_PATH), 'r', encoding='utf-8') as f:
            _SCHEMA = json.load(f)
    return _SCHEMA


def derive_level(course_code):
    """
    从课程代码推算 level：第一个数字 × 100

    Examples:
        >>> derive_level("CS135")
        100
        >>> derive_level("MATH2xx")
        200
    """
    match = re.search(r'\d', course_code)
    if not match:
        return 0
    return int(match.group()) * 100


class CatalogService:
    """课程目录导入服务"""

    @staticmethod
    def validate_data(data):
        """
        校验已解析的 catalog 数据

        Returns:
            list[str]: 校验错误列表，空列表表示通过
        """
        validator = Draft7Validator(_load_schema())
        errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
        messages = []
        for err in errors:
            path = ' -> '.join(str(p) for p in err.absolute_path) or '(root)'
            messages.append(f"  [{path}] {err.message}")
        return messages

    @staticmethod
    def validate_yaml(yaml_path):
        """
        校验一个 catalog YAML 文件是否符合 schema

        Raises:
            FileNotFoundError: YAML 或 schema 文件不存在
        """
        with open(yaml_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        return CatalogService.validate_data(data)

    def __init__(self, session):
        """
        初始化服务

        Args:
            session: SQLAlchemy 数据库会话
        """
        self.session = session
        self.courses = CourseRepository(session)

    def import_from_yaml(self, yaml_path):
        """从 YAML 文件导入，见 import_data"""
        with open(yaml_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        return self.import_data(data, source=yaml_path)

    def import_data(self, data, source='<data>'):
        """
        导入课程目录

        流程：
        1. 校验 schema
        2. 创建 / 更新院系
        3. 创建 / 更新课程（merge）
        4. 重建所列课程的先修关系
        5. 重建院系默认课程组（该院系全部课程）
        6. 提交

        Args:
            data: 已解析的 catalog dict
            source: 来源说明（日志用）

        Returns:
            dict: 统计信息

        Raises:
            ValueError: schema 校验失败
        """
        errors = CatalogService.validate_data(data)
        if errors:
            raise ValueError(f"Catalog 校验失败：{source}\n" + '\n'.join(errors))

        stats = {
            'faculties': 0,
            'courses_created': 0,
            'courses_updated': 0,
            'prerequisites': 0,
            'faculty_groups': 0,
            'prerequisites_not_found': [],
        }

        faculties_data = data.get('faculties') or []
        courses_data = data.get('courses') or []

        with transaction(self.session):
            # 2. 院系
            for faculty_data in faculties_data:
                if self.session.get(Faculty, faculty_data['name']) is None:
                    self.session.add(Faculty(name=faculty_data['name']))
                stats['faculties'] += 1
            self.session.flush()

            # 3. 课程
            for course_data in courses_data:
                code = course_data['code']
                faculty_name = course_data.get('faculty')
                if faculty_name and self.session.get(Faculty, faculty_name) is None:
                    self.session.add(Faculty(name=faculty_name))
                    self.session.flush()

                course = self.courses.get_by_code(code)
                if course is None:
                    course = Course(code=code)
                    self.session.add(course)
                    stats['courses_created'] += 1
                else:
                    stats['courses_updated'] += 1
                course.title = course_data['title']
                course.faculty_name = faculty_name
                course.level = course_data.get('level', derive_level(code))
            self.session.flush()

            # 4. 先修关系：所列课程删了重建
            for course_data in courses_data:
                course = self.courses.get_by_code(course_data['code'])
                course.prereqs.clear()
                self.session.flush()
                for prereq_code in course_data.get('prerequisites') or []:
                    if not self.courses.exists(prereq_code):
                        stats['prerequisites_not_found'].append(prereq_code)
                        logger.warning("先修课程不存在: %s (← %s)", prereq_code, course.code)
                        continue
                    course.prereqs.append(CoursePrereq(prereq_code=prereq_code))
                    stats['prerequisites'] += 1
            self.session.flush()

            # 5. 院系默认组
            for faculty_data in faculties_data:
                if faculty_data.get('default_group', True):
                    self._rebuild_faculty_group(faculty_data['name'])
                    stats['faculty_groups'] += 1

        logger.info(
            "导入课程目录 %s：新建 %d 门，更新 %d 门，先修 %d 条",
            source, stats['courses_created'], stats['courses_updated'], stats['prerequisites']
        )
        return stats

    def _rebuild_faculty_group(self, faculty_name):
        """
        院系默认组成员 = 该院系全部课程；组不存在则新建

        默认组是共享组，学生修改前会被拷贝，所以这里可以原地更新
        """
        faculty = self.session.get(Faculty, faculty_name)
        group = faculty.course_group
        if group is None:
            group = CourseGroup(name=f"{faculty_name} Courses")
            self.session.add(group)
            faculty.course_group = group
        else:
            group.links.clear()
            self.session.flush()

        codes = [course.code for course in self.courses.list_by_faculty(faculty_name)]
        group.links.extend(CourseGroupLink(course_code=code) for code in codes)
        self.session.flush()
        return group
