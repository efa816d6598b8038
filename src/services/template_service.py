"""
Template 业务逻辑服务
负责从 YAML 文件导入学位模板，以及模板的只读查询
"""
import json
import logging
import os

import yaml
from jsonschema import Draft7Validator

from database import transaction
from models import CourseGroup, CourseGroupLink, Faculty, Plan, Requirement, Template, User
from repositories import CourseGroupRepository, CourseRepository, DegreeRepository
from .errors import NotFoundError
from .requirement_tree import serialize_node

logger = logging.getLogger(__name__)

_SCHEMA_PATH = os.path.join(
    os.path.dirname(__file__),       # src/services/
    '..', '..', 'data', 'templates', 'schema.json'
)

_SCHEMA = None  # 延迟加载


def _load_schema():
    """加载 JSON Schema（只读一次，缓存在模块级别）"""
    global _SCHEMA
    if _SCHEMA is None:
        with open(os.path.normpath(_SCHEMA_PATH), 'r', encoding='utf-8') as f:
            _SCHEMA = json.load(f)
    return _SCHEMA


class TemplateService:
    """学位模板导入 / 查询服务"""

    @staticmethod
    def validate_data(data):
        """
        校验已解析的模板数据

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
        校验一个模板 YAML 文件是否符合 schema

        Args:
            yaml_path: YAML 文件路径

        Returns:
            list[str]: 校验错误列表，空列表表示通过

        Raises:
            FileNotFoundError: YAML 或 schema 文件不存在
        """
        with open(yaml_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        return TemplateService.validate_data(data)

    def __init__(self, session):
        """
        初始化服务

        Args:
            session: SQLAlchemy 数据库会话
        """
        self.session = session
        self.degrees = DegreeRepository(session)
        self.courses = CourseRepository(session)
        self.groups = CourseGroupRepository(session)

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    def get_template(self, template_id):
        template = self.degrees.get_template(template_id)
        if template is None:
            raise NotFoundError(f"Template {template_id} not found", template_id=template_id)
        return template

    def list_templates(self):
        return [{'id': t.id, 'name': t.name} for t in self.degrees.list_templates()]

    def get_template_tree(self, template_id):
        """模板的完整树（不带完成度）"""
        template = self.get_template(template_id)
        return {
            'id': template.id,
            'name': template.name,
            'requirements': [
                serialize_node(row)
                for row in sorted(template.root_requirements, key=lambda r: r.id)
            ],
        }

    # ------------------------------------------------------------------
    # 导入
    # ------------------------------------------------------------------

    def import_from_yaml(self, yaml_path):
        """从 YAML 文件导入，见 import_data"""
        with open(yaml_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        return self.import_data(data, source=yaml_path)

    def import_data(self, data, source='<data>'):
        """
        导入一个学位模板

        流程：
        1. 校验 schema
        2. 同名模板存在时先删除（clean re-import），记下引用它的用户 / 计划
        3. 创建命名课程组
        4. 创建 Template 和 requirement 树
        5. 用户 / 计划改指向新模板，回收旧模板独占的课程组
        6. 提交

        Args:
            data: 已解析的模板 dict
            source: 来源说明（日志用）

        Returns:
            dict: 统计信息

        Raises:
            ValueError: schema 校验失败，或引用了未定义的组 / 院系
        """
        errors = TemplateService.validate_data(data)
        if errors:
            raise ValueError(f"模板 YAML 校验失败：{source}\n" + '\n'.join(errors))

        name = data['template']['name']
        stats = {
            'template': name,
            'requirements': 0,
            'groups': 0,
            'courses_not_found': [],
            'replaced': False,
            'groups_collected': 0,
        }

        with transaction(self.session):
            # 2. 删除旧模板
            user_ids, plan_ids, old_group_ids = self._delete_existing(name, stats)

            # 3. 命名课程组
            named_groups = {}
            for group_data in data.get('groups') or []:
                named_groups[group_data['name']] = self._create_group(
                    group_data['name'], group_data['courses'], stats
                )

            # 4. 模板和树
            template = Template(name=name)
            self.session.add(template)
            self.session.flush()
            for node_data in data['requirements']:
                self._create_node(template, None, node_data, named_groups, stats)
            self.session.flush()

            # 5. 改指向 + 回收
            for user in self.session.query(User).filter(User.id.in_(user_ids)).all():
                user.template_id = template.id
            for plan in self.session.query(Plan).filter(Plan.id.in_(plan_ids)).all():
                plan.template_id = template.id
            self.session.flush()

            stats['groups_collected'] = self._collect_groups(old_group_ids)
            stats['template_id'] = template.id

        logger.info(
            "导入模板 %s：%d 个节点，%d 个课程组",
            name, stats['requirements'], stats['groups']
        )
        if stats['courses_not_found']:
            logger.warning("未找到的课程: %s", stats['courses_not_found'])
        return stats

    def _delete_existing(self, name, stats):
        existing = self.degrees.get_template_by_name(name)
        if existing is None:
            return [], [], set()

        user_ids = [u.id for u in self.session.query(User).filter(User.template_id == existing.id)]
        plan_ids = [p.id for p in self.session.query(Plan).filter(Plan.template_id == existing.id)]
        old_group_ids = {r.course_group_id for r in existing.requirements if r.course_group_id is not None}

        # 外键会置空，这里先同步内存里的对象
        for user in self.session.query(User).filter(User.id.in_(user_ids)).all():
            user.template_id = None
        for plan in self.session.query(Plan).filter(Plan.id.in_(plan_ids)).all():
            plan.template_id = None
        self.session.flush()

        self.session.delete(existing)
        self.session.flush()
        stats['replaced'] = True
        logger.info("已删除旧模板: %s", name)
        return user_ids, plan_ids, old_group_ids

    def _collect_groups(self, group_ids):
        """删掉旧模板独占、且没有任何计划引用的课程组"""
        protected = self.groups.protected_ids(group_ids)
        collected = 0
        for group_id in sorted(set(group_ids) - protected):
            group = self.groups.get(group_id)
            if group is not None:
                self.groups.delete(group)
                collected += 1
        return collected

    def _create_group(self, name, course_codes, stats):
        group = CourseGroup(name=name)
        for code in course_codes:
            if not self.courses.exists(code):
                stats['courses_not_found'].append(code)
                continue
            group.links.append(CourseGroupLink(course_code=code))
        self.session.add(group)
        self.session.flush()
        stats['groups'] += 1
        return group

    def _create_node(self, template, parent, node_data, named_groups, stats):
        """
        递归创建节点树

        Args:
            template: 所属模板
            parent: 父节点，顶层为 None
            node_data: 节点 YAML 数据
            named_groups: {组名: CourseGroup}
            stats: 统计信息字典

        Returns:
            Requirement: 创建的节点
        """
        node_type = node_data['type']
        node = Requirement(
            name=node_data['name'],
            amount=node_data.get('amount', 1),
            is_text=node_type == 'text',
        )
        node.parent = parent
        template.requirements.append(node)
        stats['requirements'] += 1

        if node_type == 'leaf':
            node.course_group = self._leaf_group(node_data, named_groups, stats)
        elif node_type == 'branch':
            for child_data in node_data['children']:
                self._create_node(template, node, child_data, named_groups, stats)

        self.session.flush()
        return node

    def _leaf_group(self, node_data, named_groups, stats):
        """leaf 节点的课程池：命名组 / 院系默认组 / 内联课程，都没有则为空"""
        if 'group' in node_data:
            group = named_groups.get(node_data['group'])
            if group is None:
                raise ValueError(f"未定义的课程组: {node_data['group']}")
            return group

        if 'faculty' in node_data:
            faculty = self.session.get(Faculty, node_data['faculty'])
            if faculty is None or faculty.course_group is None:
                raise ValueError(f"院系不存在或没有默认课程组: {node_data['faculty']}")
            return faculty.course_group

        if 'courses' in node_data:
            return self._create_group(node_data['name'], node_data['courses'], stats)

        return None
