"""
测试公共 fixture：内存 SQLite + 示例课程目录 + "CS Honours" 模板
"""
from pathlib import Path

import pytest

from database import Database
from models import Template, User
from services import CatalogService, TemplateService

ROOT = Path(__file__).resolve().parent.parent
CATALOG_YAML = ROOT / 'data' / 'catalog' / 'catalog.yml'
TEMPLATE_YAML = ROOT / 'data' / 'templates' / 'cs_honours.yml'


@pytest.fixture
def db():
    database = Database('sqlite://', echo=False)
    assert database.create_tables()
    yield database
    database.dispose()


@pytest.fixture
def session(db):
    session = db.get_session()
    yield session
    session.close()


@pytest.fixture
def catalog(session):
    return CatalogService(session).import_from_yaml(str(CATALOG_YAML))


@pytest.fixture
def template(session, catalog):
    stats = TemplateService(session).import_from_yaml(str(TEMPLATE_YAML))
    return session.get(Template, stats['template_id'])


def _add_user(session, name, template=None, current_term='1A'):
    user = User(
        name=name,
        template_id=template.id if template is not None else None,
        current_term=current_term,
    )
    session.add(user)
    session.commit()
    return user


@pytest.fixture
def user(session, template):
    """直接使用模板的学生，当前学期 2A"""
    return _add_user(session, 'Alice', template, current_term='2A')


@pytest.fixture
def other_user(session, template):
    return _add_user(session, 'Bob', template, current_term='2A')


@pytest.fixture
def new_user(session, catalog):
    """还没选学位的学生"""
    return _add_user(session, 'Carol')


def _find_node(rows, name):
    for row in rows:
        for node in row.walk():
            if node.name == name:
                return node
    raise LookupError(name)


def _find_state_node(tree, name):
    for node in tree:
        if node['name'] == name:
            return node
        try:
            return _find_state_node(node['children'], name)
        except LookupError:
            continue
    raise LookupError(name)


@pytest.fixture
def find_node():
    """在 ORM 节点树里按名字找节点"""
    return _find_node


@pytest.fixture
def find_state_node():
    """在 get_degree_state 返回的 dict 树里按名字找节点"""
    return _find_state_node
