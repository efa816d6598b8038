from pathlib import Path

import pytest

from models import Course, CourseGroup, CoursePrereq, Faculty, Plan, Requirement, Template, User
from repositories import CourseRepository
from services import CatalogService, DegreeService, TemplateService
from services.catalog_service import derive_level

DATA_DIR = Path(__file__).resolve().parent.parent / 'data'
CATALOG_YAML = DATA_DIR / 'catalog' / 'catalog.yml'
TEMPLATE_YAML = DATA_DIR / 'templates' / 'cs_honours.yml'


class TestCatalog:

    def test_import_stats(self, catalog):
        assert catalog['faculties'] == 2
        assert catalog['courses_created'] == 9
        assert catalog['courses_updated'] == 0
        assert catalog['prerequisites'] == 7
        assert catalog['faculty_groups'] == 2
        assert catalog['prerequisites_not_found'] == []

    def test_courses_and_faculty_groups(self, session, catalog):
        courses = CourseRepository(session)
        assert courses.get_by_code("CS245").level == 200
        assert courses.get_by_code("CS245").prerequisite_codes == {"CS136", "CS146"}

        cs = session.get(Faculty, "CS")
        assert cs.course_group.course_codes == {"CS135", "CS136", "CS146", "CS245", "CS246"}

    def test_search_puts_code_matches_first(self, session, catalog):
        courses = CourseRepository(session)
        codes = [c.code for c in courses.search("alg")]
        assert codes == ["CS136", "CS146", "MATH135", "MATH136"]
        assert [c.code for c in courses.search("cs24")] == ["CS245", "CS246"]
        assert [c.code for c in courses.search("math", limit=2)] == ["MATH135", "MATH136"]
        assert courses.search("  ") == []

    def test_list_by_faculty(self, session, catalog):
        codes = [c.code for c in CourseRepository(session).list_by_faculty("MATH")]
        assert codes == ["MATH135", "MATH136", "MATH137", "MATH138"]

    def test_reimport_updates_in_place(self, session, catalog):
        stats = CatalogService(session).import_from_yaml(str(CATALOG_YAML))
        assert stats['courses_created'] == 0
        assert stats['courses_updated'] == 9
        assert session.query(Course).count() == 9
        assert session.query(CoursePrereq).count() == 7
        assert session.query(CourseGroup).count() == 2

    def test_missing_prerequisite_reported(self, session, catalog):
        stats = CatalogService(session).import_data({'courses': [
            {'code': "CS341", 'title': "Algorithms", 'faculty': "CS",
             'prerequisites': ["CS240"]},
        ]})
        assert stats['prerequisites_not_found'] == ["CS240"]
        assert session.get(Course, "CS341").prereqs == []

    def test_invalid_catalog(self, session):
        data = {'courses': [{'code': "cs135"}]}
        assert CatalogService.validate_data(data)
        with pytest.raises(ValueError):
            CatalogService(session).import_data(data)
        assert session.query(Course).count() == 0

    @pytest.mark.parametrize("code,level", [("CS135", 100), ("MATH239", 200), ("PD1", 100), ("X", 0)])
    def test_derive_level(self, code, level):
        assert derive_level(code) == level


class TestTemplateValidation:

    def test_shipped_template_is_valid(self):
        assert TemplateService.validate_yaml(str(TEMPLATE_YAML)) == []

    @pytest.mark.parametrize("node", [
        {'name': "b", 'type': 'branch', 'amount': 1},
        {'name': "b", 'type': 'branch', 'amount': 1, 'children': [], 'courses': ["CS135"]},
        {'name': "l", 'type': 'leaf', 'amount': 1, 'group': "g", 'courses': ["CS135"]},
        {'name': "l", 'type': 'leaf'},
        {'name': "t", 'type': 'text', 'courses': ["CS135"]},
        {'name': "x", 'type': 'choice', 'amount': 1},
    ])
    def test_malformed_nodes(self, node):
        data = {'template': {'name': "Bad"}, 'requirements': [node]}
        assert TemplateService.validate_data(data)


class TestTemplateImport:

    def test_import_stats(self, session, catalog):
        stats = TemplateService(session).import_from_yaml(str(TEMPLATE_YAML))
        assert stats['requirements'] == 7
        assert stats['groups'] == 4
        assert stats['replaced'] is False
        assert stats['courses_not_found'] == []

    def test_leaf_group_sources(self, session, template, find_node):
        roots = template.root_requirements
        assert find_node(roots, "CS Core").course_group.name == "CS Core Courses"
        assert find_node(roots, "CS Electives").course_group_id == \
            session.get(Faculty, "CS").course_group_id
        assert find_node(roots, "Algebra").course_group.course_codes == {"MATH135"}
        text = find_node(roots, "Complete a co-op work term")
        assert text.is_text and text.amount == 1 and text.course_group_id is None

    def test_read_model(self, session, template):
        service = TemplateService(session)
        assert service.list_templates() == [{'id': template.id, 'name': template.name}]

        tree = service.get_template_tree(template.id)
        assert tree['name'] == "Computer Science, Honours, 2025"
        branch = tree['requirements'][2]
        assert branch['kind'] == 'branch'
        assert [c['name'] for c in branch['children']] == ["Regular stream", "Algebra"]
        assert 'fulfillment' not in branch

    def test_undefined_group_rolls_back(self, session, catalog):
        data = {
            'template': {'name': "Broken"},
            'requirements': [{'name': "x", 'type': 'leaf', 'amount': 1, 'group': "nope"}],
        }
        with pytest.raises(ValueError):
            TemplateService(session).import_data(data)
        assert session.query(Template).count() == 0

    def test_reimport_repoints_users_and_plans(self, session, template, user, other_user,
                                               find_node):
        DegreeService(session).set_force_completed(
            other_user.id,
            find_node(template.root_requirements, "Complete a co-op work term").id,
            True,
        )

        stats = TemplateService(session).import_from_yaml(str(TEMPLATE_YAML))

        assert stats['replaced'] is True
        assert stats['groups_collected'] == 4
        assert session.query(Template).count() == 1
        assert session.query(Requirement).count() == 7
        assert session.get(User, user.id).template_id == stats['template_id']
        plan = session.query(Plan).filter(Plan.user_id == other_user.id).one()
        assert plan.template_id == stats['template_id']

        state = DegreeService(session).get_degree_state(user.id)
        assert state['template']['id'] == stats['template_id']
