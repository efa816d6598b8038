import pytest

from models import User
from services import CourseGroupService, PlanIntegrityChecker, PlanMaterializer


@pytest.fixture
def checker(session):
    return PlanIntegrityChecker(session)


def test_clean_database(checker, user, other_user):
    PlanMaterializer(checker.session).ensure_plan(user.id)
    checker.session.commit()

    issues = checker.run()

    assert not checker.has_issues
    assert issues == {
        'incomplete_plans': [],
        'groups_shared_across_plans': [],
        'leaked_groups': [],
        'dangling_templates': [],
    }


def test_incomplete_plan(session, checker, user):
    _, plan, _ = PlanMaterializer(session).ensure_plan(user.id)
    plan.is_materialized = False
    session.commit()

    issues = checker.run()

    assert issues['incomplete_plans'] == [{'plan_id': plan.id, 'user_id': user.id}]


def test_group_shared_across_plans(session, checker, user, other_user):
    materializer = PlanMaterializer(session)
    _, plan_a, _ = materializer.ensure_plan(user.id)
    _, plan_b, _ = materializer.ensure_plan(other_user.id)
    node_a = plan_a.root_requirements[0]
    orphan_id = plan_b.root_requirements[0].course_group_id
    plan_b.root_requirements[0].course_group = node_a.course_group
    session.commit()

    issues = checker.run()

    assert issues['groups_shared_across_plans'] == [{
        'group_id': node_a.course_group_id,
        'plan_ids': sorted([plan_a.id, plan_b.id]),
    }]
    assert [g['group_id'] for g in issues['leaked_groups']] == [orphan_id]


def test_leaked_group(session, checker, template):
    group = CourseGroupService(session).create_group("Scratch", ["CS135"])
    session.commit()

    issues = checker.run()

    assert issues['leaked_groups'] == [{'group_id': group.id, 'name': "Scratch"}]
    assert checker.has_issues


def test_dangling_template_query(session, checker, template):
    session.add(User(name='Dave', template_id=template.id))
    session.commit()

    assert checker.run()['dangling_templates'] == []
