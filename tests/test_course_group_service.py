import pytest

from models import Faculty
from services import CourseGroupService
from services.errors import (
    AlreadyMemberError, ConflictError, CourseGroupNotFoundError,
    CourseNotFoundError, InvalidInputError, NotAMemberError,
)


@pytest.fixture
def service(session, catalog):
    return CourseGroupService(session)


def test_create_group_deduplicates(service):
    group = service.create_group("Algebra", ["MATH135", "MATH136", "MATH135"])
    assert group.id is not None
    assert group.course_codes == {"MATH135", "MATH136"}


def test_create_group_rejects_unknown_course(service):
    with pytest.raises(CourseNotFoundError) as exc:
        service.create_group("Bad", ["CS135", "XX999"])
    assert exc.value.details['course_code'] == "XX999"


def test_create_group_requires_name(service):
    with pytest.raises(InvalidInputError):
        service.create_group("  ", ["CS135"])


def test_add_and_remove(service):
    group = service.create_group("Picks", ["CS135"])
    service.add_course(group, "CS136")
    assert group.course_codes == {"CS135", "CS136"}

    service.remove_course(group, "CS135")
    assert group.course_codes == {"CS136"}


def test_add_existing_member_is_conflict(service):
    group = service.create_group("Picks", ["CS135"])
    with pytest.raises(AlreadyMemberError) as exc:
        service.add_course(group, "CS135")
    assert exc.value.status_code == 409
    assert exc.value.to_dict()['error'] == 'already_member'


def test_add_unknown_course(service):
    group = service.create_group("Picks")
    with pytest.raises(CourseNotFoundError):
        service.add_course(group, "XX999")


def test_remove_non_member(service):
    group = service.create_group("Picks", ["CS135"])
    with pytest.raises(NotAMemberError):
        service.remove_course(group, "CS136")


def test_clone_group_copies_members_under_new_id(service):
    group = service.create_group("Picks", ["CS135", "CS136"])
    copy = service.clone_group(group)
    assert copy.id != group.id
    assert copy.name == group.name
    assert copy.course_codes == group.course_codes

    service.add_course(copy, "CS245")
    assert "CS245" not in group.course_codes


def test_replace_and_rename(service):
    group = service.create_group("Picks", ["CS135"])
    service.replace_courses(group.id, ["MATH137", "MATH138"])
    service.rename_group(group.id, "Calculus")
    group = service.get_group(group.id)
    assert group.name == "Calculus"
    assert group.course_codes == {"MATH137", "MATH138"}


def test_list_groups_ordered_by_name(service):
    service.create_group("Zeta")
    service.create_group("Alpha")
    names = [g.name for g in service.list_groups()]
    assert names == sorted(names)
    assert {"Alpha", "Zeta", "CS Courses", "MATH Courses"} <= set(names)


def test_get_missing_group(service):
    with pytest.raises(CourseGroupNotFoundError):
        service.get_group(9999)


def test_faculty_group_is_shared(session, service):
    faculty = session.get(Faculty, "CS")
    assert faculty.course_group is not None
    assert service.is_shared(faculty.course_group_id)
    assert not service.is_shared(service.create_group("Mine").id)


def test_delete_group(service):
    group = service.create_group("Temp", ["CS135"])
    service.delete_group(group.id)
    with pytest.raises(CourseGroupNotFoundError):
        service.get_group(group.id)


def test_delete_referenced_group_is_conflict(session, service):
    faculty = session.get(Faculty, "MATH")
    with pytest.raises(ConflictError):
        service.delete_group(faculty.course_group_id)
