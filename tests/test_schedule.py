import pytest

from services import ScheduleService
from services.errors import (
    CourseNotFoundError, DuplicateScheduleEntryError, InvalidInputError,
    ScheduleEntryNotFoundError, UserNotFoundError,
)
from services.schedule_analysis import (
    PrerequisiteWarning, find_prerequisite_gaps, partition_courses,
)


class TestPartition:

    def test_split_on_current_term(self):
        completed, planned = partition_courses(
            [("CS135", "1A"), ("CS136", "1B"), ("CS245", "2A"), ("CS246", "3B")],
            "2A",
        )
        assert completed == {"CS135", "CS136"}
        assert planned == {"CS245", "CS246"}

    def test_first_term_has_nothing_completed(self):
        completed, planned = partition_courses([("CS135", "1A")], "1A")
        assert completed == frozenset()
        assert planned == {"CS135"}

    def test_completed_wins_for_duplicates(self):
        completed, planned = partition_courses([("CS135", "1A"), ("CS135", "3A")], "2A")
        assert completed == {"CS135"}
        assert planned == frozenset()


class TestPrerequisiteGaps:

    PREREQS = {
        "CS136": {"CS135"},
        "CS245": {"CS136", "CS146"},
        "CS246": {"CS245"},
    }

    def test_no_prerequisites_never_flagged(self):
        assert find_prerequisite_gaps([("CS135", "1A"), ("MATH135", "1A")], self.PREREQS) == []

    def test_missing_prerequisite_flagged(self):
        warnings = find_prerequisite_gaps([("CS136", "1A")], self.PREREQS)
        assert warnings == [PrerequisiteWarning("CS136", "1A", {"CS135"})]
        assert warnings[0].to_dict() == {
            'course_code': "CS136",
            'term': "1A",
            'missing_prerequisites': ["CS135"],
        }

    def test_same_term_does_not_count(self):
        warnings = find_prerequisite_gaps([("CS135", "1A"), ("CS136", "1A")], self.PREREQS)
        assert [w.course_code for w in warnings] == ["CS136"]

    def test_any_prerequisite_is_enough(self):
        placements = [("CS135", "1A"), ("CS146", "1B"), ("CS245", "2A")]
        assert find_prerequisite_gaps(placements, self.PREREQS) == []

    def test_sorted_by_term_then_code(self):
        placements = [("CS246", "3A"), ("CS245", "1B"), ("CS136", "1B")]
        warnings = find_prerequisite_gaps(placements, self.PREREQS)
        assert [(w.term, w.course_code) for w in warnings] == [
            ("1B", "CS136"), ("1B", "CS245"),
        ]

    def test_duplicates_reported_once(self):
        warnings = find_prerequisite_gaps([("CS136", "1A"), ("CS136", "1A")], self.PREREQS)
        assert len(warnings) == 1


@pytest.fixture
def service(session):
    return ScheduleService(session)


class TestScheduleService:

    def test_add_and_read(self, service, user):
        service.add_entry(user.id, "CS135", "1a")
        schedule = service.get_schedule(user.id)
        assert schedule['current_term'] == "2A"
        assert schedule['entries'] == [{
            'course_code': "CS135",
            'term': "1A",
            'title': "Designing Functional Programs",
            'prerequisites': [],
        }]

    def test_duplicate_entry(self, service, user):
        service.add_entry(user.id, "CS135", "1A")
        with pytest.raises(DuplicateScheduleEntryError):
            service.add_entry(user.id, "CS135", "1B")

    def test_upsert_and_move(self, service, user):
        service.upsert_entry(user.id, "CS135", "1A")
        service.upsert_entry(user.id, "CS135", "1B")
        assert service.move_entry(user.id, "CS135", "2A") == {'course_code': "CS135", 'term': "2A"}

    def test_move_missing(self, service, user):
        with pytest.raises(ScheduleEntryNotFoundError):
            service.move_entry(user.id, "CS135", "2A")

    def test_remove(self, service, user):
        service.add_entry(user.id, "CS135", "1A")
        assert service.remove_entry(user.id, "CS135") == {'deleted': "CS135"}
        assert service.get_schedule(user.id)['entries'] == []
        with pytest.raises(ScheduleEntryNotFoundError):
            service.remove_entry(user.id, "CS135")

    def test_invalid_term(self, service, user):
        with pytest.raises(InvalidInputError):
            service.add_entry(user.id, "CS135", "5A")
        with pytest.raises(InvalidInputError):
            service.set_current_term(user.id, "")

    def test_unknown_course_and_user(self, service, user):
        with pytest.raises(CourseNotFoundError):
            service.add_entry(user.id, "XX999", "1A")
        with pytest.raises(UserNotFoundError):
            service.add_entry(4242, "CS135", "1A")

    def test_course_sets_follow_current_term(self, service, user):
        service.add_entry(user.id, "CS135", "1A")
        service.add_entry(user.id, "CS136", "2A")
        assert service.get_course_sets(user.id) == ({"CS135"}, {"CS136"})

        service.set_current_term(user.id, "2b")
        assert service.get_course_sets(user.id) == ({"CS135", "CS136"}, frozenset())

    def test_prerequisite_warnings(self, service, user):
        service.add_entry(user.id, "CS136", "1A")
        service.add_entry(user.id, "CS245", "1B")
        warnings = service.get_prerequisite_warnings(user.id)
        assert [w.course_code for w in warnings] == ["CS136"]
