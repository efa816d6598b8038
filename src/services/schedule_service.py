"""
Schedule 业务逻辑服务
学生把课程排进学期；并给 Evaluator 提供已修 / 计划中课程集合
"""
import logging

from sqlalchemy.exc import IntegrityError

from database import transaction
from models import TermCourse
from repositories import CourseRepository, DegreeRepository, ScheduleRepository
from utils.term_utils import normalize_term
from .errors import (
    CourseNotFoundError, DuplicateScheduleEntryError, InvalidInputError,
    ScheduleEntryNotFoundError, UserNotFoundError,
)
from .schedule_analysis import find_prerequisite_gaps, partition_courses

logger = logging.getLogger(__name__)


def _check_term(term):
    try:
        return normalize_term(term)
    except ValueError as e:
        raise InvalidInputError(str(e), errors=["term: invalid"], term=term) from e


class ScheduleService:
    """学生课表业务逻辑类"""

    def __init__(self, session):
        self.session = session
        self.schedule = ScheduleRepository(session)
        self.courses = CourseRepository(session)
        self.degrees = DegreeRepository(session)

    def _load_user(self, user_id):
        user = self.degrees.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    # ------------------------------------------------------------------
    # 读取
    # ------------------------------------------------------------------

    def get_schedule(self, user_id):
        """
        Returns:
            dict: {current_term, entries: [{course_code, term, title, prerequisites}]}
        """
        user = self._load_user(user_id)
        entries = self.schedule.list_entries(user_id)
        prereqs = self.courses.get_prerequisites(e.course_code for e in entries)
        return {
            'current_term': user.current_term,
            'entries': [
                {
                    'course_code': e.course_code,
                    'term': e.term,
                    'title': e.course.title if e.course is not None else None,
                    'prerequisites': sorted(prereqs.get(e.course_code, ())),
                }
                for e in entries
            ],
        }

    def get_course_sets(self, user_id):
        """
        Returns:
            tuple: (completed, planned)，喂给 Evaluator
        """
        user = self._load_user(user_id)
        placements = [(e.course_code, e.term) for e in self.schedule.list_entries(user_id)]
        return partition_courses(placements, user.current_term)

    def get_prerequisite_warnings(self, user_id):
        """先修缺失提示（不阻止排课）"""
        self._load_user(user_id)
        placements = [(e.course_code, e.term) for e in self.schedule.list_entries(user_id)]
        prereqs = self.courses.get_prerequisites(code for code, _ in placements)
        return find_prerequisite_gaps(placements, prereqs)

    # ------------------------------------------------------------------
    # 修改（只 flush，供其他服务在同一事务里调用）
    # ------------------------------------------------------------------

    def place_course(self, user_id, course_code, term, replace=True):
        """
        排课；replace=True 时已有记录改学期，否则报冲突

        Returns:
            TermCourse
        """
        term = _check_term(term)
        if not self.courses.exists(course_code):
            raise CourseNotFoundError(course_code)

        entry = self.schedule.get_entry(user_id, course_code)
        if entry is not None:
            if not replace:
                raise DuplicateScheduleEntryError(course_code)
            entry.term = term
            self.session.flush()
            return entry

        entry = TermCourse(user_id=user_id, course_code=course_code, term=term)
        try:
            self.schedule.add(entry)
        except IntegrityError as e:
            raise DuplicateScheduleEntryError(course_code) from e
        return entry

    # ------------------------------------------------------------------
    # 对外写操作（各自一个事务）
    # ------------------------------------------------------------------

    def set_current_term(self, user_id, term):
        with transaction(self.session):
            user = self._load_user(user_id)
            user.current_term = _check_term(term)
        return {'current_term': user.current_term}

    def add_entry(self, user_id, course_code, term):
        """
        Raises:
            DuplicateScheduleEntryError: 这门课已经排过
        """
        with transaction(self.session):
            self._load_user(user_id)
            entry = self.place_course(user_id, course_code, term, replace=False)
        return {'course_code': entry.course_code, 'term': entry.term}

    def upsert_entry(self, user_id, course_code, term):
        with transaction(self.session):
            self._load_user(user_id)
            entry = self.place_course(user_id, course_code, term, replace=True)
        return {'course_code': entry.course_code, 'term': entry.term}

    def move_entry(self, user_id, course_code, term):
        """
        Raises:
            ScheduleEntryNotFoundError: 这门课还没排
        """
        with transaction(self.session):
            self._load_user(user_id)
            entry = self.schedule.get_entry(user_id, course_code)
            if entry is None:
                raise ScheduleEntryNotFoundError(course_code)
            entry.term = _check_term(term)
        return {'course_code': entry.course_code, 'term': entry.term}

    def remove_entry(self, user_id, course_code):
        with transaction(self.session):
            self._load_user(user_id)
            entry = self.schedule.get_entry(user_id, course_code)
            if entry is None:
                raise ScheduleEntryNotFoundError(course_code)
            self.schedule.delete(entry)
        logger.debug("用户 %s 移除排课 %s", user_id, course_code)
        return {'deleted': course_code}
