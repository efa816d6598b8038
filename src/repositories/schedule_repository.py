"""
TermCourse 数据访问层
"""
from models import TermCourse


class ScheduleRepository:
    """学生课表数据访问类"""

    def __init__(self, session):
        self.session = session

    def list_entries(self, user_id):
        return (
            self.session.query(TermCourse)
            .filter(TermCourse.user_id == user_id)
            .order_by(TermCourse.id)
            .all()
        )

    def get_entry(self, user_id, course_code):
        return (
            self.session.query(TermCourse)
            .filter(
                TermCourse.user_id == user_id,
                TermCourse.course_code == course_code
            )
            .first()
        )

    def add(self, entry):
        self.session.add(entry)
        self.session.flush()
        return entry

    def delete(self, entry):
        self.session.delete(entry)
        self.session.flush()
