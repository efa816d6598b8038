"""
Course 数据访问层
课程目录只读查询
"""
from sqlalchemy import func, or_
from models import Course, CoursePrereq


class CourseRepository:
    """Course 数据访问类"""

    def __init__(self, session):
        """
        初始化 Repository

        Args:
            session: SQLAlchemy 数据库会话
        """
        self.session = session

    def get_by_code(self, course_code):
        """
        根据代码获取课程

        Args:
            course_code: 课程代码 (如 "CS135")

        Returns:
            Course 对象或 None
        """
        return self.session.get(Course, course_code)

    def exists(self, course_code):
        """检查课程是否存在"""
        return self.session.query(Course.code).filter(Course.code == course_code).first() is not None

    def missing_codes(self, course_codes):
        """
        返回目录中不存在的课程代码

        Args:
            course_codes: 课程代码可迭代对象

        Returns:
            list: 排序后的缺失代码
        """
        codes = set(course_codes)
        if not codes:
            return []
        found = {
            row[0] for row in
            self.session.query(Course.code).filter(Course.code.in_(codes)).all()
        }
        return sorted(codes - found)

    def search(self, query, limit=20):
        """
        按代码或标题模糊搜索，代码命中的排在前面

        Args:
            query: 搜索词（大小写不敏感）
            limit: 最多返回几条

        Returns:
            Course 对象列表
        """
        term = (query or '').strip()
        if not term:
            return []
        pattern = f"%{term.lower()}%"
        results = (
            self.session.query(Course)
            .filter(or_(
                func.lower(Course.code).like(pattern),
                func.lower(Course.title).like(pattern),
            ))
            .order_by(Course.code)
            .all()
        )
        needle = term.lower()
        results.sort(key=lambda c: (needle not in c.code.lower(), c.code))
        return results[:limit]

    def list_by_faculty(self, faculty_name):
        """获取某院系的全部课程"""
        return (
            self.session.query(Course)
            .filter(Course.faculty_name == faculty_name)
            .order_by(Course.code)
            .all()
        )

    def get_prerequisites(self, course_codes):
        """
        批量获取先修关系

        Args:
            course_codes: 课程代码可迭代对象

        Returns:
            dict: {course_code: set(prereq_code)}，没有先修的课程对应空集合
        """
        codes = set(course_codes)
        prereqs = {code: set() for code in codes}
        if not codes:
            return prereqs
        rows = (
            self.session.query(CoursePrereq.course_code, CoursePrereq.prereq_code)
            .filter(CoursePrereq.course_code.in_(codes))
            .all()
        )
        for course_code, prereq_code in rows:
            prereqs[course_code].add(prereq_code)
        return prereqs
