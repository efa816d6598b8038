"""
CourseGroup 业务逻辑服务

成员是集合：add 重复时报 AlreadyMember，remove 不存在时报 NotAMember。
这里只 flush 不提交，事务边界由调用方决定
"""
import logging

from sqlalchemy.exc import IntegrityError

from models import CourseGroup, CourseGroupLink
from repositories import CourseGroupRepository, CourseRepository
from .errors import (
    AlreadyMemberError, ConflictError, CourseGroupNotFoundError,
    CourseNotFoundError, InvalidInputError, NotAMemberError,
)

logger = logging.getLogger(__name__)


class CourseGroupService:
    """课程组业务逻辑类"""

    def __init__(self, session):
        """
        初始化服务

        Args:
            session: SQLAlchemy 数据库会话
        """
        self.session = session
        self.groups = CourseGroupRepository(session)
        self.courses = CourseRepository(session)

    def get_group(self, group_id):
        group = self.groups.get(group_id)
        if group is None:
            raise CourseGroupNotFoundError(group_id)
        return group

    def list_groups(self):
        return self.groups.list_all()

    def is_shared(self, group_id):
        return self.groups.is_shared(group_id)

    def create_group(self, name, course_codes=()):
        """
        新建课程组

        Args:
            name: 组名
            course_codes: 初始成员（重复的自动去重）

        Returns:
            CourseGroup

        Raises:
            InvalidInputError: 组名为空
            CourseNotFoundError: 有课程不在目录中
        """
        if not name or not str(name).strip():
            raise InvalidInputError("name is required", errors=["name: required"])

        codes = sorted(set(course_codes))
        missing = self.courses.missing_codes(codes)
        if missing:
            raise CourseNotFoundError(missing[0])

        group = CourseGroup(name=str(name).strip())
        group.links = [CourseGroupLink(course_code=code) for code in codes]
        self.groups.add(group)
        logger.debug("创建课程组 %s (%d 门课)", group.id, len(codes))
        return group

    def clone_group(self, group, name=None):
        """
        拷贝课程组：新 id，成员相同

        Args:
            group: 源 CourseGroup
            name: 新组名，默认沿用

        Returns:
            CourseGroup: 新组
        """
        copy = CourseGroup(name=name or group.name)
        copy.links = [CourseGroupLink(course_code=code) for code in sorted(group.course_codes)]
        self.groups.add(copy)
        logger.debug("拷贝课程组 %s -> %s", group.id, copy.id)
        return copy

    def add_course(self, group, course_code):
        """
        往组里加一门课

        Raises:
            CourseNotFoundError: 课程不在目录中
            AlreadyMemberError: 已经是成员（调用方据此显示"已添加"）
        """
        if not self.courses.exists(course_code):
            raise CourseNotFoundError(course_code)
        if group.has_course(course_code):
            raise AlreadyMemberError(group.id, course_code)

        link = CourseGroupLink(course_code=course_code)
        group.links.append(link)
        try:
            self.session.flush()
        except IntegrityError as e:
            # 并发请求先一步插入了同一行，唯一约束兜底
            raise AlreadyMemberError(group.id, course_code) from e
        return link

    def remove_course(self, group, course_code):
        """
        从组里删除一门课

        Raises:
            NotAMemberError: 不是成员
        """
        link = next((l for l in group.links if l.course_code == course_code), None)
        if link is None:
            raise NotAMemberError(group.id, course_code)
        group.links.remove(link)
        self.session.flush()

    def replace_courses(self, group_id, course_codes):
        """整体替换成员"""
        group = self.get_group(group_id)
        codes = sorted(set(course_codes))
        missing = self.courses.missing_codes(codes)
        if missing:
            raise CourseNotFoundError(missing[0])

        group.links.clear()
        self.session.flush()
        group.links.extend(CourseGroupLink(course_code=code) for code in codes)
        self.session.flush()
        return group

    def rename_group(self, group_id, name):
        if not name or not str(name).strip():
            raise InvalidInputError("name is required", errors=["name: required"])
        group = self.get_group(group_id)
        group.name = str(name).strip()
        self.session.flush()
        return group

    def delete_group(self, group_id):
        """
        删除课程组（成员行级联删除）

        Raises:
            ConflictError: 仍被模板 / 院系 / 计划引用
        """
        group = self.get_group(group_id)
        if self.groups.protected_ids([group_id]):
            raise ConflictError("Course group is still in use", group_id=group_id)
        self.groups.delete(group)
        logger.info("删除课程组 %s", group_id)
