"""
业务异常

所有异常都带：
- code: 机器可读的原因
- status_code: 对应的 HTTP 状态码，给外层路由直接用
- retryable: 调用方能否原样重试
- to_dict(): 可直接返回给前端的结构化原因，不含堆栈
"""


class PlannerError(Exception):
    """业务异常基类"""

    code = 'error'
    status_code = 400
    retryable = False

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        payload = {'error': self.code, 'message': self.message}
        payload.update(self.details)
        return payload


# ----------------------------------------------------------------------
# NotFound
# ----------------------------------------------------------------------

class NotFoundError(PlannerError):
    code = 'not_found'
    status_code = 404


class UserNotFoundError(NotFoundError):
    code = 'user_not_found'

    def __init__(self, user_id):
        super().__init__(f"User {user_id} not found", user_id=user_id)


class RequirementNotFoundError(NotFoundError):
    code = 'requirement_not_found'

    def __init__(self, message="Requirement not found in this degree", **details):
        super().__init__(message, **details)


class CourseGroupNotFoundError(NotFoundError):
    code = 'course_group_not_found'

    def __init__(self, group_id):
        super().__init__(f"Course group {group_id} not found", group_id=group_id)


class CourseNotFoundError(NotFoundError):
    code = 'course_not_found'

    def __init__(self, course_code):
        super().__init__(f"Course {course_code} not found", course_code=course_code)


class ScheduleEntryNotFoundError(NotFoundError):
    code = 'schedule_entry_not_found'

    def __init__(self, course_code):
        super().__init__(f"{course_code} is not in the schedule", course_code=course_code)


class NotAMemberError(NotFoundError):
    code = 'not_a_member'

    def __init__(self, group_id, course_code):
        super().__init__(
            f"{course_code} is not in this requirement",
            group_id=group_id,
            course_code=course_code
        )


# ----------------------------------------------------------------------
# Conflict
# ----------------------------------------------------------------------

class ConflictError(PlannerError):
    code = 'conflict'
    status_code = 409


class AlreadyMemberError(ConflictError):
    code = 'already_member'

    def __init__(self, group_id, course_code):
        super().__init__(
            "Course already in this requirement",
            group_id=group_id,
            course_code=course_code
        )


class DuplicateScheduleEntryError(ConflictError):
    code = 'already_scheduled'

    def __init__(self, course_code):
        super().__init__(f"{course_code} is already scheduled", course_code=course_code)


class PlanIncompleteError(ConflictError):
    """上一次计划拷贝没完成；整体重试即可，不做局部修复"""

    code = 'plan_incomplete'
    retryable = True

    def __init__(self, plan_id):
        super().__init__(
            "Degree plan was not fully created, please retry",
            plan_id=plan_id
        )


# ----------------------------------------------------------------------
# 输入 / 前置条件
# ----------------------------------------------------------------------

class InvalidInputError(PlannerError):
    code = 'invalid_input'
    status_code = 400

    def __init__(self, message, errors=None, **details):
        if errors:
            details['errors'] = list(errors)
        super().__init__(message, **details)


class NoDegreeSelectedError(PlannerError):
    code = 'no_degree_selected'
    status_code = 400

    def __init__(self, user_id):
        super().__init__("No degree selected", user_id=user_id)


# ----------------------------------------------------------------------
# 数据完整性（数据损坏，不是用户错误，不要自动重试）
# ----------------------------------------------------------------------

class DataIntegrityError(PlannerError):
    code = 'integrity_error'
    status_code = 500


class TemplateNotFoundError(DataIntegrityError):
    code = 'template_not_found'

    def __init__(self, template_id):
        super().__init__(f"Template {template_id} not found", template_id=template_id)


class TreeDepthError(DataIntegrityError):
    code = 'tree_too_deep'

    def __init__(self, node_id, max_depth):
        super().__init__(
            f"Requirement tree deeper than {max_depth} levels",
            node_id=node_id,
            max_depth=max_depth
        )
