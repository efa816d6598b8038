"""
课表分析（纯函数）

- partition_courses：按当前学期把排课分成已修 / 计划中
- find_prerequisite_gaps：找出先修课一门都没排在更早学期的课程

先修检查只是提示，不阻止排课；只要任一先修课排在更早学期就算满足
"""
from utils.term_utils import parse_term


class PrerequisiteWarning:
    """一条先修缺失提示"""

    __slots__ = ('course_code', 'term', 'prerequisites')

    def __init__(self, course_code, term, prerequisites):
        self.course_code = course_code
        self.term = term
        self.prerequisites = tuple(sorted(prerequisites))

    def to_dict(self):
        return {
            'course_code': self.course_code,
            'term': self.term,
            'missing_prerequisites': list(self.prerequisites),
        }

    def __eq__(self, other):
        if not isinstance(other, PrerequisiteWarning):
            return NotImplemented
        return (self.course_code, self.term, self.prerequisites) == \
            (other.course_code, other.term, other.prerequisites)

    def __hash__(self):
        return hash((self.course_code, self.term, self.prerequisites))

    def __repr__(self):
        return f"<PrerequisiteWarning {self.course_code} @ {self.term} needs any of {self.prerequisites}>"


def partition_courses(placements, current_term):
    """
    Args:
        placements: [(course_code, term), ...]
        current_term: 当前学期代码

    Returns:
        tuple: (completed, planned) 两个 frozenset；
               早于当前学期的算已修，当前及之后的算计划中
    """
    current = parse_term(current_term)
    completed = set()
    planned = set()
    for course_code, term in placements:
        if parse_term(term) < current:
            completed.add(course_code)
        else:
            planned.add(course_code)
    # 同一门课排了多次时，以已修为准
    return frozenset(completed), frozenset(planned - completed)


def find_prerequisite_gaps(placements, prerequisites):
    """
    Args:
        placements: [(course_code, term), ...]，允许重复
        prerequisites: {course_code: set(prereq_code)}，缺省视为没有先修

    Returns:
        list[PrerequisiteWarning]: 按学期、课程代码排序
    """
    placed = [(code, term, parse_term(term)) for code, term in placements]

    warnings = []
    seen = set()
    for code, term, index in placed:
        required = prerequisites.get(code) or set()
        if not required:
            continue
        earlier = {other for other, _, other_index in placed if other_index < index}
        if required & earlier:
            continue
        warning = PrerequisiteWarning(code, term, required)
        if warning not in seen:
            seen.add(warning)
            warnings.append(warning)

    warnings.sort(key=lambda w: (parse_term(w.term), w.course_code))
    return warnings
