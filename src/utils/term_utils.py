"""
学期代码解析和比较工具函数

学期格式：年级数字 + 学期字母
- 1A: 第一年上学期
- 1B: 第一年下学期
- ...
- 4B: 第四年下学期

学期顺序：1A < 1B < 2A < 2B < 3A < 3B < 4A < 4B
"""

TERMS = ("1A", "1B", "2A", "2B", "3A", "3B", "4A", "4B")


def parse_term(term_code: str) -> int:
    """
    解析学期代码为可比较的序号

    Args:
        term_code: 学期代码，如 "1A", "3B"（大小写不敏感）

    Returns:
        int: 在 TERMS 中的位置（0 = 1A）

    Raises:
        ValueError: 如果学期代码格式不正确

    Examples:
        >>> parse_term("1A")
        0
        >>> parse_term("2b")
        3
    """
    if not isinstance(term_code, str):
        raise ValueError(f"Invalid term format: {term_code!r}. Expected format: 1A..4B")

    code = term_code.strip().upper()
    if code not in TERMS:
        raise ValueError(
            f"Invalid term: {term_code!r}. Must be one of: {', '.join(TERMS)}"
        )
    return TERMS.index(code)


def normalize_term(term_code: str) -> str:
    """返回标准写法，如 "2b" -> "2B" """
    return TERMS[parse_term(term_code)]


def compare_terms(term1: str, term2: str) -> int:
    """
    比较两个学期的先后顺序

    Returns:
        int:
            -1 如果 term1 更早
             0 如果相同
             1 如果 term1 更晚

    Examples:
        >>> compare_terms("1A", "2A")
        -1
        >>> compare_terms("3B", "3B")
        0
    """
    index1 = parse_term(term1)
    index2 = parse_term(term2)

    if index1 < index2:
        return -1
    elif index1 > index2:
        return 1
    else:
        return 0


def is_earlier(term1: str, term2: str) -> bool:
    """
    判断 term1 是否早于 term2

    Examples:
        >>> is_earlier("1B", "2A")
        True
        >>> is_earlier("2A", "2A")
        False
    """
    return compare_terms(term1, term2) < 0


def is_later_or_equal(term1: str, term2: str) -> bool:
    """判断 term1 是否晚于或等于 term2"""
    return compare_terms(term1, term2) >= 0


def validate_term(term_code: str) -> bool:
    """
    验证学期代码格式是否正确

    Examples:
        >>> validate_term("4B")
        True
        >>> validate_term("5A")
        False
    """
    try:
        parse_term(term_code)
        return True
    except ValueError:
        return False
