"""
工具函数模块
"""
from .term_utils import (
    TERMS,
    parse_term,
    normalize_term,
    compare_terms,
    is_earlier,
    is_later_or_equal,
    validate_term
)

__all__ = [
    'TERMS',
    'parse_term',
    'normalize_term',
    'compare_terms',
    'is_earlier',
    'is_later_or_equal',
    'validate_term'
]
