#!/usr/bin/env python3
"""
计划数据完整性检查脚本
检查未完成的计划拷贝、跨计划共享的课程组、泄漏的课程组和悬空的模板引用
"""
import sys
import os
import argparse
import json

# 添加 src 目录到 Python 路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from database import Database
from logging_config import setup_logging
from services import PlanIntegrityChecker

TITLES = {
    'incomplete_plans': '未完成拷贝的计划',
    'groups_shared_across_plans': '被多个计划引用的课程组',
    'leaked_groups': '没有任何引用的课程组',
    'dangling_templates': '指向不存在模板的用户',
}


def print_report(issues):
    print(f"\n{'='*70}")
    print(f"{'计划数据完整性检查':^70}")
    print(f"{'='*70}\n")

    has_issues = False
    for key, title in TITLES.items():
        items = issues.get(key) or []
        if not items:
            print(f"✓ {title}: 0")
            continue
        has_issues = True
        print(f"\n✗ {title} ({len(items)} 个):")
        print("-" * 70)
        for item in items:
            print(f"  • {item}")

    print()
    print("=" * 70)
    if has_issues:
        print(f"{'✗ 发现数据不一致，请检查上述问题':^70}")
    else:
        print(f"{'✓ 所有检查通过！':^70}")
    print("=" * 70)

    if issues.get('incomplete_plans'):
        print("\n【诊断建议】")
        print("-" * 70)
        print("  未完成的计划：让学生重新选择学位（select_degree）即可重建")
    return has_issues


def parse_args():
    """解析命令行参数"""
    parser = argparse.ArgumentParser(
        description='检查学生计划和课程组的数据完整性'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='以 JSON 输出检查结果'
    )
    return parser.parse_args()


def main():
    """主函数"""
    args = parse_args()
    setup_logging()

    db = Database()
    session = db.get_session()
    try:
        issues = PlanIntegrityChecker(session).run()
    finally:
        session.close()

    if args.json:
        print(json.dumps(issues, indent=2, ensure_ascii=False))
        has_issues = any(issues.values())
    else:
        has_issues = print_report(issues)

    if has_issues:
        sys.exit(1)


if __name__ == "__main__":
    main()
