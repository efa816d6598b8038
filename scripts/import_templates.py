#!/usr/bin/env python3
"""
学位模板导入脚本
从 YAML 文件读取学位模板并导入数据库（同名模板整体替换）

使用方法：
  python scripts/import_templates.py --templates cs_honours
  python scripts/import_templates.py --all
  python scripts/import_templates.py --validate              # 校验所有 YAML 文件
  python scripts/import_templates.py --validate cs_honours   # 校验指定文件
"""
import sys
import os
import argparse
import glob

# 添加 src 目录到 Python 路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from database import Database
from logging_config import setup_logging
from services import TemplateService

# YAML 文件目录
DATA_DIR = os.path.join(os.path.dirname(__file__), '..', 'data', 'templates')


def find_yaml_files(template_keys=None):
    """
    查找 YAML 文件

    Args:
        template_keys: 文件名（不含 .yml），如 ["cs_honours"]。None 表示查找所有。

    Returns:
        list: [(key, yaml_path), ...]
    """
    if template_keys:
        files = []
        for key in template_keys:
            yaml_path = os.path.join(DATA_DIR, f"{key.lower()}.yml")
            if os.path.exists(yaml_path):
                files.append((key, yaml_path))
            else:
                print(f"⚠️ 未找到 YAML 文件: {yaml_path}")
        return files

    files = []
    for yaml_path in sorted(glob.glob(os.path.join(DATA_DIR, '*.yml'))):
        key = os.path.splitext(os.path.basename(yaml_path))[0]
        files.append((key, yaml_path))
    return files


def parse_args():
    """解析命令行参数"""
    parser = argparse.ArgumentParser(
        description='导入学位模板（从 YAML 文件）',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用示例:
  python scripts/import_templates.py --templates cs_honours   # 导入一个模板
  python scripts/import_templates.py --all                    # 导入所有 YAML 文件
  python scripts/import_templates.py --validate               # 校验所有 YAML 文件（不需要数据库）
        """
    )

    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        '--templates',
        nargs='+',
        metavar='NAME',
        help='指定要导入的模板文件名（不含 .yml）'
    )
    group.add_argument(
        '--all',
        action='store_true',
        help='导入 data/templates/ 目录下的所有 YAML 文件'
    )
    group.add_argument(
        '--validate',
        nargs='*',
        metavar='NAME',
        help='仅校验 YAML 文件格式，不写入数据库。不加文件名则校验所有文件。'
    )

    return parser.parse_args()


def run_validate(template_keys):
    """仅做 schema 校验，不连接数据库"""
    print("=" * 60)
    print("模板 YAML Schema 校验")
    print("=" * 60)

    yaml_files = find_yaml_files(template_keys if template_keys else None)
    if not yaml_files:
        print("没有找到任何 YAML 文件")
        return

    print(f"校验 {len(yaml_files)} 个文件:\n")

    all_passed = True
    for key, yaml_path in yaml_files:
        errors = TemplateService.validate_yaml(yaml_path)
        if errors:
            all_passed = False
            print(f"✗ {key}")
            for msg in errors:
                print(msg)
        else:
            print(f"✓ {key}")

    print()
    if all_passed:
        print("所有文件校验通过 ✓")
    else:
        print("部分文件存在错误，请修复后再导入 ✗")
        sys.exit(1)


def main():
    """主函数"""
    args = parse_args()
    setup_logging()

    # --validate 模式：不需要数据库
    if args.validate is not None:
        run_validate(args.validate)
        return

    print("=" * 60)
    print("学位模板导入")
    print("=" * 60)

    # 1. 查找 YAML 文件
    if args.all:
        yaml_files = find_yaml_files()
        print("模式: 导入全部")
    else:
        yaml_files = find_yaml_files(args.templates)
        print(f"模式: 导入指定模板 {args.templates}")

    if not yaml_files:
        print("\n没有找到任何 YAML 文件")
        return

    print(f"找到 {len(yaml_files)} 个 YAML 文件:")
    for key, path in yaml_files:
        print(f"  • {key}: {path}")
    print()

    # 2. 初始化数据库
    print("初始化数据库连接...")
    db = Database()
    if not db.test_connection():
        print("\n数据库连接失败，请检查 .env 配置")
        return

    if not db.create_tables():
        print("\n数据表创建失败，程序终止")
        return
    print()

    # 3. 导入每个模板
    session = db.get_session()
    service = TemplateService(session)

    success_count = 0
    fail_count = 0

    for idx, (key, yaml_path) in enumerate(yaml_files, 1):
        print(f"\n[{idx}/{len(yaml_files)}] 导入 {key}")
        print("-" * 60)

        try:
            stats = service.import_from_yaml(yaml_path)
        except (OSError, ValueError) as e:
            print(f"✗ 导入 {key} 失败: {e}")
            fail_count += 1
            continue

        action = "替换" if stats['replaced'] else "新建"
        print(f"✓ {action} {stats['template']}: {stats['requirements']} 个节点，"
              f"{stats['groups']} 个课程组")
        if stats['courses_not_found']:
            print(f"⚠️ 未找到的课程: {', '.join(stats['courses_not_found'])}")
        if stats['groups_collected']:
            print(f"  回收旧课程组 {stats['groups_collected']} 个")
        success_count += 1

    # 4. 关闭会话
    session.close()

    # 5. 汇总
    print("\n" + "=" * 60)
    print(f"导入完成！成功: {success_count}, 失败: {fail_count}")
    print("=" * 60)


if __name__ == "__main__":
    main()
