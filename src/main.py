"""
主程序入口
建表，并从 YAML 导入课程目录和学位模板
"""
import glob
import logging
import os
import argparse

from database import Database
from logging_config import setup_logging
from services import CatalogService, TemplateService

logger = logging.getLogger(__name__)

DATA_DIR = os.path.join(os.path.dirname(__file__), '..', 'data')
DEFAULT_CATALOG = os.path.join(DATA_DIR, 'catalog', 'catalog.yml')
TEMPLATE_DIR = os.path.join(DATA_DIR, 'templates')


def parse_args():
    """解析命令行参数"""
    parser = argparse.ArgumentParser(
        description='学位规划数据初始化',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用示例:
  python src/main.py                                   # 导入默认目录和全部模板
  python src/main.py --catalog data/catalog/catalog.yml
  python src/main.py --templates data/templates/cs_honours.yml
  python src/main.py --reset                           # 清空重建所有表后导入
        """
    )

    parser.add_argument(
        '--catalog',
        type=str,
        default=DEFAULT_CATALOG,
        help='课程目录 YAML 文件（默认 data/catalog/catalog.yml）'
    )

    parser.add_argument(
        '--templates',
        nargs='+',
        metavar='FILE',
        help='要导入的模板 YAML 文件（不指定则导入 data/templates/ 下全部）'
    )

    parser.add_argument(
        '--reset',
        action='store_true',
        help='删除并重建所有数据表（会清空全部数据！）'
    )

    return parser.parse_args()


def find_template_files(paths=None):
    if paths:
        return list(paths)
    return sorted(glob.glob(os.path.join(TEMPLATE_DIR, '*.yml')))


def main():
    """主函数"""
    args = parse_args()
    setup_logging()

    print("=" * 60)
    print("学位规划数据初始化")
    print("=" * 60)
    print(f"课程目录: {args.catalog}")
    template_files = find_template_files(args.templates)
    print(f"模板文件: {len(template_files)} 个")
    if args.reset:
        print("模式: 清空重建")
    print()

    # 1. 初始化数据库
    print("步骤 1: 初始化数据库连接")
    print("-" * 60)
    db = Database()
    if not db.test_connection():
        print("\n数据库连接失败，请检查 .env 配置")
        return
    print()

    # 2. 创建表
    print("步骤 2: 创建数据表")
    print("-" * 60)
    ok = db.reset_tables() if args.reset else db.create_tables()
    if not ok:
        print("\n数据表创建失败，程序终止")
        return
    print("✓ 数据表就绪")
    print()

    session = db.get_session()

    # 3. 导入课程目录
    print("步骤 3: 导入课程目录")
    print("-" * 60)
    try:
        stats = CatalogService(session).import_from_yaml(args.catalog)
    except (OSError, ValueError) as e:
        print(f"✗ 课程目录导入失败: {e}")
        session.close()
        return
    print(f"✓ 新建 {stats['courses_created']} 门，更新 {stats['courses_updated']} 门，"
          f"先修 {stats['prerequisites']} 条")
    if stats['prerequisites_not_found']:
        print(f"⚠️ 未找到的先修课程: {', '.join(stats['prerequisites_not_found'])}")
    print()

    # 4. 导入模板
    print("步骤 4: 导入学位模板")
    print("-" * 60)
    template_service = TemplateService(session)
    success_count = 0
    fail_count = 0
    for idx, path in enumerate(template_files, 1):
        print(f"[{idx}/{len(template_files)}] {os.path.basename(path)}")
        try:
            stats = template_service.import_from_yaml(path)
        except (OSError, ValueError) as e:
            print(f"  ✗ 导入失败: {e}")
            logger.exception("模板导入失败: %s", path)
            fail_count += 1
            continue
        print(f"  ✓ {stats['template']}: {stats['requirements']} 个节点，{stats['groups']} 个课程组")
        success_count += 1

    # 关闭会话
    session.close()

    print("\n" + "=" * 60)
    print(f"程序执行完成！模板成功: {success_count}, 失败: {fail_count}")
    print("=" * 60)


if __name__ == "__main__":
    main()
