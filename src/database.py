"""
数据库连接管理
"""
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from config import settings
from models import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite 默认不检查外键，ON DELETE CASCADE 依赖它"""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """数据库连接管理类"""

    def __init__(self, url=None, echo=None):
        """
        Args:
            url: SQLAlchemy URL，不传则从配置读取
            echo: 是否打印 SQL（调试用），不传则从配置读取
        """
        self.url = url or settings.build_database_url()
        self.echo = settings.db_echo if echo is None else echo
        self.engine = None
        self.Session = None
        self._init_engine()

    def _init_engine(self):
        """初始化数据库引擎"""
        if self.url.startswith('sqlite'):
            # 内存库必须共用同一个连接，否则每个连接都是一个新库
            self.engine = create_engine(
                self.url,
                echo=self.echo,
                connect_args={'check_same_thread': False},
                poolclass=StaticPool,
            )
            event.listen(self.engine, 'connect', _enable_sqlite_foreign_keys)
        else:
            self.engine = create_engine(
                self.url,
                pool_pre_ping=True,      # 连接前先 ping，确保连接有效
                pool_recycle=3600,       # 1小时后回收连接
                echo=self.echo,
            )

        # 创建 Session 类
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)

    def test_connection(self):
        """测试数据库连接"""
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            print(f"✓ 数据库连接成功！({self.engine.dialect.name})")
            return True
        except Exception as e:
            print(f"✗ 数据库连接失败: {e}")
            return False

    def create_tables(self):
        """创建所有数据表（仅创建不存在的表）"""
        try:
            Base.metadata.create_all(self.engine)
            # 验证关键表是否存在
            existing_tables = inspect(self.engine).get_table_names()
            expected_tables = [t.name for t in Base.metadata.sorted_tables]
            missing = [t for t in expected_tables if t not in existing_tables]
            if missing:
                logger.error("以下表未创建成功: %s", missing)
                return False
            logger.info("已确认 %d 张表存在", len(expected_tables))
            return True
        except Exception:
            logger.exception("创建数据表失败")
            return False

    def reset_tables(self):
        """删除并重建所有数据表（危险操作！会清空所有数据）"""
        try:
            Base.metadata.drop_all(self.engine)
            Base.metadata.create_all(self.engine)
            logger.warning("所有数据表已重建")
            return True
        except Exception:
            logger.exception("重建数据表失败")
            return False

    def get_session(self):
        """获取数据库会话"""
        return self.Session()

    def dispose(self):
        self.engine.dispose()


@contextmanager
def transaction(session):
    """
    把一次写操作包成一个事务：成功提交，任何异常回滚后原样抛出

    用法：
        with transaction(session):
            ...
    """
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
