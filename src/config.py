"""
运行配置
从 .env / 环境变量读取，所有模块共享同一个 settings 实例
"""
import os
from dotenv import load_dotenv

# 加载 .env 文件中的环境变量
load_dotenv()


def _get_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Settings:
    """应用配置"""

    def __init__(self):
        # --- 数据库 ---
        # DATABASE_URL 优先；否则由 DB_* 拼出 MySQL URL
        self.database_url = os.getenv('DATABASE_URL')
        self.db_host = os.getenv('DB_HOST')
        self.db_port = os.getenv('DB_PORT', '3306')
        self.db_name = os.getenv('DB_NAME')
        self.db_user = os.getenv('DB_USER')
        self.db_password = os.getenv('DB_PASSWORD')
        self.db_echo = _get_bool('DB_ECHO')

        # --- 日志 ---
        self.log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
        self.log_dir = os.getenv('LOG_DIR', 'logs')

        # --- 业务 ---
        # 树深度上限，只用来拦截脏数据造成的环
        self.max_tree_depth = int(os.getenv('MAX_TREE_DEPTH', '16'))
        self.default_term = os.getenv('DEFAULT_TERM', '1A')

    def build_database_url(self):
        """
        返回 SQLAlchemy 连接 URL

        Raises:
            ValueError: 既没有 DATABASE_URL，DB_* 配置也不完整
        """
        if self.database_url:
            return self.database_url

        if not all([self.db_host, self.db_name, self.db_user, self.db_password]):
            raise ValueError(
                "数据库配置不完整！请设置 DATABASE_URL，或在 .env 中提供：\n"
                "DB_HOST, DB_PORT, DB_NAME, DB_USER, DB_PASSWORD"
            )

        return (
            f"mysql+pymysql://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )


settings = Settings()
