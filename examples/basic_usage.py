"""
基础使用示例
"""

import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import text

from sql_driver import ConnectionConfigBuilder, DatabaseType, Driver, SQLDriverError


def sqlite_example():
    """SQLite内存数据库示例"""

    builder = ConnectionConfigBuilder.with_type(DatabaseType.SQLITE).with_database(
        ":memory:"
    )

    with Driver(builder) as driver:
        if not driver.is_connected():
            print("❌ SQLite连接失败")
            return

        print("✅ SQLite连接已建立")
        conn = driver.get_connection()
        foreign_keys = conn.execute(text("PRAGMA foreign_keys")).scalar()
        print(f"🔍 外键约束: {'开启' if foreign_keys else '关闭'}")
        print(f"📋 连接信息: {driver.get_connection_info()}")


def mariadb_example():
    """MariaDB示例（需要真实的数据库和 PyMySQL）"""

    try:
        builder = (
            ConnectionConfigBuilder.with_type(DatabaseType.MARIADB)
            .with_host("localhost")
            .with_port(3306)
            .with_database("your_database")
            .with_username("your_username")
            .with_password("your_password")
        )
        driver = Driver(builder)
    except SQLDriverError as e:
        print(f"❌ 连接配置无效: {e}")
        return

    if driver.connect():
        print("✅ MariaDB连接已建立")
        driver.disconnect()
    else:
        print("❌ MariaDB连接失败，详情见日志")


def invalid_config_example():
    """配置错误在设置参数时即被发现"""

    try:
        ConnectionConfigBuilder.with_type("sqlite").with_host("localhost")
    except SQLDriverError as e:
        print(f"⚠️ {e}")

    try:
        ConnectionConfigBuilder.with_type("postgresql").with_port(70000)
    except SQLDriverError as e:
        print(f"⚠️ {e}")


if __name__ == "__main__":
    sqlite_example()
    mariadb_example()
    invalid_config_example()
