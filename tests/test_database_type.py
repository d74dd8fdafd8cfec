"""
数据库类型测试
"""

import pytest

from sql_driver.core.database_type import DatabaseType, get_supported_databases
from sql_driver.core.exceptions import DriverError


class TestDatabaseType:
    """DatabaseType测试类"""

    def test_supported_databases(self):
        """测试支持的数据库类型列表"""
        assert get_supported_databases() == ["mariadb", "mysql", "postgresql", "sqlite"]

    def test_metadata(self):
        """测试类型元数据"""
        assert DatabaseType.SQLITE.embedded is True
        assert DatabaseType.SQLITE.default_port is None
        assert DatabaseType.MARIADB.embedded is False
        assert DatabaseType.MARIADB.default_port == 3306
        assert DatabaseType.POSTGRESQL.default_port == 5432
        assert DatabaseType.MYSQL.client_module == "pymysql"

    def test_format_url(self):
        """测试连接目标模板"""
        assert (
            DatabaseType.MYSQL.format_url("localhost", 3306, "shop")
            == "mysql+pymysql://localhost:3306/shop"
        )
        assert (
            DatabaseType.POSTGRESQL.format_url("db", 5432, "shop")
            == "postgresql+psycopg://db:5432/shop"
        )
        assert DatabaseType.SQLITE.format_url(database="/tmp/app.db") == (
            "sqlite:////tmp/app.db"
        )

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("mariadb", DatabaseType.MARIADB),
            ("MySQL", DatabaseType.MYSQL),
            (" postgresql ", DatabaseType.POSTGRESQL),
            ("postgres", DatabaseType.POSTGRESQL),
            ("pg", DatabaseType.POSTGRESQL),
            ("sqlite3", DatabaseType.SQLITE),
            (DatabaseType.SQLITE, DatabaseType.SQLITE),
        ],
    )
    def test_parse(self, value, expected):
        """测试类型名称解析"""
        assert DatabaseType.parse(value) is expected

    @pytest.mark.parametrize("value", ["oracle", "", None, 42])
    def test_parse_unknown(self, value):
        """测试未知类型名称"""
        with pytest.raises(DriverError):
            DatabaseType.parse(value)
