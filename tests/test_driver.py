"""
数据库驱动测试
"""

import pytest
from sqlalchemy import text

from fakes import FakeClient

from sql_driver.core.config import ConnectionConfigBuilder
from sql_driver.core.database_type import DatabaseType
from sql_driver.core.driver import DEFAULT_EMBEDDED_INIT_COMMANDS, Driver
from sql_driver.core.exceptions import ConfigError, DriverError


def mariadb_builder():
    return (
        ConnectionConfigBuilder.with_type(DatabaseType.MARIADB)
        .with_host("localhost")
        .with_port(3306)
        .with_database("shop")
        .with_username("app")
        .with_password("secret")
    )


def sqlite_builder(database=":memory:"):
    return ConnectionConfigBuilder.with_type(DatabaseType.SQLITE).with_database(database)


class TestDriver:
    """Driver测试类（使用客户端替身）"""

    def setup_method(self):
        """测试方法 setup"""
        self.client = FakeClient()
        self.driver = Driver(mariadb_builder(), client=self.client)

    def teardown_method(self):
        """测试方法 teardown"""
        self.driver.close(timeout=5)

    def test_initialization(self):
        """测试驱动初始化不建立连接"""
        assert self.driver.url == "mariadb+pymysql://localhost:3306/shop"
        assert self.driver.database_type is DatabaseType.MARIADB
        assert self.driver.get_connection() is None
        assert self.driver.is_connected() is False
        assert self.driver.auto_reconnect is False
        assert self.client.open_calls == 0

    def test_accepts_built_config(self):
        """测试可直接传入已构建的配置"""
        driver = Driver(mariadb_builder().build(), client=FakeClient())
        assert driver.config == mariadb_builder().build()

    def test_invalid_config(self):
        """测试配置类型错误或不合法"""
        with pytest.raises(ConfigError):
            Driver({"type": "sqlite"}, client=FakeClient())

        with pytest.raises(ConfigError):
            Driver(ConnectionConfigBuilder.with_type("mysql"), client=FakeClient())

    def test_connect(self):
        """测试建立连接"""
        assert self.driver.connect() is True
        assert self.driver.is_connected() is True
        assert self.driver.get_connection() is self.client.handles[0]
        assert self.driver.connection is self.client.handles[0]

    def test_connect_idempotent(self):
        """测试重复连接不会打开新连接"""
        assert self.driver.connect() is True
        assert self.driver.connect() is True
        assert self.client.open_calls == 1

    def test_connect_failure(self):
        """测试连接失败返回False而不是抛出异常"""
        client = FakeClient(fail_first=None)
        driver = Driver(mariadb_builder(), client=client)

        assert driver.connect() is False
        assert driver.is_connected() is False
        assert driver.get_connection() is None

    def test_connect_missing_capability(self):
        """测试客户端能力缺失时连接失败"""
        client = FakeClient(capability_error=DriverError("缺少客户端"))
        driver = Driver(mariadb_builder(), client=client)

        assert driver.connect() is False
        assert client.open_calls == 0

    def test_connect_replaces_stale_handle(self):
        """测试已失效的连接被丢弃并重新连接"""
        self.driver.connect()
        stale = self.client.handles[0]
        stale.valid = False

        assert self.driver.is_connected() is False
        assert self.driver.connect() is True
        assert stale.close_calls == 1
        assert self.driver.get_connection() is self.client.handles[1]

    def test_network_ignores_init_commands(self):
        """测试网络型数据库不执行初始化命令"""
        self.driver.connect(["SET NAMES utf8mb4"])
        assert self.client.handles[0].commands == []

    def test_embedded_default_init_commands(self):
        """测试嵌入式数据库默认开启外键约束"""
        client = FakeClient()
        driver = Driver(sqlite_builder(), client=client)

        assert driver.connect() is True
        assert client.handles[0].commands == list(DEFAULT_EMBEDDED_INIT_COMMANDS)

    def test_embedded_custom_init_commands(self):
        """测试嵌入式数据库自定义初始化命令"""
        client = FakeClient()
        driver = Driver(sqlite_builder(), client=client)

        driver.connect(["PRAGMA journal_mode = WAL"])
        assert client.handles[0].commands == ["PRAGMA journal_mode = WAL"]

    def test_disconnect(self):
        """测试断开连接"""
        assert self.driver.disconnect() is True

        self.driver.connect()
        handle = self.client.handles[0]
        assert self.driver.disconnect() is True
        assert handle.closed is True
        assert self.driver.get_connection() is None
        assert self.driver.is_connected() is False

        assert self.driver.disconnect() is True
        assert handle.close_calls == 1

    def test_disconnect_stale_handle(self):
        """测试断开已失效的连接"""
        self.driver.connect()
        self.client.handles[0].valid = False

        assert self.driver.disconnect() is True
        assert self.driver.get_connection() is None

    def test_disconnect_failure(self):
        """测试关闭失败时返回False"""
        client = FakeClient(fail_close=True)
        driver = Driver(mariadb_builder(), client=client)
        driver.connect()

        assert driver.disconnect() is False
        assert driver.get_connection() is not None

    def test_is_connected_swallows_probe_errors(self):
        """测试有效性检测出错时视为未连接"""
        self.driver.connect()

        def broken(timeout=0):
            raise RuntimeError("probe failed")

        self.client.handles[0].is_valid = broken
        assert self.driver.is_connected() is False

    @pytest.mark.parametrize(
        "max_attempts,delay",
        [(-1, 1.0), (3, -0.5), (1.5, 1.0), (True, 1.0), (3, "1"), (None, 1.0)],
    )
    def test_invalid_auto_reconnect_settings(self, max_attempts, delay):
        """测试无效的自动重连参数"""
        with pytest.raises(ValueError):
            self.driver.set_auto_reconnect_settings(max_attempts, delay)

    def test_auto_reconnect_settings(self):
        """测试设置自动重连参数"""
        self.driver.set_auto_reconnect_settings(5, 10)
        assert self.driver.max_reconnect_attempts == 5
        assert self.driver.reconnect_delay == 10.0

        self.driver.set_auto_reconnect_settings(0, 0)
        assert self.driver.max_reconnect_attempts == 0

    def test_connection_info(self):
        """测试连接信息不泄露凭据"""
        info = self.driver.get_connection_info()

        assert info["database_type"] == "mariadb"
        assert info["client"] == "fake"
        assert info["host"] == "localhost"
        assert info["username"] == "***"
        assert "password" not in info
        assert "secret" not in repr(info)
        assert info["is_connected"] is False

    def test_context_manager(self):
        """测试上下文管理器"""
        client = FakeClient()
        with Driver(mariadb_builder(), client=client) as driver:
            assert driver.is_connected() is True

        assert client.handles[0].closed is True
        assert driver.get_connection() is None

    def test_repr(self):
        """测试字符串表示"""
        text_repr = repr(self.driver)
        assert "mariadb" in text_repr
        assert "secret" not in text_repr


class TestDriverSQLite:
    """Driver测试类（真实的SQLite内存数据库）"""

    def setup_method(self):
        """测试方法 setup"""
        self.driver = Driver(sqlite_builder())

    def teardown_method(self):
        """测试方法 teardown"""
        self.driver.close(timeout=5)

    def test_connect_disconnect(self):
        """测试内存数据库连接与断开"""
        assert self.driver.is_connected() is False
        assert self.driver.connect() is True
        assert self.driver.is_connected() is True
        assert self.driver.connect() is True
        assert self.driver.disconnect() is True
        assert self.driver.is_connected() is False
        assert self.driver.disconnect() is True

    def test_foreign_keys_enabled(self):
        """测试默认初始化命令开启外键约束"""
        self.driver.connect()
        result = self.driver.get_connection().execute(text("PRAGMA foreign_keys"))
        assert result.scalar() == 1

    def test_empty_init_commands(self):
        """测试不执行初始化命令"""
        self.driver.connect([])
        result = self.driver.get_connection().execute(text("PRAGMA foreign_keys"))
        assert result.scalar() == 0

    def test_invalid_init_command(self):
        """测试初始化命令出错时连接失败"""
        assert self.driver.connect(["NOT A STATEMENT"]) is False
        assert self.driver.get_connection() is None

    def test_file_database(self, tmp_path):
        """测试文件数据库"""
        db_file = tmp_path / "app.db"
        driver = Driver(sqlite_builder(str(db_file)))

        assert driver.connect() is True
        assert db_file.exists()
        assert driver.disconnect() is True

    def test_probe_keeps_caller_transaction(self):
        """测试有效性检测不回滚调用方的事务"""
        self.driver.connect()
        conn = self.driver.get_connection()
        conn.execute(text("CREATE TABLE items (id INTEGER PRIMARY KEY)"))
        conn.commit()

        conn.execute(text("INSERT INTO items (id) VALUES (1)"))
        assert self.driver.is_connected() is True
        conn.commit()

        count = conn.execute(text("SELECT COUNT(*) FROM items")).scalar()
        assert count == 1

    def test_concurrent_write_survives_validity_check(self, monkeypatch):
        """测试有效性检测进行中调用方开始的写入不会丢失"""
        self.driver.connect()
        conn = self.driver.get_connection()
        conn.execute(text("CREATE TABLE items (id INTEGER PRIMARY KEY)"))
        conn.commit()
        assert conn.in_transaction() is False

        original_ping = conn.dialect.do_ping

        def ping_with_concurrent_write(dbapi_connection):
            # 模拟检测过程中另一线程开始写入
            conn.execute(text("INSERT INTO items (id) VALUES (1)"))
            return original_ping(dbapi_connection)

        monkeypatch.setattr(conn.dialect, "do_ping", ping_with_concurrent_write)

        assert self.driver.is_connected() is True
        assert conn.in_transaction() is True
        conn.commit()

        count = conn.execute(text("SELECT COUNT(*) FROM items")).scalar()
        assert count == 1

    def test_validity_check_leaves_no_transaction(self):
        """测试有效性检测不会开启SQLAlchemy事务"""
        self.driver.connect()
        conn = self.driver.get_connection()

        assert self.driver.is_connected() is True
        assert conn.in_transaction() is False
