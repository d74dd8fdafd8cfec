"""
SQL Driver CLI 工具
==================

提供命令行界面来管理连接档案、检测连接和观察自动重连。

使用示例:
    sql-driver add shop --type mariadb --host localhost --port 3306 \\
        --database shop --username app --password secret
    sql-driver add local --type sqlite --database app.db
    sql-driver list
    sql-driver check shop
    sql-driver watch shop --max-attempts 5 --delay 10
"""

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional

from .core.config import ConnectionConfig
from .core.driver import Driver
from .core.exceptions import SQLDriverError
from .core.profiles import ProfileStore
from .core.database_type import get_supported_databases
from .utils.logging_utils import get_logger, setup_logging

logger = get_logger(__name__)


class SQLDriverCLI:
    """
    SQL Driver 命令行接口主类

    Attributes:
        store (Optional[ProfileStore]): 连接档案存储，首次使用时创建
        config_dir (Optional[Path]): 自定义配置目录
    """

    STORE_NOT_INIT_MSG = "❌ 连接档案存储初始化失败"

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        self.store: Optional[ProfileStore] = None
        self.config_dir = config_dir

    def _ensure_store_initialized(self) -> ProfileStore:
        if self.store is None:
            try:
                self.store = ProfileStore(config_dir=self.config_dir)
            except SQLDriverError as e:
                logger.error(f"初始化档案存储失败: {e}")
                print(f"{self.STORE_NOT_INIT_MSG}: {e}")
                sys.exit(1)
        return self.store

    def _load_profile(self, name: str) -> ConnectionConfig:
        store = self._ensure_store_initialized()
        try:
            return store.get_profile(name)
        except (SQLDriverError, ValueError) as e:
            logger.error(f"读取连接档案失败: {e}")
            print(f"❌ 读取连接档案失败: {e}")
            sys.exit(1)

    def add_profile(self, args: argparse.Namespace) -> None:
        """
        添加新的连接档案

        Args:
            args: 命令行参数，包含档案名称和连接参数
        """
        store = self._ensure_store_initialized()

        data = {
            "type": args.type,
            "host": args.host,
            "port": args.port,
            "database": args.database,
            "username": args.username,
            "password": args.password,
        }
        # 移除未提供的参数
        data = {k: v for k, v in data.items() if v is not None}

        try:
            config = ConnectionConfig.from_dict(data)
            store.add_profile(args.name, config, overwrite=args.force)
            print(f"✅ 连接档案 '{args.name}' 添加成功")
        except (SQLDriverError, ValueError) as e:
            logger.error(f"添加连接档案失败: {e}")
            print(f"❌ 添加连接档案失败: {e}")
            sys.exit(1)

    def list_profiles(self, _args: argparse.Namespace) -> None:
        store = self._ensure_store_initialized()

        try:
            profiles = store.list_profiles()
        except SQLDriverError as e:
            logger.error(f"列出连接档案失败: {e}")
            print(f"❌ 列出连接档案失败: {e}")
            sys.exit(1)

        if profiles:
            print("📋 已保存的连接档案:")
            for i, name in enumerate(profiles, 1):
                print(f"  {i}. {name}")
        else:
            print("ℹ️  没有保存任何连接档案")

    def show_profile(self, args: argparse.Namespace) -> None:
        """
        显示连接档案详情，密码以***显示
        """
        config = self._load_profile(args.name)

        print(f"🔍 连接档案 '{args.name}':")
        for key, value in config.to_dict().items():
            if key == "password":
                value = "***"
            print(f"  {key}: {value}")

    def remove_profile(self, args: argparse.Namespace) -> None:
        store = self._ensure_store_initialized()

        try:
            store.remove_profile(args.name)
            print(f"✅ 连接档案 '{args.name}' 已删除")
        except (SQLDriverError, ValueError) as e:
            logger.error(f"删除连接档案失败: {e}")
            print(f"❌ 删除连接档案失败: {e}")
            sys.exit(1)

    def check_profile(self, args: argparse.Namespace) -> None:
        """
        建立一次连接以检测连通性，随后断开

        Raises:
            SystemExit: 连接失败时以状态码1退出
        """
        config = self._load_profile(args.name)
        driver = Driver(config)

        if not driver.connect():
            print(f"❌ 连接 '{args.name}' 检测失败")
            sys.exit(1)

        print(f"✅ 连接 '{args.name}' 检测成功")
        driver.disconnect()

    def watch_profile(self, args: argparse.Namespace) -> None:
        """
        开启自动重连并周期性输出连接状态

        --count 为 0 时持续运行，直到 Ctrl+C。
        """
        config = self._load_profile(args.name)
        driver = Driver(config)

        try:
            driver.set_auto_reconnect_settings(args.max_attempts, args.delay)
        except ValueError as e:
            print(f"❌ 自动重连参数无效: {e}")
            sys.exit(1)

        driver.connect()
        driver.set_auto_reconnect(True)
        print(f"👀 正在观察连接 '{args.name}'，按 Ctrl+C 结束")

        checks = 0
        try:
            while args.count == 0 or checks < args.count:
                checks += 1
                status = "已连接" if driver.is_connected() else "未连接"
                supervisor = driver.supervisor
                attempts = supervisor.attempts if supervisor is not None else 0
                print(f"  [{time.strftime('%H:%M:%S')}] {status} (重连尝试: {attempts})")
                if args.count and checks >= args.count:
                    break
                time.sleep(args.interval)
        except KeyboardInterrupt:
            print()
        finally:
            driver.close(timeout=max(args.delay, 1.0) * 2)
            print("ℹ️  已停止观察")


def create_argument_parser(cli: SQLDriverCLI) -> argparse.ArgumentParser:
    """
    创建命令行参数解析器

    Args:
        cli: 处理各子命令的CLI实例

    Returns:
        argparse.ArgumentParser: 配置好的参数解析器
    """
    parser = argparse.ArgumentParser(
        prog="sql-driver",
        description="SQL Driver - 单连接数据库驱动工具",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用示例:
  sql-driver add local --type sqlite --database app.db
  sql-driver list
  sql-driver check local
  sql-driver watch local --max-attempts 5 --delay 10
        """,
    )
    parser.add_argument("--config-dir", help="配置目录，默认为用户配置目录")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="日志级别",
    )

    subparsers = parser.add_subparsers(title="可用命令", dest="command")

    # add 命令
    add_parser = subparsers.add_parser("add", help="添加连接档案")
    add_parser.add_argument("name", help="档案名称")
    add_parser.add_argument(
        "--type",
        required=True,
        help=f"数据库类型 ({', '.join(get_supported_databases())})",
    )
    add_parser.add_argument("--host", help="数据库主机")
    add_parser.add_argument("--port", type=int, help="数据库端口")
    add_parser.add_argument("--database", required=True, help="数据库名或SQLite文件路径")
    add_parser.add_argument("--username", help="用户名")
    add_parser.add_argument("--password", help="密码")
    add_parser.add_argument("--force", action="store_true", help="覆盖同名档案")
    add_parser.set_defaults(func=cli.add_profile)

    # list 命令
    list_parser = subparsers.add_parser("list", help="列出所有连接档案")
    list_parser.set_defaults(func=cli.list_profiles)

    # show 命令
    show_parser = subparsers.add_parser("show", help="显示连接档案详情")
    show_parser.add_argument("name", help="档案名称")
    show_parser.set_defaults(func=cli.show_profile)

    # remove 命令
    remove_parser = subparsers.add_parser("remove", help="删除连接档案")
    remove_parser.add_argument("name", help="档案名称")
    remove_parser.set_defaults(func=cli.remove_profile)

    # check 命令
    check_parser = subparsers.add_parser("check", help="检测连接")
    check_parser.add_argument("name", help="档案名称")
    check_parser.set_defaults(func=cli.check_profile)

    # watch 命令
    watch_parser = subparsers.add_parser("watch", help="开启自动重连并观察连接状态")
    watch_parser.add_argument("name", help="档案名称")
    watch_parser.add_argument(
        "--interval", type=float, default=5.0, help="状态输出间隔（秒）"
    )
    watch_parser.add_argument(
        "--max-attempts", type=int, default=0, help="最大重连次数，0 表示不限"
    )
    watch_parser.add_argument(
        "--delay", type=float, default=1.0, help="重连检测间隔（秒）"
    )
    watch_parser.add_argument(
        "--count", type=int, default=0, help="输出次数，0 表示持续运行"
    )
    watch_parser.set_defaults(func=cli.watch_profile)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """
    SQL Driver CLI 主入口函数

    解析命令行参数并执行相应的操作。
    """
    cli = SQLDriverCLI()
    parser = create_argument_parser(cli)

    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return

    if args.config_dir:
        cli.config_dir = Path(args.config_dir)

    try:
        log_dir = str(cli.config_dir / "logs") if cli.config_dir else None
        setup_logging(level=args.log_level, log_dir=log_dir)
    except (OSError, ValueError) as e:
        print(f"❌ 日志系统初始化失败: {e}")
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
