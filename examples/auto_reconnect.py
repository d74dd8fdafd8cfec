"""
自动重连示例

连接一个 PostgreSQL 数据库并开启自动重连，运行期间可以重启数据库观察恢复过程。
"""

import os
import sys
import time

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sql_driver import ConnectionConfigBuilder, DatabaseType, Driver
from sql_driver.utils import setup_logging


def auto_reconnect_example():
    setup_logging(level="DEBUG", log_to_console=True, log_to_file=False)

    builder = (
        ConnectionConfigBuilder.with_type(DatabaseType.POSTGRESQL)
        .with_host("localhost")
        .with_port(5432)
        .with_database("your_database")
        .with_username("your_username")
        .with_password("your_password")
    )
    driver = Driver(builder)

    # 最多连续尝试5次，每次间隔2秒
    driver.set_auto_reconnect_settings(5, 2.0)
    driver.connect()
    driver.set_auto_reconnect(True)

    try:
        for _ in range(30):
            state = driver.supervisor.state.value
            print(f"连接: {driver.is_connected()}  重连线程: {state}")
            if not driver.supervisor.is_alive():
                print("❌ 重连次数已用尽")
                break
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        driver.close(timeout=5)


if __name__ == "__main__":
    auto_reconnect_example()
