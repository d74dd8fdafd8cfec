"""
测试用的客户端替身

不依赖真实数据库，可控制连接的成功、失败和失效。
"""

import threading

from sql_driver.core.exceptions import ConnectionError
from sql_driver.drivers.base import ClientAdapter, ConnectionHandle


class FakeHandle(ConnectionHandle):
    """可手动置为失效的连接句柄"""

    def __init__(self, fail_close=False):
        self.valid = True
        self._closed = False
        self.fail_close = fail_close
        self.commands = []
        self.close_calls = 0

    @property
    def raw(self):
        return self

    @property
    def closed(self):
        return self._closed

    def is_valid(self, timeout=0):
        return self.valid and not self._closed

    def close(self):
        self.close_calls += 1
        if self.fail_close:
            raise ConnectionError("关闭失败", operation="close")
        self._closed = True

    def execute(self, command):
        self.commands.append(command)


class FakeClient(ClientAdapter):
    """
    前 fail_first 次 open() 失败的客户端

    fail_first 为 None 时始终失败。
    """

    name = "fake"

    def __init__(self, fail_first=0, capability_error=None, fail_close=False):
        self.fail_first = fail_first
        self.capability_error = capability_error
        self.fail_close = fail_close
        self.open_calls = 0
        self.handles = []
        self._lock = threading.Lock()

    def build_url(self, config):
        return config.url

    def ensure_capability(self, database_type):
        if self.capability_error is not None:
            raise self.capability_error

    def open(self, url, username=None, password=None):
        with self._lock:
            self.open_calls += 1
            if self.fail_first is None or self.open_calls <= self.fail_first:
                raise ConnectionError("无法连接", operation="connect", url=url)
            handle = FakeHandle(fail_close=self.fail_close)
            self.handles.append(handle)
            return handle
