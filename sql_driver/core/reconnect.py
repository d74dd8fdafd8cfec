"""
自动重连监控模块

ReconnectSupervisor 是一个后台守护线程，按固定间隔检测驱动的连接状态：
- 连接有效时把尝试计数清零
- 连接无效时调用 connect() 并累加尝试计数
- 每轮检测后等待 reconnect_delay 秒，等待可被 stop() 打断

状态流转：IDLE -> PROBING -> SLEEPING -> IDLE ... -> STOPPED
进入 STOPPED 的条件：stop() 打断等待、驱动关闭了自动重连、尝试次数达到上限（0 表示不限）。
重连参数每轮实时从驱动读取，运行中修改立即生效。
"""

import threading
from enum import Enum
from typing import TYPE_CHECKING, Optional

from ..utils.logging_utils import get_logger

if TYPE_CHECKING:
    from .driver import Driver

logger = get_logger(__name__)


class SupervisorState(Enum):
    """自动重连监控线程状态"""

    IDLE = "idle"
    PROBING = "probing"
    SLEEPING = "sleeping"
    STOPPED = "stopped"


class ReconnectSupervisor(threading.Thread):
    """
    自动重连监控线程

    Attributes:
        driver (Driver): 被监控的驱动实例
        state (SupervisorState): 当前状态
        attempts (int): 自上次连接正常以来的重连尝试次数

    Example:
        >>> supervisor = ReconnectSupervisor(driver)
        >>> supervisor.start()
        >>> supervisor.stop()
        >>> supervisor.join(timeout=5)
    """

    def __init__(
        self,
        driver: "Driver",
        name: Optional[str] = None,
        lock: Optional[threading.RLock] = None,
    ) -> None:
        super().__init__(name=name or "sql-driver-reconnect", daemon=True)
        self.driver = driver
        self._lock = lock if lock is not None else threading.RLock()
        self.state = SupervisorState.IDLE
        self.attempts = 0
        self._stop_event = threading.Event()

    def stop(self) -> None:
        """请求线程停止，正在进行的等待会被立即打断"""
        self._stop_event.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def run(self) -> None:
        logger.info(f"自动重连已启动: {self.driver.database_type.label}")
        try:
            while True:
                self.state = SupervisorState.PROBING
                self._probe()

                self.state = SupervisorState.SLEEPING
                if self._stop_event.wait(self.driver.reconnect_delay):
                    logger.debug("自动重连等待被打断")
                    break

                # 与 Driver.set_auto_reconnect 持有同一把锁，退出前先标记停止
                with self._lock:
                    if self._should_stop():
                        self._stop_event.set()
                        break

                self.state = SupervisorState.IDLE
        finally:
            self.state = SupervisorState.STOPPED
            logger.info(f"自动重连已停止，累计尝试次数: {self.attempts}")

    def _probe(self) -> None:
        """检测一次连接状态，必要时尝试重连；检测出错按一次失败的尝试计"""
        # 子类覆盖的 is_connected()/connect() 可能抛出异常
        try:
            connected = self.driver.is_connected()
        except Exception as e:
            logger.error(f"连接状态检测异常: {e.__class__.__name__}: {str(e)}")
            connected = False

        if connected:
            if self.attempts:
                logger.info(f"连接已恢复，重置尝试次数 (此前 {self.attempts} 次)")
            self.attempts = 0
            return

        self.attempts += 1
        logger.warning(f"连接不可用，第 {self.attempts} 次尝试重连")
        try:
            if self.driver.connect():
                logger.info(f"第 {self.attempts} 次重连成功")
        except Exception as e:
            logger.error(f"自动重连异常: {e.__class__.__name__}: {str(e)}")

    def _should_stop(self) -> bool:
        if not self.driver.auto_reconnect:
            logger.debug("自动重连已被关闭")
            return True

        max_attempts = self.driver.max_reconnect_attempts
        if max_attempts and self.attempts >= max_attempts:
            logger.error(f"重连尝试次数已达上限: {max_attempts}")
            return True

        return False

    def __repr__(self) -> str:
        return (
            f"ReconnectSupervisor(state={self.state.value!r}, "
            f"attempts={self.attempts}, alive={self.is_alive()})"
        )
