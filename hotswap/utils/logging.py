"""
日志工具 - 统一输出门面

封装 Rich Console，提供带时间戳、带阶段标记的统一输出接口。
更新流程中的各个阶段（打开归档、扫描条目、写入文件）都通过这里输出。
"""

import atexit
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, TextIO, Union

from rich.console import Console


class OutputLevel:
    """输出级别常量"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"


_LEVEL_ORDER = {
    OutputLevel.DEBUG: 0,
    OutputLevel.INFO: 1,
    OutputLevel.SUCCESS: 1,
    OutputLevel.WARNING: 2,
    OutputLevel.ERROR: 3,
}

_LEVEL_STYLES = {
    OutputLevel.DEBUG: "dim",
    OutputLevel.INFO: "default",
    OutputLevel.SUCCESS: "green",
    OutputLevel.WARNING: "yellow",
    OutputLevel.ERROR: "red bold",
}


class LogStage:
    """日志阶段标记"""
    OPEN = "OPEN"
    SCAN = "SCAN"
    SKIP = "SKIP"
    APPLY = "APPLY"
    INSTALL = "INSTALL"
    DONE = "DONE"


class OutputFacade:
    """输出门面

    所有输出都带时间戳；ERROR 级别写到 stderr，其余写到 stdout。
    设置了日志文件时同时追加到文件（带日期）。
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self._lock = threading.RLock()
        self._level = OutputLevel.INFO
        self._file_handle: Optional[Any] = None
        self._date_format = "%Y-%m-%d %H:%M:%S"
        self._time_format = "%H:%M:%S"
        self._console = Console(
            file=stream,  # None 时 Rich 每次输出都取当前 sys.stdout
            highlight=False,
            log_time=False,
            log_path=False,
        )
        self._error_console = Console(stderr=True, highlight=False)

    def _timestamp(self, include_date: bool = False) -> str:
        return datetime.now().strftime(self._date_format if include_date else self._time_format)

    def _should_output(self, level: str) -> bool:
        return _LEVEL_ORDER.get(level, 1) >= _LEVEL_ORDER.get(self._level, 1)

    def _format_plain(self, message: str, level: str, stage: Optional[str], include_date: bool) -> str:
        timestamp = self._timestamp(include_date)
        if stage:
            return f"[{timestamp}] [{level}] [{stage}] {message}"
        return f"[{timestamp}] [{level}] {message}"

    def _emit(self, message: str, level: str, stage: Optional[str] = None) -> None:
        if not self._should_output(level):
            return

        with self._lock:
            console = self._error_console if level == OutputLevel.ERROR else self._console
            head = f"[dim]{self._timestamp()}[/dim] [bold]{level}[/bold]"
            if stage:
                head += f" [cyan]{stage}[/cyan]"
            # 消息里可能带有方括号（路径、异常信息），不能按 markup 解析
            console.print(head, end=" ")
            console.print(message, style=_LEVEL_STYLES.get(level, "default"), markup=False)
            self._write_to_file(message, level, stage)

    def _write_to_file(self, message: str, level: str, stage: Optional[str]) -> None:
        if not self._file_handle:
            return
        self._file_handle.write(self._format_plain(message, level, stage, include_date=True) + "\n")
        self._file_handle.flush()

    def set_level(self, level: str) -> None:
        """设置输出级别"""
        if level not in _LEVEL_ORDER:
            raise ValueError(f"未知日志级别: {level}")
        with self._lock:
            self._level = level

    @property
    def level(self) -> str:
        return self._level

    def set_log_file(self, file_path: Union[str, Path]) -> None:
        """设置日志文件（追加模式）"""
        with self._lock:
            self.close()
            log_path = Path(file_path)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_handle = open(log_path, "a", encoding="utf-8")

    def debug(self, message: str, stage: Optional[str] = None) -> None:
        self._emit(message, OutputLevel.DEBUG, stage)

    def info(self, message: str, stage: Optional[str] = None) -> None:
        self._emit(message, OutputLevel.INFO, stage)

    def success(self, message: str, stage: Optional[str] = None) -> None:
        self._emit(message, OutputLevel.SUCCESS, stage)

    def warning(self, message: str, stage: Optional[str] = None) -> None:
        self._emit(message, OutputLevel.WARNING, stage)

    def error(self, message: str, stage: Optional[str] = None) -> None:
        self._emit(message, OutputLevel.ERROR, stage)

    def close(self) -> None:
        """关闭日志文件"""
        with self._lock:
            if self._file_handle:
                self._file_handle.close()
                self._file_handle = None


# 全局输出门面实例
_output_facade: Optional[OutputFacade] = None


def get_output_facade() -> OutputFacade:
    """获取全局输出门面实例"""
    global _output_facade
    if _output_facade is None:
        _output_facade = OutputFacade()
    return _output_facade


def debug(message: str, stage: Optional[str] = None) -> None:
    get_output_facade().debug(message, stage)


def info(message: str, stage: Optional[str] = None) -> None:
    get_output_facade().info(message, stage)


def success(message: str, stage: Optional[str] = None) -> None:
    get_output_facade().success(message, stage)


def warning(message: str, stage: Optional[str] = None) -> None:
    get_output_facade().warning(message, stage)


def error(message: str, stage: Optional[str] = None) -> None:
    get_output_facade().error(message, stage)


def set_log_level(level: str) -> None:
    """设置全局日志级别"""
    get_output_facade().set_level(level)


def set_log_file(file_path: Union[str, Path]) -> None:
    """设置全局日志文件"""
    get_output_facade().set_log_file(file_path)


def close_logger() -> None:
    """关闭日志系统"""
    global _output_facade
    if _output_facade:
        _output_facade.close()
        _output_facade = None


class StageLogger:
    """绑定固定阶段的日志器"""

    def __init__(self, stage: str):
        self.stage = stage

    def debug(self, message: str) -> None:
        debug(message, self.stage)

    def info(self, message: str) -> None:
        info(message, self.stage)

    def success(self, message: str) -> None:
        success(message, self.stage)

    def warning(self, message: str) -> None:
        warning(message, self.stage)

    def error(self, message: str) -> None:
        error(message, self.stage)


def get_stage_logger(stage: str) -> StageLogger:
    """获取阶段日志器"""
    return StageLogger(stage)


def configure_logging(level: str = OutputLevel.INFO, log_file: Optional[Union[str, Path]] = None) -> None:
    """配置日志系统"""
    set_log_level(level)
    if log_file:
        set_log_file(log_file)


# 预定义阶段日志器
open_logger = get_stage_logger(LogStage.OPEN)
scan_logger = get_stage_logger(LogStage.SCAN)
skip_logger = get_stage_logger(LogStage.SKIP)
apply_logger = get_stage_logger(LogStage.APPLY)
install_logger = get_stage_logger(LogStage.INSTALL)
done_logger = get_stage_logger(LogStage.DONE)


atexit.register(close_logger)
