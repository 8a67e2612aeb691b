"""通用工具模块"""

from .logging import (
    configure_logging,
    get_stage_logger,
    StageLogger,
    LogStage,
    OutputLevel,
    set_log_level,
    set_log_file,
    # 预定义日志器
    open_logger,
    scan_logger,
    skip_logger,
    apply_logger,
    install_logger,
    done_logger,
)

from .paths import (
    expand_path,
    executable_real_path,
    entry_destination,
    split_entry_name,
    format_size,
)

__all__ = [
    # 日志相关
    "configure_logging",
    "get_stage_logger",
    "StageLogger",
    "LogStage",
    "OutputLevel",
    "set_log_level",
    "set_log_file",
    "open_logger",
    "scan_logger",
    "skip_logger",
    "apply_logger",
    "install_logger",
    "done_logger",

    # 路径相关
    "expand_path",
    "executable_real_path",
    "entry_destination",
    "split_entry_name",
    "format_size",
]
