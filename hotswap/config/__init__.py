"""配置和 Schema 模块

提供更新选项模型以及 YAML 配置文件的加载、验证和保存功能。
"""

from .schema import ApplyOptions, HotswapConfig, merge_apply_options
from .loader import (
    ConfigLoader,
    ConfigValidationError,
    ConfigError,
    ValidationResult,
    load_config,
    validate_config,
    validate_config_with_result,
    save_config,
    config_loader
)

__all__ = [
    # 模型
    "ApplyOptions",
    "HotswapConfig",
    "merge_apply_options",

    # 加载器
    "ConfigLoader",
    "ValidationResult",

    # 异常类
    "ConfigError",
    "ConfigValidationError",

    # 便捷函数
    "load_config",
    "validate_config",
    "validate_config_with_result",
    "save_config",

    # 单例
    "config_loader",
]
