"""单文件安装模块"""

from .installer import CHUNK_SIZE, apply

__all__ = [
    "CHUNK_SIZE",
    "apply",
]
