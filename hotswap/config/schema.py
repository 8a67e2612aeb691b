"""
配置 Schema 定义

使用 Pydantic 定义更新选项和 YAML 配置文件模型。
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from ..archive.walker import DEFAULT_IGNORE_PATHS


class ApplyOptions(BaseModel):
    """单次更新的选项

    ``target_path`` 为空时由入口函数替换为当前可执行文件所在目录；
    逐条目安装时再派生出指向具体文件的副本。实例本身不可修改。
    """
    target_path: Optional[Path] = Field(None, description="目标目录（或单文件安装时的目标文件）")
    target_mode: int = Field(0o755, description="安装后文件权限", ge=0, le=0o7777)
    old_save_path: Optional[Path] = Field(None, description="被替换文件的保留位置（应用归档时为备份目录），为空时替换后删除")

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    @field_validator('target_path', 'old_save_path', mode='before')
    @classmethod
    def empty_path_to_none(cls, v: Any) -> Any:
        """空字符串视为未设置"""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('target_mode', mode='before')
    @classmethod
    def parse_mode(cls, v: Any) -> Any:
        """支持 ``"0755"`` / ``"0o755"`` 形式的八进制字符串"""
        if isinstance(v, str):
            text = v.strip().lower()
            if text.startswith("0o"):
                text = text[2:]
            try:
                return int(text, 8)
            except ValueError:
                raise ValueError(f"无效的文件权限: {v}，应为八进制，例如 0755")
        return v

    @property
    def has_target(self) -> bool:
        return self.target_path is not None


class ConfigModel(BaseModel):
    """配置元信息模型"""
    version: int = Field(1, description="配置 schema 版本", ge=1)

    @field_validator('version')
    @classmethod
    def validate_config_version(cls, v: int) -> int:
        """验证配置版本"""
        SUPPORTED_VERSIONS = [1]
        if v not in SUPPORTED_VERSIONS:
            raise ValueError(f"不支持的配置版本 {v}，支持的版本: {SUPPORTED_VERSIONS}")
        return v


class HotswapConfig(BaseModel):
    """配置文件根模型"""

    config: ConfigModel = Field(default_factory=ConfigModel, description="配置元信息")
    apply: ApplyOptions = Field(default_factory=ApplyOptions, description="安装选项")
    ignore: List[str] = Field(
        default_factory=lambda: sorted(DEFAULT_IGNORE_PATHS),
        description="忽略的路径片段（精确匹配，区分大小写）",
    )

    model_config = {
        "extra": "forbid",
        "validate_assignment": True,
        "str_strip_whitespace": True,
    }

    @field_validator('ignore')
    @classmethod
    def validate_ignore(cls, v: List[str]) -> List[str]:
        """忽略规则只能是单个路径片段"""
        cleaned: List[str] = []
        for name in v:
            if not name:
                raise ValueError("忽略规则不能为空")
            if "/" in name or "\\" in name:
                raise ValueError(f"忽略规则必须是单个路径片段，不能包含分隔符: {name}")
            if name not in cleaned:
                cleaned.append(name)
        return cleaned

    @property
    def ignore_paths(self) -> frozenset:
        return frozenset(self.ignore)

    def to_dict(self) -> Dict[str, Any]:
        """转换为可写入 YAML 的字典"""
        data = self.model_dump(exclude_none=True)
        apply_data = data.get('apply', {})
        for key in ('target_path', 'old_save_path'):
            if key in apply_data:
                apply_data[key] = str(apply_data[key])
        apply_data['target_mode'] = f"{self.apply.target_mode:04o}"
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HotswapConfig':
        """从字典创建配置实例"""
        return cls.model_validate(data)


def merge_apply_options(
    base: ApplyOptions,
    target_path: Optional[Union[str, Path]] = None,
    target_mode: Optional[Union[int, str]] = None,
    old_save_path: Optional[Union[str, Path]] = None,
) -> ApplyOptions:
    """用命令行参数覆盖配置中的选项，返回新实例"""
    data = base.model_dump()
    if target_path is not None:
        data['target_path'] = target_path
    if target_mode is not None:
        data['target_mode'] = target_mode
    if old_save_path is not None:
        data['old_save_path'] = old_save_path
    return ApplyOptions.model_validate(data)
