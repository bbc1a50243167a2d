"""
配置 Schema 定义

使用 Pydantic 定义 classpath 打包配置模型，支持验证和类型检查。
键名既可以写成 snake_case，也可以写成 camelCase（entryPoints 等）。
"""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# 仅此类型的构件参与 classpath
ARCHIVE_TYPE = "jar"

# 选择器中的通配符
ID_ANY = "*"

_SELECTOR_PATTERN = re.compile(r'^(?:\*:\*|[^:*\s]+:\*|[^:*\s]+:[^:*\s]+)$')


class TransformerName(str, Enum):
    """可用的类文件变换器"""
    REMOVE_DEBUG_INFORMATION = "remove_debug_information"


class _Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
    )


class ArtifactModel(_Model):
    """构件模型（项目本身或依赖）"""
    group_id: str = Field(..., description="groupId", min_length=1)
    artifact_id: str = Field(..., description="artifactId", min_length=1)
    version: str = Field(..., description="版本号", min_length=1)
    type: str = Field(ARCHIVE_TYPE, description="构件类型，只有 jar 会进入 classpath")
    file: Path = Field(..., description="构件文件路径")

    @field_validator('group_id', 'artifact_id')
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        """标识符不能包含分隔符和通配符"""
        if ':' in v or ID_ANY in v:
            raise ValueError(f"标识符不能包含 ':' 或 '*': {v}")
        return v

    @property
    def id(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"

    @property
    def is_archive(self) -> bool:
        return self.type == ARCHIVE_TYPE

    def copy_file_name(self) -> str:
        """原样复制时的输出文件名"""
        return f"{self.artifact_id}-{self.version}.{ARCHIVE_TYPE}"

    def repackaged_file_name(self) -> str:
        """重新打包时的输出文件名"""
        return f"{self.artifact_id}-{self.version}-repackaged.{ARCHIVE_TYPE}"


class TaskModel(_Model):
    """任务基类：通过选择器决定作用于哪些构件"""
    artifacts: List[str] = Field(
        ...,
        description="构件选择器列表（*:*、group:*、group:artifact）",
        min_length=1,
    )

    @field_validator('artifacts')
    @classmethod
    def validate_artifacts(cls, v: List[str]) -> List[str]:
        """验证选择器格式并去重"""
        cleaned = []
        for selector in v:
            selector = selector.strip()
            if not _SELECTOR_PATTERN.match(selector):
                raise ValueError(f"构件选择器格式不正确: '{selector}'，支持 *:*、group:*、group:artifact")
            if selector not in cleaned:
                cleaned.append(selector)
        return cleaned

    def accept(self, artifact: ArtifactModel) -> bool:
        """判断任务是否作用于该构件"""
        selectors = self.artifacts

        return (
            f"{ID_ANY}:{ID_ANY}" in selectors
            or f"{artifact.group_id}:{ID_ANY}" in selectors
            or artifact.id in selectors
        )


def _clean_names(values: List[str]) -> List[str]:
    cleaned = []
    for value in values:
        value = value.strip()
        if value and value not in cleaned:
            cleaned.append(value)
    return cleaned


class MinifyModel(TaskModel):
    """最小化任务配置"""
    entry_points: List[str] = Field(default_factory=list, description="入口类的全限定名")
    property_entry_points: List[str] = Field(
        default_factory=list,
        description="归档内 .properties 成员路径，其值作为入口类",
    )
    service_entry_points: List[str] = Field(
        default_factory=list,
        description="归档内服务注册文件路径（如 META-INF/services/...），每行一个入口类",
    )

    @field_validator('entry_points', 'property_entry_points', 'service_entry_points')
    @classmethod
    def validate_names(cls, v: List[str]) -> List[str]:
        return _clean_names(v)


class ModifyModel(TaskModel):
    """字节码修改任务配置"""
    transformers: List[TransformerName] = Field(
        default_factory=list,
        description="按顺序应用的类文件变换器",
    )


class ConfigModel(_Model):
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


class ClasspathConfig(_Model):
    """classpath 打包主配置模型"""

    config: ConfigModel = Field(default_factory=ConfigModel, description="配置元信息")

    project: Optional[ArtifactModel] = Field(None, description="项目构件")
    dependencies: List[ArtifactModel] = Field(default_factory=list, description="依赖构件")
    output_directory: Path = Field(..., description="输出目录")

    compression_level: int = Field(-1, description="Deflate 压缩级别，-1 表示默认", ge=-1, le=9)
    strict_create: bool = Field(False, description="输出文件已存在时是否报错")

    minify: Optional[MinifyModel] = Field(None, description="最小化任务")
    modify: Optional[ModifyModel] = Field(None, description="字节码修改任务")

    @field_validator('compression_level', mode='before')
    @classmethod
    def validate_compression_level(cls, v: Any) -> Any:
        """'default' 等价于 -1"""
        if isinstance(v, str) and v.strip().lower() == "default":
            return -1
        return v

    @model_validator(mode='after')
    def validate_output_names(self) -> 'ClasspathConfig':
        """同一构件不能出现两次，否则输出文件名冲突"""
        seen = set()
        for artifact in self.iter_artifacts():
            key = (artifact.artifact_id, artifact.version)
            if key in seen:
                raise ValueError(f"构件重复: {artifact.id}:{artifact.version}")
            seen.add(key)
        return self

    def iter_artifacts(self) -> List[ArtifactModel]:
        artifacts = [self.project] if self.project is not None else []
        return artifacts + list(self.dependencies)

    def get_compression_level(self) -> Optional[int]:
        """获取 zipfile 可用的压缩级别，None 表示默认"""
        return None if self.compression_level == -1 else self.compression_level

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        data = self.model_dump(exclude_none=True)

        def convert_values(obj):
            if isinstance(obj, dict):
                return {k: convert_values(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [convert_values(item) for item in obj]
            elif isinstance(obj, Enum):
                return obj.value
            elif isinstance(obj, Path):
                return str(obj)
            else:
                return obj

        return convert_values(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ClasspathConfig':
        """从字典创建配置实例"""
        return cls.model_validate(data)
