"""
配置加载器

读取 YAML 配置文档，把构件和输出目录的相对路径解析到配置文件所在目录，
再交给 ClasspathConfig 校验。
"""

import copy
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ..utils.paths import expand_path
from .schema import ClasspathConfig

CONFIG_SUFFIXES = ('.yaml', '.yml')

# 相对于配置文件目录解析的键
_OUTPUT_KEYS = ('output_directory', 'outputDirectory')


class ConfigError(Exception):
    """配置无法读取"""
    pass


class ConfigValidationError(ConfigError):
    """配置内容不符合模型"""

    def __init__(self, message: str, errors: List[Dict[str, Any]]):
        super().__init__(message)
        self.errors = errors

    def format_errors(self) -> str:
        """每个错误一行，附带出错的输入值"""
        lines = []
        for error in self.errors:
            location = ".".join(str(item) for item in error.get('loc', ()))
            lines.append(f"{location or '(根)'}: {error.get('msg', '')}")
            if error.get('input') not in (None, ''):
                lines.append(f"    取值: {error['input']!r}")
        return "\n".join(lines)

    def format_errors_json(self) -> str:
        return json.dumps(self.errors, ensure_ascii=False, indent=2, default=str)


@dataclass
class ValidationResult:
    """配置验证结果"""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    config: Optional[ClasspathConfig] = None


def _errors_from(e: ValidationError) -> List[Dict[str, Any]]:
    # ctx 中可能带有异常对象，无法直接序列化
    return [
        {key: value for key, value in error.items() if key in ('type', 'loc', 'msg', 'input')}
        for error in e.errors()
    ]


class ConfigLoader:
    """配置加载器"""

    def __init__(self):
        self.yaml = YAML(typ='safe')
        self.yaml.default_flow_style = False
        self.yaml.width = 4096

    def read_document(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """读取 YAML 文档，只做语法层面的检查

        Raises:
            ConfigError: 文件缺失、扩展名不对、YAML 语法错误或根节点不是映射
        """
        config_path = Path(config_path)

        if not config_path.is_file():
            reason = "不是文件" if config_path.exists() else "不存在"
            raise ConfigError(f"配置文件{reason}: {config_path}")

        if config_path.suffix.lower() not in CONFIG_SUFFIXES:
            raise ConfigError(f"配置文件扩展名必须是 {' 或 '.join(CONFIG_SUFFIXES)}: {config_path.name}")

        try:
            document = self.yaml.load(config_path.read_text(encoding='utf-8'))
        except YAMLError as e:
            raise ConfigError(f"{config_path.name} 不是合法的 YAML: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"无法读取 {config_path}: {e}") from e

        if document is None:
            raise ConfigError(f"配置文件为空: {config_path.name}")

        if not isinstance(document, dict):
            raise ConfigError(f"{config_path.name} 的根节点必须是映射，实际为 {type(document).__name__}")

        return document

    def load_from_file(self, config_path: Union[str, Path]) -> ClasspathConfig:
        """读取并校验配置文件

        Raises:
            ConfigError: 文件无法读取
            ConfigValidationError: 内容校验失败
        """
        config_path = Path(config_path)
        return self.load_from_dict(self.read_document(config_path), config_path.parent)

    def load_from_dict(self, data: Dict[str, Any], base_path: Optional[Path] = None) -> ClasspathConfig:
        """校验配置字典；给出 base_path 时先解析相对路径，输入字典不会被修改

        Raises:
            ConfigValidationError: 配置验证错误
        """
        if base_path:
            data = copy.deepcopy(data)
            self._resolve_relative_paths(data, Path(base_path))

        try:
            return ClasspathConfig.from_dict(data)
        except ValidationError as e:
            raise ConfigValidationError(f"配置校验失败 ({e.error_count()} 个错误)", _errors_from(e)) from e

    def save_to_file(self, config: ClasspathConfig, output_path: Union[str, Path]) -> None:
        """写出配置文件

        Raises:
            ConfigError: 写入失败
        """
        output_path = Path(output_path)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, 'w', encoding='utf-8') as f:
                self.yaml.dump(config.to_dict(), f)
        except OSError as e:
            raise ConfigError(f"无法写出配置文件 {output_path}: {e}") from e

    def validate_file(self, config_path: Union[str, Path]) -> List[Dict[str, Any]]:
        """返回校验错误列表，空列表表示通过"""
        try:
            self.load_from_file(config_path)
        except ConfigValidationError as e:
            return e.errors
        except ConfigError as e:
            return [{'loc': [], 'msg': str(e), 'type': 'config_error'}]
        return []

    def _resolve_relative_paths(self, data: Dict[str, Any], base_path: Path) -> None:
        for key in _OUTPUT_KEYS:
            self._resolve_key(data, key, base_path)

        artifacts = [data.get('project')]
        if isinstance(data.get('dependencies'), list):
            artifacts.extend(data['dependencies'])

        for artifact in artifacts:
            if isinstance(artifact, dict):
                self._resolve_key(artifact, 'file', base_path)

    def _resolve_key(self, data: Dict[str, Any], key: str, base_path: Path) -> None:
        value = data.get(key)
        if isinstance(value, str) and value:
            data[key] = str(expand_path(value, base_path))


config_loader = ConfigLoader()


def load_config(config_path: Union[str, Path]) -> ClasspathConfig:
    return config_loader.load_from_file(config_path)


def validate_config(config_path: Union[str, Path]) -> List[Dict[str, Any]]:
    return config_loader.validate_file(config_path)


def validate_config_with_result(config_path: Union[str, Path]) -> ValidationResult:
    """校验配置文件，成功时附带配置对象"""
    try:
        return ValidationResult(is_valid=True, config=load_config(config_path))
    except ConfigValidationError as e:
        return ValidationResult(is_valid=False, errors=e.format_errors().splitlines())
    except ConfigError as e:
        return ValidationResult(is_valid=False, errors=[str(e)])


def save_config(config: ClasspathConfig, output_path: Union[str, Path]) -> None:
    config_loader.save_to_file(config, output_path)
