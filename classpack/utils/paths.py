"""
路径工具
"""

import os
from pathlib import Path
from typing import Union

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def expand_path(path: Union[str, Path], base_path: Union[str, Path, None] = None) -> Path:
    """展开环境变量和 ~，相对路径以 base_path（缺省为当前目录）为基准，返回绝对路径"""
    if isinstance(path, str):
        path = os.path.expanduser(os.path.expandvars(path))

    path = Path(path)
    if base_path is not None and not path.is_absolute():
        path = Path(base_path) / path

    return path.resolve()


def ensure_directory(path: Union[str, Path]) -> Path:
    """创建目录（含父目录），已存在时直接返回

    Raises:
        OSError: 同名文件已存在或无权限
    """
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def format_size(size_bytes: int) -> str:
    """把字节数格式化为 512 B、2.0 KB 这样的形式"""
    size = float(size_bytes)
    for unit in _SIZE_UNITS[:-1]:
        if size < 1024.0:
            break
        size /= 1024.0
    else:
        unit = _SIZE_UNITS[-1]

    if unit == "B":
        return f"{int(size)} B"
    return f"{size:.1f} {unit}"
