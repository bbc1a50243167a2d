"""通用工具模块"""

from .logging import (
    configure_logging,
    get_stage_logger,
    StageLogger,
    LogStage,
    OutputLevel,
    scan_logger,
    analyze_logger,
    modify_logger,
    repack_logger,
)

from .paths import (
    expand_path,
    ensure_directory,
    format_size,
)

from .properties import parse_properties

__all__ = [
    # 日志相关
    "configure_logging",
    "get_stage_logger",
    "StageLogger",
    "LogStage",
    "OutputLevel",
    "scan_logger",
    "analyze_logger",
    "modify_logger",
    "repack_logger",

    # 路径相关
    "expand_path",
    "ensure_directory",
    "format_size",

    # 文本格式
    "parse_properties",
]
