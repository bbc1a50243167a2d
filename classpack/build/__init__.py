"""构建服务模块

提供类图分析、归档最小化与重新打包、classpath 组装的核心功能。
"""

from .archive import UnsupportedStorageError, is_versioned_member, unit_name_for_member
from .build_context import BuildContext, BuildError
from .builder import BuildResult, ClasspathBuilder
from .classfile import ClassFile, ParseError
from .classpath import MANIFEST_NAME, order_artifacts, write_manifest
from .entry_points import EntryPointResolver, load_property_values, load_services
from .minifier import Minifier
from .reachability import ReachabilityResult, compute_removable, reachable_units
from .repackager import ArchiveRepackager, RepackageStats
from .transform import (
    ClassTransformer,
    Modifier,
    RemoveDebugInformationTransformer,
    TransformError,
    create_modify_function,
)
from .unit_graph import Unit, UnitGraph, UnitGraphBuilder, build_unit_graph

__all__ = [
    # 主构建器
    "ClasspathBuilder",
    "BuildResult",
    "BuildContext",
    "BuildError",

    # 类图与可达性
    "ClassFile",
    "ParseError",
    "Unit",
    "UnitGraph",
    "UnitGraphBuilder",
    "build_unit_graph",
    "EntryPointResolver",
    "load_property_values",
    "load_services",
    "ReachabilityResult",
    "compute_removable",
    "reachable_units",
    "Minifier",

    # 字节码修改
    "ClassTransformer",
    "RemoveDebugInformationTransformer",
    "Modifier",
    "TransformError",
    "create_modify_function",

    # 归档
    "ArchiveRepackager",
    "RepackageStats",
    "UnsupportedStorageError",
    "is_versioned_member",
    "unit_name_for_member",
    "MANIFEST_NAME",
    "order_artifacts",
    "write_manifest",
]
