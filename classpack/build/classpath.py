"""
classpath 组装

确定归档顺序，并写出列出输出文件名的 classpath.txt 清单。
"""

from pathlib import Path
from typing import Iterable, List, Union

from ..config.schema import ArtifactModel, ClasspathConfig

MANIFEST_NAME = "classpath.txt"
MANIFEST_ENCODING = "utf-8"


def order_artifacts(config: ClasspathConfig) -> List[ArtifactModel]:
    """确定 classpath 顺序

    项目构件（类型为 jar 时）排在最前，随后是按 artifact_id 升序排列的 jar 依赖。
    排序是稳定的，artifact_id 相同时保持配置中的顺序。
    """
    artifacts: List[ArtifactModel] = []

    if config.project is not None and config.project.is_archive:
        artifacts.append(config.project)

    dependencies = sorted(config.dependencies, key=lambda artifact: artifact.artifact_id)
    artifacts.extend(artifact for artifact in dependencies if artifact.is_archive)

    return artifacts


def write_manifest(
    output_directory: Union[str, Path],
    elements: Iterable[str],
    strict_create: bool = False,
) -> Path:
    """写出 classpath 清单：每行一个文件名，最后一行不带换行

    Raises:
        FileExistsError: strict_create 为真且清单已存在
    """
    manifest_path = Path(output_directory) / MANIFEST_NAME
    mode = 'x' if strict_create else 'w'

    with open(manifest_path, mode, encoding=MANIFEST_ENCODING, newline='') as f:
        f.write('\n'.join(elements))

    return manifest_path
