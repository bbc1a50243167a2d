"""测试夹具"""

import zipfile
from pathlib import Path
from typing import Optional

import pytest

from classpack.config.schema import ArtifactModel
from jar_builder import build_class, write_jar


@pytest.fixture
def make_class():
    return build_class


@pytest.fixture
def make_jar(tmp_path):
    """在临时目录中生成归档的工厂"""
    def factory(file_name: str, members, compression: int = zipfile.ZIP_DEFLATED) -> Path:
        return write_jar(tmp_path / file_name, members, compression)
    return factory


@pytest.fixture
def make_artifact():
    def factory(group_id: str, artifact_id: str, version: str, file: Path, type: Optional[str] = None) -> ArtifactModel:
        data = dict(group_id=group_id, artifact_id=artifact_id, version=version, file=file)
        if type is not None:
            data["type"] = type
        return ArtifactModel(**data)
    return factory
