"""
字节码修改单元测试
"""

import pytest

from classpack.build.classfile import ClassFile
from classpack.build.transform import (
    Modifier,
    RemoveDebugInformationTransformer,
    TransformError,
    create_modify_function,
    create_transformers,
)
from classpack.config.schema import ModifyModel, TransformerName
from jar_builder import build_class


class MakeFinal:
    """测试用变换器：给类加上 ACC_FINAL"""

    def __call__(self, class_file):
        class_file.access_flags |= 0x0010
        return class_file


class TestRemoveDebugInformation:
    """RemoveDebugInformationTransformer 测试"""

    def test_removes_debug_tables(self):
        data = build_class("com.example.Foo", references=["com.example.Bar"], with_code=True)

        result = RemoveDebugInformationTransformer()(ClassFile.parse(data))
        rebuilt = ClassFile.parse(result.to_bytes())

        assert rebuilt.methods[0].code.attributes == []
        assert rebuilt.methods[0].code.code == b'\xb1'
        assert rebuilt.name == "com.example.Foo"
        assert "com.example.Bar" in rebuilt.referenced_class_names()
        assert len(result.to_bytes()) < len(data)

    def test_class_without_methods(self):
        data = build_class("com.example.Foo")
        assert RemoveDebugInformationTransformer()(ClassFile.parse(data)).to_bytes() == data


class TestCreateModifyFunction:
    """create_modify_function 测试"""

    def test_empty_chain_is_identity(self):
        data = b"not even a class"
        assert create_modify_function([])(data) is data

    def test_chain_applied_in_order(self):
        data = build_class("com.example.Foo", with_code=True)
        modify = create_modify_function([RemoveDebugInformationTransformer(), MakeFinal()])

        result = ClassFile.parse(modify(data))
        assert result.access_flags & 0x0010
        assert result.methods[0].code.attributes == []

    def test_invalid_class(self):
        modify = create_modify_function([MakeFinal()])
        with pytest.raises(TransformError):
            modify(b"garbage")

    def test_transformer_failure(self):
        def broken(class_file):
            raise RuntimeError("broken transformer")

        modify = create_modify_function([broken])
        with pytest.raises(TransformError) as exc_info:
            modify(build_class("com.example.Foo"))
        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestModifier:
    """Modifier 测试"""

    def test_transformers_from_names(self):
        transformers = create_transformers(["remove_debug_information"])
        assert len(transformers) == 1
        assert isinstance(transformers[0], RemoveDebugInformationTransformer)

    def test_configured_transformers(self):
        modifier = Modifier(ModifyModel(
            artifacts=["*:*"],
            transformers=[TransformerName.REMOVE_DEBUG_INFORMATION],
        ))
        modify = modifier.create_modify_function()

        result = ClassFile.parse(modify(build_class("com.example.Foo", with_code=True)))
        assert result.methods[0].code.attributes == []
        assert modifier.get_modify_function() is modify

    def test_injected_function_wins(self):
        def injected(data):
            return data

        modifier = Modifier(
            ModifyModel(artifacts=["*:*"], transformers=[TransformerName.REMOVE_DEBUG_INFORMATION]),
            modify_function=injected,
        )
        assert modifier.create_modify_function() is injected

    def test_get_before_create(self):
        modifier = Modifier(ModifyModel(artifacts=["*:*"]))
        with pytest.raises(RuntimeError):
            modifier.get_modify_function()

    def test_accept(self, make_artifact, tmp_path):
        modifier = Modifier(ModifyModel(artifacts=["com.example:app"]))
        assert modifier.accept(make_artifact("com.example", "app", "1.0", tmp_path / "app.jar"))
        assert not modifier.accept(make_artifact("com.example", "other", "1.0", tmp_path / "other.jar"))
