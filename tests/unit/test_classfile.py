"""
类文件解析单元测试

测试常量池解析、引用提取和无修改重建。
"""

import struct

import pytest

from classpack.build.classfile import (
    ClassFile,
    CodeAttribute,
    ParseError,
    class_dependencies,
    internal_to_dotted,
)
from jar_builder import build_class


class TestClassFileParse:
    """ClassFile.parse 测试"""

    def test_parse_name(self):
        class_file = ClassFile.parse(build_class("com.example.Foo"))
        assert class_file.name == "com.example.Foo"
        assert class_file.major_version == 52

    def test_inner_class_name(self):
        class_file = ClassFile.parse(build_class("com.example.Outer$Inner"))
        assert class_file.name == "com.example.Outer$Inner"

    def test_round_trip_is_byte_identical(self):
        """未修改的类重建后字节完全一致"""
        data = build_class(
            "com.example.Foo",
            references=["com.example.Bar"],
            field_types=["Lcom/example/Baz;"],
            literals=["hello"],
            with_code=True,
            with_long=True,
        )
        assert ClassFile.parse(data).to_bytes() == data

    def test_code_attribute_parsed(self):
        class_file = ClassFile.parse(build_class("com.example.Foo", with_code=True))

        method = class_file.methods[0]
        assert method.name == "run"
        assert method.descriptor == "()V"
        assert isinstance(method.code, CodeAttribute)
        assert method.code.code == b'\xb1'
        assert [a.name for a in method.code.attributes] == ["LineNumberTable", "LocalVariableTable"]

    def test_long_constant_takes_two_slots(self):
        """Long 之后的常量索引仍然正确"""
        data = build_class("com.example.Foo", with_long=True, field_types=["Lcom/example/After;"])
        class_file = ClassFile.parse(data)
        assert "com.example.After" in class_file.referenced_class_names()

    def test_bad_magic(self):
        data = b'\x00\x00\x00\x00' + build_class("com.example.Foo")[4:]
        with pytest.raises(ParseError):
            ClassFile.parse(data)

    def test_truncated(self):
        data = build_class("com.example.Foo")
        with pytest.raises(ParseError):
            ClassFile.parse(data[:len(data) // 2])

    def test_unknown_constant_tag(self):
        data = struct.pack('>IHHH', 0xCAFEBABE, 0, 52, 2) + bytes([99])
        with pytest.raises(ParseError, match="99"):
            ClassFile.parse(data)

    def test_empty_input(self):
        with pytest.raises(ParseError):
            ClassFile.parse(b'')


class TestReferencedClassNames:
    """引用提取测试"""

    def test_class_constants(self):
        data = build_class("com.example.A", references=["com.example.B", "com.other.C"])
        names = ClassFile.parse(data).referenced_class_names()
        assert names == {"java.lang.Object", "com.example.B", "com.other.C"}

    def test_self_excluded(self):
        data = build_class("com.example.A", field_types=["Lcom/example/A;"])
        assert "com.example.A" not in ClassFile.parse(data).referenced_class_names()

    def test_field_descriptor(self):
        data = build_class("com.example.A", field_types=["Lcom/example/Field;", "[Lcom/example/Arr;", "I"])
        names = ClassFile.parse(data).referenced_class_names()
        assert "com.example.Field" in names
        assert "com.example.Arr" in names

    def test_array_class_constant(self):
        data = build_class("com.example.A", references=["[[Lcom/example/Elem;", "[I"])
        names = ClassFile.parse(data).referenced_class_names()
        assert "com.example.Elem" in names
        assert not any(name.startswith('[') for name in names)

    def test_generic_signature(self):
        data = build_class("com.example.A", utf8_entries=["Ljava/util/List<Lcom/example/Item;>;"])
        names = ClassFile.parse(data).referenced_class_names()
        assert "java.util.List" in names
        assert "com.example.Item" in names

    def test_string_literal_ignored(self):
        """只被字符串字面量使用的 Utf8 不是引用"""
        data = build_class("com.example.A", literals=["Lcom/example/NotAType;"])
        assert "com.example.NotAType" not in ClassFile.parse(data).referenced_class_names()

    def test_class_dependencies(self):
        name, references = class_dependencies(build_class("com.example.A", references=["com.example.B"]))
        assert name == "com.example.A"
        assert references == {"java.lang.Object", "com.example.B"}


def test_internal_to_dotted():
    assert internal_to_dotted("com/example/Foo$Bar") == "com.example.Foo$Bar"
