"""
类文件与归档生成工具

用 struct 直接拼出最小的类文件和 JAR，测试不依赖 JDK。
"""

import struct
import zipfile
from pathlib import Path
from typing import Dict, Iterable, Sequence, Union


class ClassFileWriter:
    """拼装常量池"""

    def __init__(self):
        self.entries = []
        self._utf8 = {}
        self._classes = {}

    def _add(self, data: bytes, slots: int = 1) -> int:
        index = len(self.entries) + 1
        self.entries.append(data)
        # Long/Double 占两个槽位，第二个槽位不写出任何字节
        for _ in range(slots - 1):
            self.entries.append(b'')
        return index

    def utf8(self, value: str) -> int:
        if value not in self._utf8:
            raw = value.encode('utf-8')
            self._utf8[value] = self._add(struct.pack('>BH', 1, len(raw)) + raw)
        return self._utf8[value]

    def class_ref(self, internal_name: str) -> int:
        if internal_name not in self._classes:
            self._classes[internal_name] = self._add(struct.pack('>BH', 7, self.utf8(internal_name)))
        return self._classes[internal_name]

    def string(self, value: str) -> int:
        return self._add(struct.pack('>BH', 8, self.utf8(value)))

    def long(self, value: int) -> int:
        return self._add(struct.pack('>Bq', 5, value), slots=2)

    def pool_bytes(self) -> bytes:
        return struct.pack('>H', len(self.entries) + 1) + b''.join(self.entries)


def _internal(name: str) -> str:
    return name.replace('.', '/')


def _attribute(name_index: int, info: bytes) -> bytes:
    return struct.pack('>HI', name_index, len(info)) + info


def build_class(
    name: str,
    references: Iterable[str] = (),
    field_types: Iterable[str] = (),
    literals: Iterable[str] = (),
    utf8_entries: Iterable[str] = (),
    with_code: bool = False,
    with_long: bool = False,
    super_name: str = "java.lang.Object",
) -> bytes:
    """生成类文件字节

    Args:
        name: 点分类名
        references: 以 CONSTANT_Class 引用的类（点分名，或以 [ 开头的数组描述符）
        field_types: 字段描述符，如 Lcom/example/Foo;
        literals: 字符串字面量
        utf8_entries: 额外的 Utf8 常量（如泛型签名）
        with_code: 是否生成带行号表和局部变量表的 run()V 方法
        with_long: 是否加入一个 Long 常量
    """
    pool = ClassFileWriter()
    this_class = pool.class_ref(_internal(name))
    super_class = pool.class_ref(_internal(super_name))

    for reference in references:
        pool.class_ref(reference if reference.startswith('[') else _internal(reference))
    for literal in literals:
        pool.string(literal)
    for value in utf8_entries:
        pool.utf8(value)
    if with_long:
        pool.long(1 << 40)

    fields = []
    for index, descriptor in enumerate(field_types):
        fields.append(struct.pack('>HHHH', 0x0002, pool.utf8(f"f{index}"), pool.utf8(descriptor), 0))

    methods = []
    if with_code:
        line_numbers = _attribute(pool.utf8("LineNumberTable"), struct.pack('>HHH', 1, 0, 7))
        local_variables = _attribute(
            pool.utf8("LocalVariableTable"),
            struct.pack('>HHHHHH', 1, 0, 1, pool.utf8("this"), pool.utf8(f"L{_internal(name)};"), 0),
        )
        code = b'\xb1'
        body = (
            struct.pack('>HHI', 1, 1, len(code)) + code
            + struct.pack('>H', 0)
            + struct.pack('>H', 2) + line_numbers + local_variables
        )
        code_attribute = _attribute(pool.utf8("Code"), body)
        methods.append(
            struct.pack('>HHHH', 0x0001, pool.utf8("run"), pool.utf8("()V"), 1) + code_attribute
        )

    return b''.join([
        struct.pack('>IHH', 0xCAFEBABE, 0, 52),
        pool.pool_bytes(),
        struct.pack('>HHH', 0x0021, this_class, super_class),
        struct.pack('>H', 0),
        struct.pack('>H', len(fields)), *fields,
        struct.pack('>H', len(methods)), *methods,
        struct.pack('>H', 0),
    ])


def class_member(name: str) -> str:
    """点分类名对应的归档成员路径"""
    return _internal(name) + ".class"


def write_jar(
    path: Path,
    members: Union[Dict[str, bytes], Sequence[tuple]],
    compression: int = zipfile.ZIP_DEFLATED,
) -> Path:
    """按给定顺序写出归档；members 的值可以是 bytes 或 (bytes, 存储方式)"""
    items = members.items() if isinstance(members, dict) else members
    with zipfile.ZipFile(path, 'w') as archive:
        for member_name, value in items:
            if isinstance(value, tuple):
                data, method = value
            else:
                data, method = value, compression
            info = zipfile.ZipInfo(member_name, date_time=(2020, 1, 1, 0, 0, 0))
            archive.writestr(info, data, compress_type=method)
    return path
