"""
类文件解析与重建

解析 JVM .class 文件的完整结构（常量池、字段、方法、属性），
既用于提取类之间的引用关系，也作为字节码变换器的操作对象。
未修改的 ClassFile 重新序列化后与原始字节完全一致。
"""

import re
import struct
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Set, Tuple

MAGIC = 0xCAFEBABE

CONSTANT_UTF8 = 1
CONSTANT_INTEGER = 3
CONSTANT_FLOAT = 4
CONSTANT_LONG = 5
CONSTANT_DOUBLE = 6
CONSTANT_CLASS = 7
CONSTANT_STRING = 8
CONSTANT_FIELDREF = 9
CONSTANT_METHODREF = 10
CONSTANT_INTERFACE_METHODREF = 11
CONSTANT_NAME_AND_TYPE = 12
CONSTANT_METHOD_HANDLE = 15
CONSTANT_METHOD_TYPE = 16
CONSTANT_DYNAMIC = 17
CONSTANT_INVOKE_DYNAMIC = 18
CONSTANT_MODULE = 19
CONSTANT_PACKAGE = 20

# 定长常量的负载字节数（Utf8 为变长，单独处理）
_CONSTANT_SIZES = {
    CONSTANT_INTEGER: 4,
    CONSTANT_FLOAT: 4,
    CONSTANT_LONG: 8,
    CONSTANT_DOUBLE: 8,
    CONSTANT_CLASS: 2,
    CONSTANT_STRING: 2,
    CONSTANT_FIELDREF: 4,
    CONSTANT_METHODREF: 4,
    CONSTANT_INTERFACE_METHODREF: 4,
    CONSTANT_NAME_AND_TYPE: 4,
    CONSTANT_METHOD_HANDLE: 3,
    CONSTANT_METHOD_TYPE: 2,
    CONSTANT_DYNAMIC: 4,
    CONSTANT_INVOKE_DYNAMIC: 4,
    CONSTANT_MODULE: 2,
    CONSTANT_PACKAGE: 2,
}

CODE_ATTRIBUTE = "Code"

# 描述符和签名中的对象类型 Lpkg/Name; 或 Lpkg/Name<...>;
_OBJECT_TYPE_PATTERN = re.compile(r'L([^;<>\[\]().:\s]+)[;<]')


class ParseError(Exception):
    """类文件或归档结构无法解析"""
    pass


class _Reader:
    """大端字节读取器"""

    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def read(self, n: int) -> bytes:
        end = self.pos + n
        if end > len(self.data):
            raise ParseError(f"数据被截断: 偏移 {self.pos} 处需要 {n} 字节，剩余 {len(self.data) - self.pos} 字节")
        chunk = self.data[self.pos:end]
        self.pos = end
        return chunk

    def u1(self) -> int:
        return self.read(1)[0]

    def u2(self) -> int:
        return struct.unpack('>H', self.read(2))[0]

    def u4(self) -> int:
        return struct.unpack('>I', self.read(4))[0]


@dataclass
class Constant:
    """常量池条目，payload 为 tag 之后的原始字节"""
    tag: int
    payload: bytes

    def u2_at(self, offset: int) -> int:
        return struct.unpack('>H', self.payload[offset:offset + 2])[0]

    def to_bytes(self) -> bytes:
        return bytes([self.tag]) + self.payload


class ConstantPool:
    """常量池，索引从 1 开始；Long/Double 占两个槽位"""

    def __init__(self, entries: Optional[List[Optional[Constant]]] = None):
        # 槽位 0 保留
        self.entries: List[Optional[Constant]] = entries if entries is not None else [None]

    @classmethod
    def read(cls, reader: _Reader) -> 'ConstantPool':
        count = reader.u2()
        entries: List[Optional[Constant]] = [None]

        while len(entries) < count:
            tag = reader.u1()

            if tag == CONSTANT_UTF8:
                length = reader.u2()
                payload = struct.pack('>H', length) + reader.read(length)
            elif tag in _CONSTANT_SIZES:
                payload = reader.read(_CONSTANT_SIZES[tag])
            else:
                raise ParseError(f"未知的常量池标记 {tag}（索引 {len(entries)}）")

            entries.append(Constant(tag, payload))
            if tag in (CONSTANT_LONG, CONSTANT_DOUBLE):
                entries.append(None)

        if len(entries) != count:
            raise ParseError("常量池长度与 Long/Double 槽位不一致")

        return cls(entries)

    def __len__(self) -> int:
        return len(self.entries)

    def items(self) -> Iterator[Tuple[int, Constant]]:
        for index, constant in enumerate(self.entries):
            if constant is not None:
                yield index, constant

    def get(self, index: int, tag: Optional[int] = None) -> Constant:
        if not 0 < index < len(self.entries) or self.entries[index] is None:
            raise ParseError(f"无效的常量池索引 {index}")
        constant = self.entries[index]
        if tag is not None and constant.tag != tag:
            raise ParseError(f"常量池索引 {index} 的类型为 {constant.tag}，期望 {tag}")
        return constant

    def utf8(self, index: int) -> str:
        raw = self.get(index, CONSTANT_UTF8).payload[2:]
        # 改良 UTF-8：NUL 编码为 C0 80，增补字符编码为代理对
        try:
            return raw.replace(b'\xc0\x80', b'\x00').decode('utf-8', errors='surrogatepass')
        except UnicodeDecodeError as e:
            raise ParseError(f"常量池索引 {index} 不是合法的 UTF-8: {e}") from e

    def class_name(self, index: int) -> str:
        """CONSTANT_Class 条目对应的内部名（a/b/C）"""
        return self.utf8(self.get(index, CONSTANT_CLASS).u2_at(0))

    def to_bytes(self) -> bytes:
        parts = [struct.pack('>H', len(self.entries))]
        parts.extend(constant.to_bytes() for _, constant in self.items())
        return b''.join(parts)


@dataclass
class AttributeInfo:
    """通用属性，info 为原始字节"""
    name: str
    name_index: int
    info: bytes = b''

    def to_bytes(self) -> bytes:
        info = self.info
        return struct.pack('>HI', self.name_index, len(info)) + info


@dataclass
class CodeAttribute(AttributeInfo):
    """Code 属性，嵌套属性可被变换器增删"""
    max_stack: int = 0
    max_locals: int = 0
    code: bytes = b''
    exception_table: bytes = b''
    attributes: List[AttributeInfo] = field(default_factory=list)

    def to_bytes(self) -> bytes:
        body = b''.join([
            struct.pack('>HHI', self.max_stack, self.max_locals, len(self.code)),
            self.code,
            struct.pack('>H', len(self.exception_table) // 8),
            self.exception_table,
            _write_attributes(self.attributes),
        ])
        return struct.pack('>HI', self.name_index, len(body)) + body


def _read_attributes(reader: _Reader, pool: ConstantPool, parse_code: bool = False) -> List[AttributeInfo]:
    attributes: List[AttributeInfo] = []

    for _ in range(reader.u2()):
        name_index = reader.u2()
        name = pool.utf8(name_index)
        info = reader.read(reader.u4())

        if parse_code and name == CODE_ATTRIBUTE:
            attributes.append(_read_code_attribute(name_index, info, pool))
        else:
            attributes.append(AttributeInfo(name, name_index, info))

    return attributes


def _read_code_attribute(name_index: int, info: bytes, pool: ConstantPool) -> CodeAttribute:
    reader = _Reader(info)
    max_stack = reader.u2()
    max_locals = reader.u2()
    code = reader.read(reader.u4())
    exception_table = reader.read(reader.u2() * 8)
    attributes = _read_attributes(reader, pool)

    if reader.pos != len(info):
        raise ParseError(f"Code 属性长度不匹配: 声明 {len(info)}，实际 {reader.pos}")

    return CodeAttribute(
        name=CODE_ATTRIBUTE,
        name_index=name_index,
        info=info,
        max_stack=max_stack,
        max_locals=max_locals,
        code=code,
        exception_table=exception_table,
        attributes=attributes,
    )


def _write_attributes(attributes: List[AttributeInfo]) -> bytes:
    return struct.pack('>H', len(attributes)) + b''.join(a.to_bytes() for a in attributes)


@dataclass
class MemberInfo:
    """字段或方法"""
    access_flags: int
    name_index: int
    descriptor_index: int
    attributes: List[AttributeInfo] = field(default_factory=list)
    name: str = ''
    descriptor: str = ''

    @property
    def code(self) -> Optional[CodeAttribute]:
        for attribute in self.attributes:
            if isinstance(attribute, CodeAttribute):
                return attribute
        return None

    def to_bytes(self) -> bytes:
        return struct.pack('>HHH', self.access_flags, self.name_index, self.descriptor_index) \
            + _write_attributes(self.attributes)


def _read_members(reader: _Reader, pool: ConstantPool, parse_code: bool) -> List[MemberInfo]:
    members = []
    for _ in range(reader.u2()):
        access_flags = reader.u2()
        name_index = reader.u2()
        descriptor_index = reader.u2()
        attributes = _read_attributes(reader, pool, parse_code)
        members.append(MemberInfo(
            access_flags=access_flags,
            name_index=name_index,
            descriptor_index=descriptor_index,
            attributes=attributes,
            name=pool.utf8(name_index),
            descriptor=pool.utf8(descriptor_index),
        ))
    return members


def internal_to_dotted(name: str) -> str:
    return name.replace('/', '.')


def _names_in_descriptor(descriptor: str) -> Iterator[str]:
    for match in _OBJECT_TYPE_PATTERN.finditer(descriptor):
        yield internal_to_dotted(match.group(1))


@dataclass
class ClassFile:
    """类文件结构模型"""
    minor_version: int
    major_version: int
    constant_pool: ConstantPool
    access_flags: int
    this_class: int
    super_class: int
    interfaces: List[int] = field(default_factory=list)
    fields: List[MemberInfo] = field(default_factory=list)
    methods: List[MemberInfo] = field(default_factory=list)
    attributes: List[AttributeInfo] = field(default_factory=list)

    @classmethod
    def parse(cls, data: bytes) -> 'ClassFile':
        """解析类文件

        Args:
            data: 类文件原始字节

        Returns:
            ClassFile: 结构模型

        Raises:
            ParseError: 魔数错误、数据截断或常量池损坏
        """
        reader = _Reader(data)

        magic = reader.u4()
        if magic != MAGIC:
            raise ParseError(f"无效的类文件魔数: {magic:08x}")

        minor_version = reader.u2()
        major_version = reader.u2()
        pool = ConstantPool.read(reader)

        access_flags = reader.u2()
        this_class = reader.u2()
        super_class = reader.u2()
        interfaces = [reader.u2() for _ in range(reader.u2())]

        fields = _read_members(reader, pool, parse_code=False)
        methods = _read_members(reader, pool, parse_code=True)
        attributes = _read_attributes(reader, pool)

        return cls(
            minor_version=minor_version,
            major_version=major_version,
            constant_pool=pool,
            access_flags=access_flags,
            this_class=this_class,
            super_class=super_class,
            interfaces=interfaces,
            fields=fields,
            methods=methods,
            attributes=attributes,
        )

    @property
    def name(self) -> str:
        """点分形式的类名"""
        return internal_to_dotted(self.constant_pool.class_name(self.this_class))

    def to_bytes(self) -> bytes:
        """重建类文件字节"""
        return b''.join([
            struct.pack('>IHH', MAGIC, self.minor_version, self.major_version),
            self.constant_pool.to_bytes(),
            struct.pack('>HHH', self.access_flags, self.this_class, self.super_class),
            struct.pack('>H', len(self.interfaces)),
            b''.join(struct.pack('>H', index) for index in self.interfaces),
            struct.pack('>H', len(self.fields)),
            b''.join(member.to_bytes() for member in self.fields),
            struct.pack('>H', len(self.methods)),
            b''.join(member.to_bytes() for member in self.methods),
            _write_attributes(self.attributes),
        ])

    def referenced_class_names(self) -> Set[str]:
        """收集该类直接引用的所有类名（点分形式，不含自身）

        来源：CONSTANT_Class 条目（数组类型取元素类型），以及描述符、签名、
        注解等 Utf8 条目中的 L...; 对象类型。仅被字符串字面量使用的 Utf8 不计入。
        """
        pool = self.constant_pool
        names: Set[str] = set()
        literal_indexes: Set[int] = set()
        descriptor_indexes: Set[int] = set()

        for index, constant in pool.items():
            if constant.tag == CONSTANT_CLASS:
                internal_name = pool.utf8(constant.u2_at(0))
                if internal_name.startswith('['):
                    names.update(_names_in_descriptor(internal_name))
                else:
                    names.add(internal_to_dotted(internal_name))
            elif constant.tag == CONSTANT_STRING:
                literal_indexes.add(constant.u2_at(0))
            elif constant.tag == CONSTANT_NAME_AND_TYPE:
                descriptor_indexes.add(constant.u2_at(2))
            elif constant.tag == CONSTANT_METHOD_TYPE:
                descriptor_indexes.add(constant.u2_at(0))

        for member in self.fields + self.methods:
            descriptor_indexes.add(member.descriptor_index)

        for index, constant in pool.items():
            if constant.tag != CONSTANT_UTF8:
                continue
            if index in literal_indexes and index not in descriptor_indexes:
                continue
            names.update(_names_in_descriptor(pool.utf8(index)))

        names.discard(self.name)
        return names


def class_dependencies(data: bytes) -> Tuple[str, Set[str]]:
    """便捷函数：解析类文件并返回 (类名, 引用的类名集合)"""
    class_file = ClassFile.parse(data)
    return class_file.name, class_file.referenced_class_names()

