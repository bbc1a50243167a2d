"""
字节码修改任务

修改函数是 bytes -> bytes 的可插拔环节：解析类文件，依次应用变换器，
最后统一重建类文件字节。调用方也可以直接注入任意 bytes -> bytes 函数。
"""

from typing import Callable, Iterable, List, Optional, Protocol

from ..config.schema import ArtifactModel, ModifyModel, TransformerName
from ..utils import modify_logger
from .classfile import ClassFile

ModifyFunction = Callable[[bytes], bytes]


class TransformError(Exception):
    """字节码变换失败"""
    pass


class ClassTransformer(Protocol):
    """类文件变换器协议"""

    def __call__(self, class_file: ClassFile) -> ClassFile:
        ...


class RemoveDebugInformationTransformer:
    """删除方法 Code 属性中的行号表和局部变量表"""

    REMOVED_ATTRIBUTES = frozenset({
        "LineNumberTable",
        "LocalVariableTable",
        "LocalVariableTypeTable",
    })

    def __call__(self, class_file: ClassFile) -> ClassFile:
        for method in class_file.methods:
            code = method.code
            if code is None:
                continue
            code.attributes = [
                attribute for attribute in code.attributes
                if attribute.name not in self.REMOVED_ATTRIBUTES
            ]
        return class_file


TRANSFORMERS = {
    TransformerName.REMOVE_DEBUG_INFORMATION: RemoveDebugInformationTransformer,
}


def create_transformers(names: Iterable[TransformerName]) -> List[ClassTransformer]:
    """按名称创建变换器实例"""
    return [TRANSFORMERS[TransformerName(name)]() for name in names]


def create_modify_function(transformers: Iterable[ClassTransformer]) -> ModifyFunction:
    """把变换器链组合为 bytes -> bytes 的修改函数

    变换器为空时原样返回输入。任何失败都转换为 TransformError。
    """
    transformers = list(transformers)

    def modify(data: bytes) -> bytes:
        if not transformers:
            return data

        try:
            class_file = ClassFile.parse(data)
            for transformer in transformers:
                class_file = transformer(class_file)
            # 所有变换完成后统一重建
            return class_file.to_bytes()
        except Exception as e:
            raise TransformError(f"类文件变换失败: {e}") from e

    return modify


class Modifier:
    """字节码修改任务"""

    def __init__(self, task: ModifyModel, modify_function: Optional[ModifyFunction] = None):
        self.task = task
        self._modify_function = modify_function

    def accept(self, artifact: ArtifactModel) -> bool:
        return self.task.accept(artifact)

    def create_modify_function(self) -> ModifyFunction:
        """根据配置创建修改函数；构造时注入的函数优先"""
        if self._modify_function is None:
            transformers = create_transformers(self.task.transformers)
            modify_logger.debug(f"变换器链: {[type(t).__name__ for t in transformers]}")
            self._modify_function = create_modify_function(transformers)
        return self._modify_function

    def get_modify_function(self) -> ModifyFunction:
        if self._modify_function is None:
            raise RuntimeError("尚未调用 create_modify_function")
        return self._modify_function
