"""
classpack - JAR classpath 组装与最小化工具

按确定顺序组装项目及其依赖的 JAR，可选地移除入口点不可达的类，
并可选地重写类文件字节码，最后写出 classpath.txt 清单。
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .config.schema import ClasspathConfig
from .build.builder import ClasspathBuilder

__all__ = ["ClasspathConfig", "ClasspathBuilder", "__version__"]
