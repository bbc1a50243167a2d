"""
Java .properties 文本解析

按照 java.util.Properties#load 的规则解析键值对：
逻辑行续行、# 与 ! 注释、= / : / 空白分隔符、反斜杠转义和 \\uXXXX。
"""

import re
from typing import Dict, Iterator

_WHITESPACE = ' \t\f'
_SEPARATORS = '=:'
_ESCAPES = {'t': '\t', 'n': '\n', 'r': '\r', 'f': '\f'}


def _logical_lines(text: str) -> Iterator[str]:
    """把自然行合并为逻辑行，跳过空行和注释行"""
    pending = None

    for natural_line in re.split(r'\r\n|\r|\n', text):
        line = natural_line.lstrip(_WHITESPACE)

        if pending is None:
            if not line or line[0] in '#!':
                continue
            current = line
        else:
            current = pending + line

        # 奇数个结尾反斜杠表示续行
        trailing = len(current) - len(current.rstrip('\\'))
        if trailing % 2 == 1:
            pending = current[:-1]
            continue

        pending = None
        yield current

    if pending is not None and pending:
        yield pending


def _unescape(value: str) -> str:
    result = []
    pos = 0

    while pos < len(value):
        char = value[pos]
        pos += 1

        if char != '\\' or pos >= len(value):
            result.append(char)
            continue

        char = value[pos]
        pos += 1

        if char == 'u':
            digits = value[pos:pos + 4]
            if len(digits) != 4 or not all(d in '0123456789abcdefABCDEF' for d in digits):
                raise ValueError(f"非法的 \\uxxxx 转义: \\u{digits}")
            result.append(chr(int(digits, 16)))
            pos += 4
        else:
            result.append(_ESCAPES.get(char, char))

    return ''.join(result)


def _split_entry(line: str) -> tuple[str, str]:
    pos = 0
    escaped = False

    while pos < len(line):
        char = line[pos]
        if escaped:
            escaped = False
        elif char == '\\':
            escaped = True
        elif char in _SEPARATORS or char in _WHITESPACE:
            break
        pos += 1

    key = line[:pos]
    rest = line[pos:].lstrip(_WHITESPACE)
    if rest and rest[0] in _SEPARATORS:
        rest = rest[1:].lstrip(_WHITESPACE)

    return _unescape(key), _unescape(rest)


def parse_properties(text: str) -> Dict[str, str]:
    """解析 .properties 文本

    Args:
        text: 已解码的文本

    Returns:
        Dict[str, str]: 键值映射，重复的键以后出现者为准

    Raises:
        ValueError: 非法的 \\uXXXX 转义
    """
    properties: Dict[str, str] = {}

    for line in _logical_lines(text):
        key, value = _split_entry(line)
        properties[key] = value

    return properties
