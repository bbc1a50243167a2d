"""
.properties 解析单元测试
"""

import pytest

from classpack.utils.properties import parse_properties


class TestParseProperties:
    """parse_properties 测试"""

    def test_separators(self):
        text = "a=1\nb : 2\nc 3\nd:4"
        assert parse_properties(text) == {"a": "1", "b": "2", "c": "3", "d": "4"}

    def test_comments_and_blank_lines(self):
        text = "# comment\n! another\n\n   \nkey=value\n"
        assert parse_properties(text) == {"key": "value"}

    def test_continuation(self):
        text = "key = com.example.\\\n    Main\nnext=1"
        assert parse_properties(text) == {"key": "com.example.Main", "next": "1"}

    def test_even_backslashes_do_not_continue(self):
        text = "k=a\\\\\nnext=1"
        assert parse_properties(text) == {"k": "a\\", "next": "1"}

    def test_escapes(self):
        assert parse_properties("k=a\\tb\\u0041") == {"k": "a\tbA"}

    def test_escaped_separator_in_key(self):
        assert parse_properties("a\\=b=c") == {"a=b": "c"}

    def test_key_without_value(self):
        assert parse_properties("alone\nempty=") == {"alone": "", "empty": ""}

    def test_later_key_wins(self):
        assert parse_properties("k=1\nk=2") == {"k": "2"}

    def test_crlf_line_endings(self):
        assert parse_properties("a=1\r\nb=2\rc=3") == {"a": "1", "b": "2", "c": "3"}

    def test_invalid_unicode_escape(self):
        with pytest.raises(ValueError):
            parse_properties("k=\\u12")
