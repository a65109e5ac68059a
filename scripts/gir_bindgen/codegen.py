"""
Code generation utilities

Provides the indenting line builder used by the source renderers and the
naming helpers shared by preprocessors and filters.
"""

from typing import Callable


class CodeGen:
    """Code generation helper with indentation support"""

    def __init__(self):
        self._lines: list[str] = []
        self._indent: int = 0
        self._indent_str: str = '    '  # 4 spaces

    def line(self, text: str = ''):
        """Add a line with current indentation"""
        if text:
            self._lines.append(self._indent_str * self._indent + text)
        else:
            self._lines.append('')

    def lines(self, *texts: str):
        """Add multiple lines"""
        for text in texts:
            self.line(text)

    def indent(self):
        """Increase indentation"""
        self._indent += 1

    def dedent(self):
        """Decrease indentation"""
        if self._indent > 0:
            self._indent -= 1

    def block(self, header: str):
        """Context manager for an indented block"""
        return _BlockContext(self, header)

    def output(self) -> str:
        """Get generated code as string"""
        return '\n'.join(self._lines) + '\n'


class _BlockContext:
    """Context manager for indented code blocks"""

    def __init__(self, gen: CodeGen, header: str):
        self._gen = gen
        self._header = header

    def __enter__(self):
        self._gen.line(self._header)
        self._gen.indent()
        return self

    def __exit__(self, *args):
        self._gen.dedent()


def guess_snake(name: str) -> bool:
    """Guess whether a name is snake_case

    Examples:
        get_size -> True
        size -> True
        Size -> False
        SizeRequest -> False
    """
    return '_' in name or name == name.lower()


def as_pascal_case(name: str) -> str:
    """Convert snake_case or kebab-case to PascalCase

    Examples:
        parse_error_func -> ParseErrorFunc
        notify-size -> NotifySize
    """
    parts = name.replace('-', '_').split('_')
    return ''.join(part[:1].upper() + part[1:] for part in parts if part)


def getter_name(name: str) -> str:
    """Prefix a getter marker in the casing style of the name

    Examples:
        size -> get_size
        Size -> GetSize
    """
    if guess_snake(name):
        return 'get_' + name
    return 'Get' + name


# Pluggable: maps a current type name to the name that keeps its getter verb.
GetterNaming = Callable[[str], str]


def dots(*parts: str) -> str:
    """Join the non-empty parts with dots"""
    return '.'.join(part for part in parts if part)
