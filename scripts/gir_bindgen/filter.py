"""
Filter module

Decides whether a candidate symbol is omitted from generated output. The
configured matchers are evaluated in order and the first match wins.
"""

from abc import ABC, abstractmethod
from typing import Optional, TYPE_CHECKING
import re
import traceback

from .codegen import dots
from .errors import InvalidSelectorError
from .ir import CallableAttrs, Field, Node, parse_version_name, split_gir_type
from .logging import get_logger

if TYPE_CHECKING:
    from .repository import Namespace, TypeFindResult

logger = get_logger('filter')

# GIR name used when only the C identifier is known. It never matches a name.
NO_MATCH = '\x00'


class FileGenerator(ABC):
    """What a filter needs to know about the generator asking"""

    @property
    @abstractmethod
    def namespace(self) -> 'Namespace':
        pass

    @property
    @abstractmethod
    def filters(self) -> list['FilterMatcher']:
        pass

    @abstractmethod
    def find_type(self, gir_type: str) -> Optional['TypeFindResult']:
        """Resolve a possibly unversioned GIR type relative to this generator"""
        pass


class FilterMatcher(ABC):
    """Base class for filter rules"""

    trace: str = ''

    @abstractmethod
    def matches(self, gen: FileGenerator, gir: str, c: str) -> bool:
        """Check a namespace-qualified GIR name and C name; True means omit"""
        pass

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.trace})'


def _registration_site() -> str:
    # [caller of the factory, factory, this function]
    frame = traceback.extract_stack(limit=3)[0]
    return f'{frame.filename}:{frame.lineno}'


def ensure_namespace(namespace: str, gir_type: str) -> str:
    """Qualify a bare GIR name with the given namespace"""
    if '.' in gir_type:
        return gir_type
    return f'{namespace}.{gir_type}'


def eq_namespace(namespace: str, gir_type: str) -> tuple[str, bool]:
    """Compare the namespace of a GIR type with a wanted namespace

    If the wanted namespace is versioned but the type's namespace is not,
    the version is dropped from the wanted namespace before comparing. An
    unversioned wanted namespace never matches a versioned type.

    Returns the type name without its namespace and whether they matched.
    """
    type_namespace, name = split_gir_type(gir_type)

    wanted_name, wanted_version = parse_version_name(namespace)
    if wanted_version:
        _, type_version = parse_version_name(type_namespace)
        if not type_version:
            namespace = wanted_name

    return name, type_namespace == namespace


def filter_type(gen: FileGenerator, gir: str, c: str) -> bool:
    """Check whether a GIR and/or C type should be omitted from the generator"""
    gir = ensure_namespace(gen.namespace.name, gir)

    for matcher in gen.filters:
        if matcher.matches(gen, gir, c):
            logger.debug('filtering type %s (C.%s) using filter %s, trace: %s',
                         gir, c, type(matcher).__name__, matcher.trace or '<unknown>')
            return True
    return False


def filter_c_type(gen: FileGenerator, c: str) -> bool:
    """Check only the C type or identifier, e.g. for C functions"""
    return filter_type(gen, NO_MATCH, c)


def filter_sub(gen: FileGenerator, parent: str, sub: str, c: str) -> bool:
    """Check a field or method inside a parent type"""
    if not c:
        # No C identifier; absolute "C." rules must not match.
        c = NO_MATCH
    return filter_type(gen, dots(gen.namespace.name, parent, sub), c)


def filter_method(gen: FileGenerator, parent: str, method: CallableAttrs) -> bool:
    return filter_sub(gen, parent, method.name, method.c_identifier)


def filter_field(gen: FileGenerator, parent: str, field: Field) -> bool:
    return filter_sub(gen, parent, field.name, '')


# ==============================================================================
# Matchers
# ==============================================================================

def _split_filter(value: str, kind: str) -> tuple[str, str]:
    namespace, rest = split_gir_type(value)
    if not namespace or not rest:
        raise InvalidSelectorError(f'missing namespace for {kind} {value!r}', value)
    return namespace, rest


class AbsoluteFilter(FilterMatcher):
    """Matches a name exactly; namespace "C" matches the C name instead"""

    def __init__(self, namespace: str, name: str):
        self.namespace = namespace
        self.name = name

    def matches(self, gen: FileGenerator, gir: str, c: str) -> bool:
        if self.namespace == 'C':
            return c == self.name
        name, eq = eq_namespace(self.namespace, gir)
        return eq and name == self.name


class RegexFilter(FilterMatcher):
    """Matches a name by regex

    Namespace "*" matches the full GIR name, "C" the C name. Patterns must
    match the whole string unless they contain a special group "(?".
    """

    def __init__(self, namespace: str, pattern: re.Pattern):
        self.namespace = namespace
        self.pattern = pattern

    def matches(self, gen: FileGenerator, gir: str, c: str) -> bool:
        if self.namespace == 'C':
            return self.pattern.search(c) is not None
        if self.namespace == '*':
            return self.pattern.search(gir) is not None
        name, eq = eq_namespace(self.namespace, gir)
        return eq and self.pattern.search(name) is not None


class FileFilter(FilterMatcher):
    """Matches types declared in a source file containing a substring"""

    def __init__(self, contains: str, namespace: str = ''):
        self.contains = contains
        self.namespace = namespace

    def matches(self, gen: FileGenerator, gir: str, c: str) -> bool:
        result = gen.find_type(gir)
        if result is None:
            return False

        if self.namespace:
            ns = result.namespace
            if ns.name != self.namespace and ns.versioned_name != self.namespace:
                return False

        return self.contains in type_file(result.node)


def whole_match_regex(regex: str) -> str:
    """Anchor a regex at both ends unless it contains a special group

    \\Z is used since $ also matches before a trailing newline.
    """
    if '(?' in regex:
        return regex
    return '^' + regex + r'\Z'


def absolute_filter(abs_name: str) -> FilterMatcher:
    """Filter "Namespace.Name" or "C.c_identifier" exactly"""
    matcher = AbsoluteFilter(*_split_filter(abs_name, 'absolute filter'))
    matcher.trace = _registration_site()
    return matcher


def regex_filter(value: str) -> FilterMatcher:
    """Filter "Namespace.regex"; only the part after the namespace is a regex"""
    namespace, regex = _split_filter(value, 'regex filter')
    try:
        pattern = re.compile(whole_match_regex(regex))
    except re.error as e:
        raise InvalidSelectorError(f'invalid regex filter {value!r}: {e}', value) from e
    matcher = RegexFilter(namespace, pattern)
    matcher.trace = _registration_site()
    return matcher


def file_filter(contains: str) -> FilterMatcher:
    """Filter types whose source file name contains the given string"""
    matcher = FileFilter(contains)
    matcher.trace = _registration_site()
    return matcher


def file_filter_namespace(namespace: str, contains: str) -> FilterMatcher:
    """Like file_filter, restricted to a namespace (with or without version)"""
    matcher = FileFilter(contains, namespace)
    matcher.trace = _registration_site()
    return matcher


# ==============================================================================
# Source files
# ==============================================================================

def type_file(node: Node) -> str:
    """Get the file a node was declared in, or an empty string"""
    info = node.info
    if info.source_position is not None and info.source_position.filename:
        return info.source_position.filename
    if info.doc is not None and info.doc.filename:
        return info.doc.filename
    return ''


def type_is_in_file(node: Node, file: str) -> bool:
    """Check whether either recorded file of a node contains the given name"""
    info = node.info
    if info.source_position is not None and file in info.source_position.filename:
        return True
    if info.doc is not None and file in info.doc.filename:
        return True
    return False
