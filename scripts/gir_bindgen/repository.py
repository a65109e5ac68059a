"""
Repository module

Loads GIR documents into the IR and indexes them by file and by versioned
namespace.
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional
import os
import xml.etree.ElementTree as ET

from .errors import RepositoryError
from .ir import (
    Callback, CallableAttrs, Class, Doc, Enum, Field, Function, InfoElements,
    Interface, Member, Node, Parameter, Record, ReturnValue, Signal,
    SourcePosition, parse_version_name, split_gir_type, version_matches,
    versioned_name,
)
from .logging import get_logger

CORE_NAMESPACE = 'http://www.gtk.org/introspection/core/1.0'
C_NAMESPACE = 'http://www.gtk.org/introspection/c/1.0'
GLIB_NAMESPACE = 'http://www.gtk.org/introspection/glib/1.0'

CORE = f'{{{CORE_NAMESPACE}}}'
C = f'{{{C_NAMESPACE}}}'
GLIB = f'{{{GLIB_NAMESPACE}}}'

logger = get_logger('repository')


@dataclass
class Package:
    name: str


@dataclass
class CInclude:
    name: str


@dataclass
class Include:
    """Dependency on another namespace"""
    name: str
    version: str = ''


@dataclass
class Namespace:
    name: str
    version: str = ''
    shared_library: str = ''
    c_identifier_prefixes: str = ''
    c_symbol_prefixes: str = ''
    classes: list[Class] = field(default_factory=list)
    records: list[Record] = field(default_factory=list)
    interfaces: list[Interface] = field(default_factory=list)
    enums: list[Enum] = field(default_factory=list)
    callbacks: list[Callback] = field(default_factory=list)
    functions: list[Function] = field(default_factory=list)

    @property
    def versioned_name(self) -> str:
        return versioned_name(self.name, self.version)

    def nodes(self) -> Iterator[Node]:
        """Iterate over all top-level declarations"""
        yield from self.classes
        yield from self.records
        yield from self.interfaces
        yield from self.enums
        yield from self.callbacks
        yield from self.functions

    def find(self, name: str) -> Optional[Node]:
        """Find a top-level declaration by its GIR name"""
        for node in self.nodes():
            if node.name == name:
                return node
        return None


@dataclass
class Repository:
    """A parsed GIR document"""
    path: str
    namespace: Namespace
    packages: list[Package] = field(default_factory=list)
    c_includes: list[CInclude] = field(default_factory=list)
    includes: list[Include] = field(default_factory=list)


@dataclass
class TypeFindResult:
    node: Node
    repository: Repository

    @property
    def namespace(self) -> Namespace:
        return self.repository.namespace

    @property
    def name(self) -> str:
        return self.node.name

    @property
    def versioned_type(self) -> str:
        return f'{self.namespace.versioned_name}.{self.node.name}'


class Repositories:
    """All repositories loaded for one generation run"""

    def __init__(self, repos: Optional[list[Repository]] = None):
        self._repos: list[Repository] = []
        self._by_namespace: dict[tuple[str, str], Repository] = {}
        for repo in repos or []:
            self.add(repo)

    def __iter__(self) -> Iterator[Repository]:
        return iter(self._repos)

    def __len__(self) -> int:
        return len(self._repos)

    def add(self, repo: Repository):
        """Add a repository; a namespace version may only be loaded once"""
        key = (repo.namespace.name, repo.namespace.version)
        if key in self._by_namespace:
            raise RepositoryError(
                f'namespace {repo.namespace.versioned_name} already loaded from '
                f'{self._by_namespace[key].path}')
        self._repos.append(repo)
        self._by_namespace[key] = repo

    def load(self, path: str) -> Repository:
        """Load a GIR file and add it"""
        repo = load_repository(path)
        self.add(repo)
        logger.debug('Loaded %s from %s', repo.namespace.versioned_name, path)
        return repo

    def from_file(self, gir_file: str) -> Optional[Repository]:
        """Find a repository by its path or file name"""
        for repo in self._repos:
            if repo.path == gir_file or os.path.basename(repo.path) == gir_file:
                return repo
        return None

    def find_namespace(self, qualifier: str) -> Optional[Repository]:
        """Find the repository of a versioned namespace qualifier"""
        name, version = parse_version_name(qualifier)
        if not version:
            return None
        repo = self._by_namespace.get((name, version))
        if repo is not None:
            return repo
        for (ns_name, ns_version), repo in self._by_namespace.items():
            if ns_name == name and version_matches(version, ns_version):
                return repo
        return None

    def find_namespace_by_name(self, name: str) -> Optional[Repository]:
        """Find the first repository with the given unversioned namespace name"""
        for repo in self._repos:
            if repo.namespace.name == name:
                return repo
        return None

    def find_full_type(self, gir_type: str) -> Optional[TypeFindResult]:
        """Resolve a versioned GIR type such as "Gtk-4.0.Widget"

        Unversioned namespaces are rejected since they are ambiguous once
        several versions of a namespace are loaded.
        """
        qualifier, name = split_gir_type(gir_type)
        if not qualifier or '.' in name:
            logger.debug('cannot resolve %r: expected Namespace-Version.Type', gir_type)
            return None
        if not parse_version_name(qualifier)[1]:
            logger.debug('cannot resolve %r: namespace %r has no version', gir_type, qualifier)
            return None

        repo = self.find_namespace(qualifier)
        if repo is None:
            return None
        node = repo.namespace.find(name)
        if node is None:
            return None
        return TypeFindResult(node=node, repository=repo)


# ==============================================================================
# GIR parsing
# ==============================================================================

def load_repository(path: str) -> Repository:
    """Parse a GIR file into a Repository"""
    try:
        tree = ET.parse(path)
    except (ET.ParseError, OSError) as e:
        raise RepositoryError(f'cannot load GIR file {path}: {e}') from e
    return parse_repository(tree.getroot(), path)


def parse_repository(root: ET.Element, path: str = '') -> Repository:
    """Build a Repository from a parsed <repository> element"""
    ns_elem = root.find(f'{CORE}namespace')
    if ns_elem is None:
        raise RepositoryError(f'{path or "repository"}: missing <namespace>')

    namespace = Namespace(
        name=ns_elem.get('name', ''),
        version=ns_elem.get('version', ''),
        shared_library=ns_elem.get('shared-library', ''),
        c_identifier_prefixes=ns_elem.get(f'{C}identifier-prefixes', ''),
        c_symbol_prefixes=ns_elem.get(f'{C}symbol-prefixes', ''),
    )
    if not namespace.name:
        raise RepositoryError(f'{path or "repository"}: namespace has no name')

    for elem in ns_elem:
        tag = elem.tag
        if tag == f'{CORE}class':
            namespace.classes.append(_parse_class(elem))
        elif tag == f'{CORE}record':
            namespace.records.append(_parse_record(elem))
        elif tag == f'{CORE}interface':
            namespace.interfaces.append(_parse_interface(elem))
        elif tag in (f'{CORE}enumeration', f'{CORE}bitfield'):
            namespace.enums.append(_parse_enum(elem, bitfield=tag == f'{CORE}bitfield'))
        elif tag == f'{CORE}callback':
            namespace.callbacks.append(_parse_callable(elem, Callback, c_type=elem.get(f'{C}type', '')))
        elif tag == f'{CORE}function':
            namespace.functions.append(_parse_callable(elem, Function))

    return Repository(
        path=path,
        namespace=namespace,
        packages=[Package(e.get('name', '')) for e in root.findall(f'{CORE}package')],
        c_includes=[CInclude(e.get('name', '')) for e in root.findall(f'{C}include')],
        includes=[Include(e.get('name', ''), e.get('version', ''))
                  for e in root.findall(f'{CORE}include')],
    )


def _parse_info(elem: ET.Element) -> InfoElements:
    info = InfoElements(deprecated=elem.get('deprecated') == '1')
    doc = elem.find(f'{CORE}doc')
    if doc is not None:
        info.doc = Doc(
            text=doc.text or '',
            filename=doc.get('filename', ''),
            line=int(doc.get('line', '0') or 0),
        )
    pos = elem.find(f'{CORE}source-position')
    if pos is not None:
        info.source_position = SourcePosition(
            filename=pos.get('filename', ''),
            line=int(pos.get('line', '0') or 0),
        )
    return info


def _parse_type(elem: ET.Element) -> tuple[str, str]:
    """Get the (GIR type, C type) of a parameter or return value"""
    type_elem = elem.find(f'{CORE}type')
    if type_elem is None:
        type_elem = elem.find(f'{CORE}array')
    if type_elem is None:
        return '', ''
    return type_elem.get('name', ''), type_elem.get(f'{C}type', '')


def _parse_parameter(elem: ET.Element) -> Parameter:
    gir_type, c_type = _parse_type(elem)
    closure = elem.get('closure')
    return Parameter(
        name=elem.get('name', ''),
        type=gir_type,
        c_type=c_type,
        direction=elem.get('direction', 'in'),
        transfer_ownership=elem.get('transfer-ownership', 'none'),
        nullable=elem.get('nullable') == '1' or elem.get('allow-none') == '1',
        caller_allocates=elem.get('caller-allocates') == '1',
        closure=int(closure) if closure is not None else None,
    )


def _parse_return_value(elem: Optional[ET.Element]) -> ReturnValue:
    if elem is None:
        return ReturnValue()
    gir_type, c_type = _parse_type(elem)
    return ReturnValue(
        type=gir_type or 'none',
        c_type=c_type or 'void',
        transfer_ownership=elem.get('transfer-ownership', 'none'),
        nullable=elem.get('nullable') == '1',
    )


def _parse_parameters(elem: ET.Element) -> tuple[Optional[Parameter], list[Parameter]]:
    params_elem = elem.find(f'{CORE}parameters')
    if params_elem is None:
        return None, []
    instance = params_elem.find(f'{CORE}instance-parameter')
    return (
        _parse_parameter(instance) if instance is not None else None,
        [_parse_parameter(p) for p in params_elem.findall(f'{CORE}parameter')],
    )


def _parse_callable(elem: ET.Element, cls: type = CallableAttrs, **extra) -> CallableAttrs:
    introspectable = elem.get('introspectable')
    instance, params = _parse_parameters(elem)
    return cls(
        name=elem.get('name', ''),
        c_identifier=elem.get(f'{C}identifier', ''),
        introspectable=None if introspectable is None else introspectable == '1',
        instance_parameter=instance,
        parameters=params,
        return_value=_parse_return_value(elem.find(f'{CORE}return-value')),
        throws=elem.get('throws') == '1',
        info=_parse_info(elem),
        **extra,
    )


def _parse_callables(elem: ET.Element, tag: str) -> list[CallableAttrs]:
    return [_parse_callable(e) for e in elem.findall(f'{CORE}{tag}')]


def _parse_fields(elem: ET.Element) -> list[Field]:
    fields = []
    for e in elem.findall(f'{CORE}field'):
        gir_type, c_type = _parse_type(e)
        fields.append(Field(
            name=e.get('name', ''),
            type=gir_type,
            c_type=c_type,
            readable=e.get('readable', '1') != '0',
            writable=e.get('writable') == '1',
            private=e.get('private') == '1',
        ))
    return fields


def _parse_signals(elem: ET.Element) -> list[Signal]:
    signals = []
    for e in elem.findall(f'{GLIB}signal'):
        _, params = _parse_parameters(e)
        signals.append(Signal(
            name=e.get('name', ''),
            when=e.get('when', ''),
            parameters=params,
            return_value=_parse_return_value(e.find(f'{CORE}return-value')),
            info=_parse_info(e),
        ))
    return signals


def _parse_class(elem: ET.Element) -> Class:
    return Class(
        name=elem.get('name', ''),
        c_type=elem.get(f'{C}type', ''),
        parent=elem.get('parent', ''),
        constructors=_parse_callables(elem, 'constructor'),
        methods=_parse_callables(elem, 'method'),
        virtual_methods=_parse_callables(elem, 'virtual-method'),
        functions=_parse_callables(elem, 'function'),
        signals=_parse_signals(elem),
        fields=_parse_fields(elem),
        info=_parse_info(elem),
    )


def _parse_record(elem: ET.Element) -> Record:
    return Record(
        name=elem.get('name', ''),
        c_type=elem.get(f'{C}type', ''),
        constructors=_parse_callables(elem, 'constructor'),
        methods=_parse_callables(elem, 'method'),
        functions=_parse_callables(elem, 'function'),
        fields=_parse_fields(elem),
        info=_parse_info(elem),
    )


def _parse_interface(elem: ET.Element) -> Interface:
    return Interface(
        name=elem.get('name', ''),
        c_type=elem.get(f'{C}type', ''),
        methods=_parse_callables(elem, 'method'),
        virtual_methods=_parse_callables(elem, 'virtual-method'),
        functions=_parse_callables(elem, 'function'),
        signals=_parse_signals(elem),
        info=_parse_info(elem),
    )


def _parse_enum(elem: ET.Element, bitfield: bool = False) -> Enum:
    members = []
    for e in elem.findall(f'{CORE}member'):
        members.append(Member(
            name=e.get('name', ''),
            value=int(e.get('value', '0')),
            c_identifier=e.get(f'{C}identifier', ''),
        ))
    return Enum(
        name=elem.get('name', ''),
        c_type=elem.get(f'{C}type', ''),
        members=members,
        bitfield=bitfield,
        info=_parse_info(elem),
    )
