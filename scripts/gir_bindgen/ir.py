"""
IR (Intermediate Representation) module

In-memory model of GObject introspection repositories. Nodes are mutable:
preprocessors rename and rewrite them in place before filtering.
"""

from dataclasses import dataclass, field
from enum import Enum as _Enum, auto
from typing import ClassVar, Optional, Union
import re


class NodeKind(_Enum):
    CLASS = auto()
    RECORD = auto()
    INTERFACE = auto()
    ENUM = auto()
    CALLBACK = auto()
    FUNCTION = auto()


DIRECTIONS = ('in', 'out', 'inout')
TRANSFERS = ('none', 'container', 'full')


@dataclass
class Doc:
    """Documentation block and the file it was extracted from"""
    text: str
    filename: str = ''
    line: int = 0


@dataclass
class SourcePosition:
    """Declaration position in the C sources"""
    filename: str
    line: int = 0


@dataclass
class InfoElements:
    """Documentation and position metadata shared by all nodes"""
    doc: Optional[Doc] = None
    source_position: Optional[SourcePosition] = None
    deprecated: bool = False


@dataclass
class Parameter:
    """Function parameter information"""
    name: str
    type: str = ''
    c_type: str = ''
    direction: str = 'in'
    transfer_ownership: str = 'none'
    nullable: bool = False
    caller_allocates: bool = False
    closure: Optional[int] = None


@dataclass
class ReturnValue:
    """Return value information"""
    type: str = 'none'
    c_type: str = 'void'
    transfer_ownership: str = 'none'
    nullable: bool = False


@dataclass
class CallableAttrs:
    """Attributes shared by functions, callbacks, constructors and methods"""
    name: str
    c_identifier: str = ''
    introspectable: Optional[bool] = None
    instance_parameter: Optional[Parameter] = None
    parameters: list[Parameter] = field(default_factory=list)
    return_value: ReturnValue = field(default_factory=ReturnValue)
    throws: bool = False
    info: InfoElements = field(default_factory=InfoElements)


@dataclass
class Field:
    """Record or class field"""
    name: str
    type: str = ''
    c_type: str = ''
    readable: bool = True
    writable: bool = False
    private: bool = False


@dataclass
class Member:
    """Enum member"""
    name: str
    value: int = 0
    c_identifier: str = ''


@dataclass
class Signal:
    """Class or interface signal"""
    name: str
    when: str = ''
    parameters: list[Parameter] = field(default_factory=list)
    return_value: ReturnValue = field(default_factory=ReturnValue)
    info: InfoElements = field(default_factory=InfoElements)


@dataclass
class Class:
    name: str
    c_type: str = ''
    parent: str = ''
    constructors: list[CallableAttrs] = field(default_factory=list)
    methods: list[CallableAttrs] = field(default_factory=list)
    virtual_methods: list[CallableAttrs] = field(default_factory=list)
    functions: list[CallableAttrs] = field(default_factory=list)
    signals: list[Signal] = field(default_factory=list)
    fields: list[Field] = field(default_factory=list)
    info: InfoElements = field(default_factory=InfoElements)

    kind: ClassVar[NodeKind] = NodeKind.CLASS


@dataclass
class Record:
    name: str
    c_type: str = ''
    constructors: list[CallableAttrs] = field(default_factory=list)
    methods: list[CallableAttrs] = field(default_factory=list)
    functions: list[CallableAttrs] = field(default_factory=list)
    fields: list[Field] = field(default_factory=list)
    info: InfoElements = field(default_factory=InfoElements)

    kind: ClassVar[NodeKind] = NodeKind.RECORD


@dataclass
class Interface:
    name: str
    c_type: str = ''
    methods: list[CallableAttrs] = field(default_factory=list)
    virtual_methods: list[CallableAttrs] = field(default_factory=list)
    functions: list[CallableAttrs] = field(default_factory=list)
    signals: list[Signal] = field(default_factory=list)
    info: InfoElements = field(default_factory=InfoElements)

    kind: ClassVar[NodeKind] = NodeKind.INTERFACE


@dataclass
class Enum:
    name: str
    c_type: str = ''
    members: list[Member] = field(default_factory=list)
    bitfield: bool = False
    info: InfoElements = field(default_factory=InfoElements)

    kind: ClassVar[NodeKind] = NodeKind.ENUM


@dataclass
class Callback(CallableAttrs):
    c_type: str = ''

    kind: ClassVar[NodeKind] = NodeKind.CALLBACK


@dataclass
class Function(CallableAttrs):
    kind: ClassVar[NodeKind] = NodeKind.FUNCTION


Node = Union[Class, Record, Interface, Enum, Callback, Function]

# Member lists searched, in order, when resolving "Namespace.Type.member".
CALLABLE_MEMBERS: dict[NodeKind, tuple[str, ...]] = {
    NodeKind.CLASS: ('constructors', 'methods'),
    NodeKind.RECORD: ('constructors', 'methods'),
    NodeKind.INTERFACE: ('methods', 'virtual_methods'),
    NodeKind.ENUM: (),
    NodeKind.CALLBACK: (),
    NodeKind.FUNCTION: (),
}

SIGNAL_OWNERS = frozenset({NodeKind.CLASS, NodeKind.INTERFACE})


def callable_members(node: Node) -> list[list[CallableAttrs]]:
    """Get the member lists of a node that may contain callables, in search order"""
    return [getattr(node, attr) for attr in CALLABLE_MEMBERS[node.kind]]


def node_c_name(node: Node) -> str:
    """Get the C type or identifier of a node"""
    if isinstance(node, CallableAttrs) and node.c_identifier:
        return node.c_identifier
    return getattr(node, 'c_type', '')


# A namespace qualifier is a name optionally followed by "-" and a version made
# of digits and dots. Type names never start with a digit.
_GIR_TYPE_PATTERN = re.compile(r'^(?P<ns>[^.\-]+(?:-\d+(?:\.\d+)*)?)\.(?P<rest>.+)$')
_VERSION_NAME_PATTERN = re.compile(r'^(?P<name>[^\-]+)-(?P<version>\d+(?:\.\d+)*)$')


def parse_version_name(name: str) -> tuple[str, str]:
    """Split a namespace qualifier into name and version

    Examples:
        Gtk-4.0 -> ('Gtk', '4.0')
        Gtk -> ('Gtk', '')
    """
    m = _VERSION_NAME_PATTERN.match(name)
    if m is None:
        return name, ''
    return m.group('name'), m.group('version')


def split_gir_type(gir_type: str) -> tuple[str, str]:
    """Split a GIR type into namespace qualifier and remainder

    Examples:
        Gtk-4.0.Widget -> ('Gtk-4.0', 'Widget')
        Gtk.Widget.show -> ('Gtk', 'Widget.show')
        Widget -> ('', 'Widget')
    """
    m = _GIR_TYPE_PATTERN.match(gir_type)
    if m is None:
        return '', gir_type
    return m.group('ns'), m.group('rest')


def versioned_name(name: str, version: str) -> str:
    return f'{name}-{version}' if version else name


def version_matches(requested: str, actual: str) -> bool:
    """Check a requested version against a namespace version; "4" matches "4.0"."""
    if requested == actual:
        return True
    return actual.split('.')[0] == requested
