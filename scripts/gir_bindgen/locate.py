"""
Callable and signal lookup

Resolves dotted member paths such as "Gtk-4.0.Widget.show" to the callable
or signal node they name. Members are not independently indexed, so each
lookup is a linear search over the owner's member lists.
"""

from typing import Optional, TYPE_CHECKING

from .errors import CallableNotFoundError
from .ir import (
    CALLABLE_MEMBERS, SIGNAL_OWNERS, CallableAttrs, Parameter, Signal,
    callable_members, split_gir_type,
)

if TYPE_CHECKING:
    from .repository import Repositories


def split_member_path(path: str) -> tuple[str, Optional[str]]:
    """Split "Ns-V.Type.member" into ("Ns-V.Type", "member")

    A path without a member part is returned unchanged with no member.
    """
    qualifier, rest = split_gir_type(path)
    if '.' not in rest:
        return path, None
    owner, member = rest.split('.', 1)
    return f'{qualifier}.{owner}' if qualifier else owner, member


def locate_callable(repos: 'Repositories', path: str) -> Optional[CallableAttrs]:
    """Resolve a Function, Callback, or "Ns-V.Type.member" callable

    Returns None if the owning type does not exist. Raises
    CallableNotFoundError if the owner exists but has no such callable.
    """
    owner_path, member = split_member_path(path)
    result = repos.find_full_type(owner_path)
    if result is None:
        return None

    node = result.node
    if isinstance(node, CallableAttrs):
        if member is None:
            return node
        raise CallableNotFoundError(f'{node.kind.name.lower()} {owner_path} has no members', path)

    if member is None:
        raise CallableNotFoundError(f'GIR type {path} is not a callable', path)
    if not CALLABLE_MEMBERS[node.kind]:
        raise CallableNotFoundError(
            f'GIR type {owner_path} is a {node.kind.name.lower()} and has no callables', path)

    for members in callable_members(node):
        for c in members:
            if c.name == member:
                return c

    raise CallableNotFoundError(f'GIR type {path} has no callable', path)


def locate_signal(repos: 'Repositories', owner_path: str, name: str) -> Optional[Signal]:
    """Find a signal on a class or interface; None if either is absent"""
    result = repos.find_full_type(owner_path)
    if result is None or result.node.kind not in SIGNAL_OWNERS:
        return None
    for signal in result.node.signals:
        if signal.name == name:
            return signal
    return None


def find_parameter(c: CallableAttrs, name: str) -> Optional[Parameter]:
    """Find a parameter, including the instance parameter, by name"""
    if c.instance_parameter is not None and c.instance_parameter.name == name:
        return c.instance_parameter
    for param in c.parameters:
        if param.name == name:
            return param
    return None
