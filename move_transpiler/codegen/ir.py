"""
Intermediate representation for emitted TypeScript.

Emitters describe a file as a list of these nodes (which symbols are imported,
exported and declared); TypeScriptSerializer turns the list into text. Only
the serializer knows the exact textual syntax.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union


# =============================================================================
# STATEMENTS
# =============================================================================

@dataclass
class Block:
    """A braced statement such as ``if (...) { ... }`` or ``while (...) { ... }``.

    ``footer`` follows the closing brace, e.g. ``);`` for an object literal argument.
    """
    header: str
    body: List['Statement'] = field(default_factory=list)
    footer: str = ''


# Plain statements are kept as text; nesting goes through Block
Statement = Union[str, Block]


# =============================================================================
# MODULE-LEVEL NODES
# =============================================================================

@dataclass
class ImportStatement:
    """``import * as ns from 'src'`` when namespace is set, else ``import { names } from 'src'``."""
    source: str
    names: Tuple[str, ...] = ()
    namespace: Optional[str] = None


@dataclass
class ExportStatement:
    """``export * as ns from 'src'`` when namespace is set, else ``export { names } from 'src'``."""
    source: str
    names: Tuple[str, ...] = ()
    namespace: Optional[str] = None


@dataclass
class Parameter:
    """A function or constructor parameter; ``modifier`` is e.g. 'public'."""
    name: str
    type: str = ''
    modifier: str = ''


@dataclass
class FunctionDeclaration:
    """A module-level function."""
    name: str
    params: List[Parameter] = field(default_factory=list)
    return_type: str = ''
    body: List[Statement] = field(default_factory=list)
    type_params: Tuple[str, ...] = ()
    exported: bool = True
    is_async: bool = False


@dataclass
class TypeAlias:
    """``type Name = value;``"""
    name: str
    value: str
    exported: bool = True


# =============================================================================
# CLASS MEMBERS
# =============================================================================

@dataclass
class PropertyDeclaration:
    """A class property declared without an initializer."""
    name: str
    type: str


@dataclass
class ConstructorDeclaration:
    params: List[Parameter] = field(default_factory=list)
    body: List[Statement] = field(default_factory=list)


@dataclass
class MethodDeclaration:
    """A class method."""
    name: str
    params: List[Parameter] = field(default_factory=list)
    return_type: str = ''
    body: List[Statement] = field(default_factory=list)
    type_params: Tuple[str, ...] = ()
    is_static: bool = False
    is_async: bool = False


ClassMember = Union[PropertyDeclaration, ConstructorDeclaration, MethodDeclaration]


@dataclass
class ClassDeclaration:
    name: str
    type_params: Tuple[str, ...] = ()
    members: List[ClassMember] = field(default_factory=list)
    exported: bool = True


Node = Union[ImportStatement, ExportStatement, FunctionDeclaration, TypeAlias, ClassDeclaration]


@dataclass
class SourceFile:
    """An ordered list of module-level nodes."""
    nodes: List[Node] = field(default_factory=list)

    @property
    def imports(self) -> List[ImportStatement]:
        return [n for n in self.nodes if isinstance(n, ImportStatement)]

    @property
    def exports(self) -> List[ExportStatement]:
        return [n for n in self.nodes if isinstance(n, ExportStatement)]

    def find_function(self, name: str) -> Optional[FunctionDeclaration]:
        for node in self.nodes:
            if isinstance(node, FunctionDeclaration) and node.name == name:
                return node
        return None

    def find_class(self, name: str) -> Optional[ClassDeclaration]:
        for node in self.nodes:
            if isinstance(node, ClassDeclaration) and node.name == name:
                return node
        return None
