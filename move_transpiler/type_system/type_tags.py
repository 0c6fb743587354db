"""
Type tag model for Move types.

A type tag is the structural description of a Move type used to drive
serialization and parsing. This module provides the tag dataclasses and a
small parser for the textual form used by the Aptos APIs, e.g.
``0x1::IterableTable::IterableTable<u64, vector<u8>>``.
"""

from dataclasses import dataclass, field
from typing import List, Tuple, Union

from ..errors import TypeTagParseError


# =============================================================================
# TAG NODES
# =============================================================================

PRIMITIVE_TYPES = frozenset({
    'bool', 'u8', 'u16', 'u32', 'u64', 'u128', 'u256', 'address', 'signer',
})


@dataclass(frozen=True)
class PrimitiveTag:
    """A built-in scalar type such as u64 or address."""
    name: str


@dataclass(frozen=True)
class VectorTag:
    """vector<T>."""
    element: 'TypeTag'


@dataclass(frozen=True)
class StructTag:
    """A struct type, optionally parameterized."""
    address: str
    module: str
    name: str
    type_params: Tuple['TypeTag', ...] = field(default_factory=tuple)

    def get_paramless_name(self) -> str:
        """Return the qualified name without type parameters."""
        return f'{self.address}::{self.module}::{self.name}'


TypeTag = Union[PrimitiveTag, VectorTag, StructTag]


def type_tag_fullname(tag: TypeTag) -> str:
    """Render a tag back to its canonical text form."""
    if isinstance(tag, PrimitiveTag):
        return tag.name
    if isinstance(tag, VectorTag):
        return f'vector<{type_tag_fullname(tag.element)}>'
    name = tag.get_paramless_name()
    if tag.type_params:
        params = ', '.join(type_tag_fullname(p) for p in tag.type_params)
        return f'{name}<{params}>'
    return name


def split_qualified_name(qualified_name: str) -> Tuple[str, str, str]:
    """Split ``addr::Module::Name`` into its three parts."""
    parts = qualified_name.split('::')
    if len(parts) != 3 or not all(parts):
        raise TypeTagParseError(qualified_name, 0, 'expected address::module::name')
    return parts[0], parts[1], parts[2]


# =============================================================================
# PARSER
# =============================================================================

class TypeTagParser:
    """
    Recursive descent parser for type tag strings.

    Grammar:
        tag    := prim | 'vector' '<' tag '>' | struct
        struct := ADDR '::' IDENT '::' IDENT ('<' tag (',' tag)* '>')?
    """

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def peek(self, offset: int = 0) -> str:
        """Look ahead in the input without consuming."""
        pos = self.pos + offset
        if pos >= len(self.text):
            return ''
        return self.text[pos]

    def skip_whitespace(self) -> None:
        while self.peek() and self.peek() in ' \t\r\n':
            self.pos += 1

    def error(self, message: str) -> TypeTagParseError:
        return TypeTagParseError(self.text, self.pos, message)

    def expect(self, literal: str) -> None:
        """Consume ``literal`` or raise."""
        self.skip_whitespace()
        if not self.text.startswith(literal, self.pos):
            raise self.error(f'expected {literal!r}')
        self.pos += len(literal)

    def read_word(self) -> str:
        """Read an identifier or address token."""
        self.skip_whitespace()
        start = self.pos
        while self.peek() and (self.peek().isalnum() or self.peek() == '_'):
            self.pos += 1
        if start == self.pos:
            raise self.error('expected an identifier')
        return self.text[start:self.pos]

    def parse(self) -> TypeTag:
        """Parse the whole input as a single tag."""
        tag = self.parse_tag()
        self.skip_whitespace()
        if self.pos != len(self.text):
            raise self.error('unexpected trailing input')
        return tag

    def parse_tag(self) -> TypeTag:
        word = self.read_word()
        if word in PRIMITIVE_TYPES:
            return PrimitiveTag(word)
        if word == 'vector':
            self.expect('<')
            element = self.parse_tag()
            self.expect('>')
            return VectorTag(element)

        # Struct: address::module::name
        self.expect('::')
        module = self.read_word()
        self.expect('::')
        name = self.read_word()

        params: List[TypeTag] = []
        self.skip_whitespace()
        if self.peek() == '<':
            self.pos += 1
            params.append(self.parse_tag())
            self.skip_whitespace()
            while self.peek() == ',':
                self.pos += 1
                params.append(self.parse_tag())
                self.skip_whitespace()
            self.expect('>')
        return StructTag(word, module, name, tuple(params))


def parse_type_tag(text: str) -> TypeTag:
    """Parse a type tag string such as ``0x1::Table::Table<u64, address>``."""
    return TypeTagParser(text).parse()
