"""
Exceptions raised during Move to TypeScript generation.

All of them are generation-time failures: they abort the emission call that
raised them and are never recovered inside the generator.
"""

from typing import Optional


class TranspilerError(Exception):
    """Base class for all generation-time errors."""
    pass


class TypeTagParseError(TranspilerError):
    """Raised when a type tag string cannot be parsed."""

    def __init__(self, text: str, position: int, message: str):
        self.text = text
        self.position = position
        super().__init__(f"Invalid type tag {text!r} at position {position}: {message}")


class MalformedTypeShapeError(TranspilerError):
    """
    Raised when a field's type tag does not have the shape a table accessor needs.

    Carries enough context to locate the faulty field: its name, the struct
    declaring it (``0x2::Market::Book``), the expected and actual qualified
    names, and the expected and actual number of type parameters.
    """

    def __init__(
        self,
        field_name: str,
        expected_name: str,
        actual_name: Optional[str] = None,
        expected_params: int = 2,
        actual_params: Optional[int] = None,
        declared_in: str = '',
    ):
        self.field_name = field_name
        self.declared_in = declared_in
        self.expected_name = expected_name
        self.actual_name = actual_name
        self.expected_params = expected_params
        self.actual_params = actual_params

        if actual_name is None:
            detail = f'expected a struct type {expected_name}, got a non-struct type'
        elif actual_name != expected_name:
            detail = f'expected {expected_name}, got {actual_name}'
        else:
            detail = (f'{expected_name} requires {expected_params} type parameters, '
                      f'got {actual_params}')
        where = f' of {declared_in}' if declared_in else ''
        super().__init__(f'Field "{field_name}"{where}: {detail}')


class DuplicateEntryError(TranspilerError):
    """Raised when an index would contain the same child twice."""

    def __init__(self, kind: str, name: str, parent: str = ''):
        self.kind = kind
        self.name = name
        self.parent = parent
        where = f' in {parent}' if parent else ''
        super().__init__(f'Duplicate {kind} "{name}"{where}')


class ManifestError(TranspilerError):
    """Raised when the module manifest is missing required data."""
    pass
