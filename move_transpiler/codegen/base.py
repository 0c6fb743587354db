"""
Base generator class with shared utilities.

This module provides the BaseGenerator class that contains common utilities
used by every emitter: access to the shared context, identifier sanitization
and rendering of IR files.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .context import CodeGenerationContext

from ..type_system import module_alias
from .ir import SourceFile
from .serializer import TypeScriptSerializer


@dataclass(frozen=True)
class GeneratedFile:
    """A relative output path and the UTF-8 text to store there."""
    path: str
    content: str


class BaseGenerator:
    """
    Base class for all emitters.

    Provides shared utilities for:
    - Identifier sanitization
    - Namespace alias formatting
    - Rendering IR to text
    """

    def __init__(self, ctx: 'CodeGenerationContext'):
        """
        Initialize the base generator.

        Args:
            ctx: The code generation context holding the shared settings
        """
        self._ctx = ctx

    # =========================================================================
    # NAMES
    # =========================================================================

    def sanitize(self, name: str, location: str = '') -> str:
        """Return the TypeScript-safe form of a raw Move identifier."""
        return self._ctx.sanitize(name, location)

    def module_alias(self, module_name: str, location: str = '') -> str:
        """Namespace alias for a module, e.g. ``Coin$_``."""
        return module_alias(self.sanitize(module_name, location))

    # =========================================================================
    # RENDERING
    # =========================================================================

    def render(self, source: SourceFile) -> str:
        """Render an IR file using the context's indentation."""
        return TypeScriptSerializer(self._ctx.indent_str).render(source)

    def make_file(self, path: str, source: SourceFile) -> GeneratedFile:
        return GeneratedFile(path=path, content=self.render(source))
