"""
Import generation for Move to TypeScript emission.

This module builds the import statements of generated files: runtime and
client library imports, and namespace imports of other generated modules
addressed relative to the importing file.
"""

from pathlib import PurePosixPath
from typing import Iterable, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .context import CodeGenerationContext

from ..type_system import module_alias
from ..type_system.mappings import CLIENT_TYPE_IMPORTS
from .ir import ImportStatement


class ImportGenerator:
    """
    Generates TypeScript import statements.

    Handles:
    - move-to-ts runtime imports (parser repo, type tags, integer types)
    - chain client imports (AptosClient, HexString)
    - namespace imports of generated modules in this or other packages
    """

    def __init__(self, ctx: 'CodeGenerationContext'):
        """
        Initialize the import generator.

        Args:
            ctx: The code generation context
        """
        self._ctx = ctx

    def library_imports(self, names: Iterable[str]) -> List[ImportStatement]:
        """Split runtime type names between the client and runtime libraries."""
        names = set(names)
        client = sorted(n for n in names if n in CLIENT_TYPE_IMPORTS or n == 'AptosClient')
        runtime = sorted(names - set(client))
        lines = []
        if client:
            lines.append(ImportStatement(self._ctx.client_module, tuple(client)))
        if runtime:
            lines.append(ImportStatement(self._ctx.runtime_module, tuple(runtime)))
        return lines

    def runtime_namespace_import(self, alias: str = '$') -> ImportStatement:
        return ImportStatement(self._ctx.runtime_module, namespace=alias)

    def module_path(self, address: str, module: str) -> str:
        """Output path (without extension) of a generated module.

        Modules missing from the registry are assumed to live in the std package.
        """
        package = self._ctx.known_modules.get((address, module), self._ctx.std_package)
        return f'{package}/{module}'

    def module_namespace_import(
        self,
        current_file: str,
        address: str,
        module: str,
        alias: Optional[str] = None,
    ) -> ImportStatement:
        """``import * as Module$_ from '<relative path>';``"""
        target = self.module_path(address, module)
        return ImportStatement(
            self.relative_import_path(current_file, target),
            namespace=alias or module_alias(module),
        )

    @staticmethod
    def relative_import_path(current_file: str, target_path: str) -> str:
        """Compute the relative import path from current file to target.

        Args:
            current_file: Path of the importing file, relative to the output root
            target_path: Path of the imported module without extension

        Returns:
            The relative import path string
        """
        current_dir = PurePosixPath(current_file).parent
        target = PurePosixPath(target_path)

        current_parts = current_dir.parts if str(current_dir) != '.' else ()
        target_parts = target.parts

        # Find common prefix length
        common_len = 0
        for i, (c, t) in enumerate(zip(current_parts, target_parts)):
            if c == t:
                common_len = i + 1
            else:
                break

        # Go up from current dir, then down to target
        ups = len(current_parts) - common_len
        downs = target_parts[common_len:]

        if ups == 0 and not downs:
            return f'./{target.name}'
        elif ups == 0:
            return './' + '/'.join(downs)
        else:
            return '../' * ups + '/'.join(downs)
