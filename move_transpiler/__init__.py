"""
Move to TypeScript Transpiler

This package emits the TypeScript glue for bindings generated from Move
modules: table accessors, package indices and the project index.

Module Structure:
- type_system/: Type tags, module registry and Move -> TypeScript mappings
- codegen/: Sanitizer, emission IR and serializer, emitters and assemblers
- move2ts.py: Orchestrator and command-line interface

Usage:
    from move_transpiler import MoveToTypeScriptTranspiler

    transpiler = MoveToTypeScriptTranspiler(output_dir='build')
    transpiler.load_manifest('manifest.json')
    transpiler.write_output(transpiler.transpile())
"""

# Re-export main classes for convenience
from .errors import (
    TranspilerError,
    MalformedTypeShapeError,
    TypeTagParseError,
    DuplicateEntryError,
    ManifestError,
)
from .codegen import (
    sanitize,
    NamingConfig,
    CodeGenerationContext,
    GeneratedFile,
    TableAccessorEmitter,
    IterableTableAccessorEmitter,
    ModuleIndexAssembler,
    ProjectIndexAssembler,
)
from .move2ts import MoveToTypeScriptTranspiler

__all__ = [
    'TranspilerError',
    'MalformedTypeShapeError',
    'TypeTagParseError',
    'DuplicateEntryError',
    'ManifestError',
    'sanitize',
    'NamingConfig',
    'CodeGenerationContext',
    'GeneratedFile',
    'TableAccessorEmitter',
    'IterableTableAccessorEmitter',
    'ModuleIndexAssembler',
    'ProjectIndexAssembler',
    'MoveToTypeScriptTranspiler',
]
