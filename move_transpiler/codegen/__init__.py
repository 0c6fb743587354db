"""
Code generation module for the Move to TypeScript transpiler.

This module provides identifier sanitization, the emission IR and serializer,
the table accessor emitters and the package/project index assemblers.
"""

from .naming import NamingConfig, DEFAULT_NAMING, sanitize
from .diagnostics import TranspilerDiagnostics, Diagnostic, DiagnosticSeverity
from .context import CodeGenerationContext
from .serializer import TypeScriptSerializer
from .base import BaseGenerator, GeneratedFile
from .imports import ImportGenerator
from .tables import (
    TableAccessor,
    IterableTableAccessor,
    TableAccessorEmitter,
    IterableTableAccessorEmitter,
)
from .index import ModuleIndexAssembler, ProjectIndexAssembler
from .scaffold import generate_scaffold

__all__ = [
    'NamingConfig',
    'DEFAULT_NAMING',
    'sanitize',
    'TranspilerDiagnostics',
    'Diagnostic',
    'DiagnosticSeverity',
    'CodeGenerationContext',
    'TypeScriptSerializer',
    'BaseGenerator',
    'GeneratedFile',
    'ImportGenerator',
    'TableAccessor',
    'IterableTableAccessor',
    'TableAccessorEmitter',
    'IterableTableAccessorEmitter',
    'ModuleIndexAssembler',
    'ProjectIndexAssembler',
    'generate_scaffold',
]
