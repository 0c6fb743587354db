"""
Rendering of the emission IR to TypeScript text.

Layout rules:
- two-space indentation
- relative import/export sources use single quotes, package sources double quotes
- consecutive imports (or exports, or type aliases) form one group; groups
  and top-level declarations are separated by a single blank line
- output always ends with exactly one newline
"""

from typing import List

from .ir import (
    Block,
    ClassDeclaration,
    ConstructorDeclaration,
    ExportStatement,
    FunctionDeclaration,
    ImportStatement,
    MethodDeclaration,
    Node,
    Parameter,
    PropertyDeclaration,
    SourceFile,
    Statement,
    TypeAlias,
)


class TypeScriptSerializer:
    """Turns IR nodes into TypeScript source text."""

    def __init__(self, indent_str: str = '  '):
        self.indent_str = indent_str
        self.indent_level = 0

    def indent(self) -> str:
        """Return the current indentation string."""
        return self.indent_str * self.indent_level

    # =========================================================================
    # FILES
    # =========================================================================

    def render(self, source: SourceFile) -> str:
        """Render a whole file."""
        lines: List[str] = []
        previous_group = None
        for node in source.nodes:
            group = self._group_of(node)
            if lines and (group != previous_group or group == 'declaration'):
                lines.append('')
            lines.extend(self.render_node(node))
            previous_group = group
        return '\n'.join(lines) + '\n'

    @staticmethod
    def _group_of(node: Node) -> str:
        if isinstance(node, ImportStatement):
            return 'import'
        if isinstance(node, ExportStatement):
            return 'export'
        if isinstance(node, TypeAlias):
            return 'type'
        return 'declaration'

    def render_node(self, node: Node) -> List[str]:
        if isinstance(node, ImportStatement):
            return [self.render_import(node)]
        if isinstance(node, ExportStatement):
            return [self.render_export(node)]
        if isinstance(node, TypeAlias):
            prefix = 'export ' if node.exported else ''
            return [f'{self.indent()}{prefix}type {node.name} = {node.value};']
        if isinstance(node, FunctionDeclaration):
            return self.render_function(node)
        if isinstance(node, ClassDeclaration):
            return self.render_class(node)
        raise TypeError(f'Cannot render {type(node).__name__}')

    # =========================================================================
    # IMPORTS / EXPORTS
    # =========================================================================

    @staticmethod
    def quote(source: str) -> str:
        if source.startswith('.'):
            return f"'{source}'"
        return f'"{source}"'

    def render_import(self, node: ImportStatement) -> str:
        if node.namespace:
            return f'import * as {node.namespace} from {self.quote(node.source)};'
        return f'import {{ {", ".join(node.names)} }} from {self.quote(node.source)};'

    def render_export(self, node: ExportStatement) -> str:
        if node.namespace:
            return f'export * as {node.namespace} from {self.quote(node.source)};'
        if node.names:
            return f'export {{ {", ".join(node.names)} }} from {self.quote(node.source)};'
        return f'export * from {self.quote(node.source)};'

    # =========================================================================
    # DECLARATIONS
    # =========================================================================

    @staticmethod
    def render_params(params: List[Parameter]) -> str:
        parts = []
        for p in params:
            text = f'{p.modifier} {p.name}' if p.modifier else p.name
            if p.type:
                text += f': {p.type}'
            parts.append(text)
        return ', '.join(parts)

    @staticmethod
    def render_type_params(type_params) -> str:
        if not type_params:
            return ''
        return f'<{", ".join(type_params)}>'

    def render_signature(self, name: str, type_params, params: List[Parameter], return_type: str) -> str:
        signature = f'{name}{self.render_type_params(type_params)}({self.render_params(params)})'
        if return_type:
            signature += f': {return_type}'
        return signature

    def render_function(self, func: FunctionDeclaration) -> List[str]:
        prefix = 'export ' if func.exported else ''
        if func.is_async:
            prefix += 'async '
        signature = self.render_signature(func.name, func.type_params, func.params, func.return_type)
        return self.render_block(Block(f'{prefix}function {signature}', func.body))

    def render_class(self, cls: ClassDeclaration) -> List[str]:
        prefix = 'export ' if cls.exported else ''
        lines = [f'{self.indent()}{prefix}class {cls.name}{self.render_type_params(cls.type_params)} {{']
        self.indent_level += 1
        previous = None
        for member in cls.members:
            # Properties hug the member that follows them
            if previous is not None and not isinstance(previous, PropertyDeclaration):
                lines.append('')
            lines.extend(self.render_member(member))
            previous = member
        self.indent_level -= 1
        lines.append(f'{self.indent()}}}')
        return lines

    def render_member(self, member) -> List[str]:
        if isinstance(member, PropertyDeclaration):
            return [f'{self.indent()}{member.name}: {member.type};']
        if isinstance(member, ConstructorDeclaration):
            return self.render_block(Block(f'constructor({self.render_params(member.params)})', member.body))
        if isinstance(member, MethodDeclaration):
            prefix = 'static ' if member.is_static else ''
            if member.is_async:
                prefix += 'async '
            signature = self.render_signature(
                member.name, member.type_params, member.params, member.return_type
            )
            return self.render_block(Block(f'{prefix}{signature}', member.body))
        raise TypeError(f'Cannot render class member {type(member).__name__}')

    # =========================================================================
    # STATEMENTS
    # =========================================================================

    def render_block(self, block: Block) -> List[str]:
        lines = [f'{self.indent()}{block.header} {{']
        self.indent_level += 1
        for stmt in block.body:
            lines.extend(self.render_statement(stmt))
        self.indent_level -= 1
        lines.append(f'{self.indent()}}}{block.footer}')
        return lines

    def render_statement(self, stmt: Statement) -> List[str]:
        if isinstance(stmt, Block):
            return self.render_block(stmt)
        return [f'{self.indent()}{stmt}']


def render(source: SourceFile) -> str:
    """Render a file with the default serializer settings."""
    return TypeScriptSerializer().render(source)
