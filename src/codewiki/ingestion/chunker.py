"""Split a TypeScript/JavaScript file into semantic chunks using tree-sitter.

One depth-first pass over the syntax tree. Declarations are routed
through ``_HANDLERS`` (node type → handler); every other node is
descended into with the current parent unchanged.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path, PurePath

import tree_sitter

from codewiki.constants import ChunkType, DependencyKind
from codewiki.ingestion.parser import grammar_for, node_text, parse_source
from codewiki.ingestion.schemas import (
    Chunk,
    ChunkMetadata,
    Dependency,
    ExportInfo,
    FileAnalysis,
    ImportInfo,
    ImportSpecifier,
    ParameterInfo,
)
from codewiki.ingestion.summary import compute_summary
from codewiki.resilience.errors import (
    SourceFileNotFoundError,
    UnsupportedFileTypeError,
)

type Node = tree_sitter.Node

# Nodes that add one decision point to cyclomatic complexity
_DECISION_NODES = frozenset({
    "if_statement",
    "for_statement",
    "for_in_statement",
    "while_statement",
    "do_statement",
    "switch_case",
    "ternary_expression",
    "catch_clause",
})
_LOGICAL_OPERATORS = frozenset({"&&", "||", "??"})

_MODIFIER_TOKENS = frozenset({
    "static",
    "readonly",
    "async",
    "abstract",
    "declare",
    "override",
    "get",
    "set",
})

_CLASS_NODES = frozenset({
    "class_declaration",
    "abstract_class_declaration",
    "class",
})
_FUNCTION_VALUE_NODES = frozenset({
    "function_expression",
    "function",
    "arrow_function",
    "generator_function",
})

_JSDOC_OPEN = re.compile(r"^/\*\*\s*")
_JSDOC_CLOSE = re.compile(r"\s*\*/$")
_JSDOC_LINE = re.compile(r"^\s*\*\s?")


@dataclass
class _FileContext:
    """Mutable state for one file's traversal."""

    file_path: str
    stem: str
    chunks: list[Chunk] = field(default_factory=lambda: list[Chunk]())
    imports: list[ImportInfo] = field(
        default_factory=lambda: list[ImportInfo]()
    )
    exports: list[ExportInfo] = field(
        default_factory=lambda: list[ExportInfo]()
    )
    _ids: set[str] = field(default_factory=set)

    def make_id(self, chunk_type: ChunkType, name: str, line: int) -> str:
        base = f"{self.stem}:{chunk_type}:{name}"
        candidate = base
        n = 1
        while candidate in self._ids:
            candidate = f"{base}@{line}" if n == 1 else f"{base}@{line}.{n}"
            n += 1
        self._ids.add(candidate)
        return candidate

    def add(self, chunk: Chunk, parent: Chunk | None) -> Chunk:
        if parent is not None:
            chunk.parent = parent.id
            parent.children.append(chunk.id)
        self.chunks.append(chunk)
        return chunk


type _Handler = Callable[[Node, _FileContext, Chunk | None, Node | None], None]


def analyze_file(
    path: str | Path, base_path: str | Path | None = None
) -> FileAnalysis:
    """Parse one source file into chunks, imports, exports and a summary.

    Raises SourceFileNotFoundError when *path* does not exist and
    UnsupportedFileTypeError for extensions other than .ts/.tsx/.js/.jsx.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SourceFileNotFoundError(str(path))

    grammar = grammar_for(file_path.suffix)
    if grammar is None:
        raise UnsupportedFileTypeError(str(path), file_path.suffix)

    source = file_path.read_text(encoding="utf-8", errors="replace")
    relative = _relative_path(file_path, base_path)
    return analyze_source(source, str(file_path), relative, grammar)


def analyze_source(
    source: str,
    file_path: str,
    relative_path: str,
    grammar: str,
) -> FileAnalysis:
    """Chunk already-loaded source text with the given grammar."""
    tree = parse_source(source.encode("utf-8"), grammar)
    ctx = _FileContext(
        file_path=file_path, stem=PurePath(file_path).stem
    )

    for child in tree.root_node.named_children:
        _visit(child, ctx, None)

    _mark_clause_exports(ctx)
    _resolve_external(ctx)

    return FileAnalysis(
        file_path=file_path,
        relative_path=relative_path,
        chunks=ctx.chunks,
        imports=ctx.imports,
        exports=ctx.exports,
        summary=compute_summary(source, ctx.chunks, ctx.imports),
    )


def chunks_by_type(
    files: list[FileAnalysis], chunk_type: ChunkType | str
) -> list[Chunk]:
    """All chunks of one type across a set of analyses."""
    wanted = ChunkType(chunk_type)
    return [c for f in files for c in f.chunks if c.chunk_type == wanted]


def find_dependencies(
    chunk: Chunk, files: list[FileAnalysis]
) -> list[Chunk]:
    """Chunks whose name matches one of *chunk*'s dependencies.

    Matching is by bare name, first match per file.
    """
    found: list[Chunk] = []
    for dep in chunk.dependencies:
        for analysis in files:
            match = next(
                (c for c in analysis.chunks if c.name == dep.name), None
            )
            if match is not None and match.id != chunk.id:
                found.append(match)
    return found


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


def _visit(
    node: Node,
    ctx: _FileContext,
    parent: Chunk | None,
    wrapper: Node | None = None,
) -> None:
    handler = _HANDLERS.get(node.type)
    if handler is not None:
        handler(node, ctx, parent, wrapper)
        return
    for child in node.named_children:
        _visit(child, ctx, parent)


def _handle_import(
    node: Node, ctx: _FileContext, parent: Chunk | None, wrapper: Node | None
) -> None:
    info = ImportInfo(
        source=_string_value(node.child_by_field_name("source")),
        is_type=any(c.type == "type" for c in node.children),
    )
    clause = _first_child(node, "import_clause")
    if clause is not None:
        for part in clause.named_children:
            if part.type == "identifier":
                info.is_default = True
                info.specifiers.append(
                    ImportSpecifier(name=node_text(part))
                )
            elif part.type == "namespace_import":
                info.is_namespace = True
                ident = _first_child(part, "identifier")
                info.specifiers.append(
                    ImportSpecifier(name="*", alias=node_text(ident))
                )
            elif part.type == "named_imports":
                for spec in part.named_children:
                    if spec.type != "import_specifier":
                        continue
                    alias = spec.child_by_field_name("alias")
                    info.specifiers.append(
                        ImportSpecifier(
                            name=node_text(
                                spec.child_by_field_name("name")
                            ),
                            alias=node_text(alias) if alias else None,
                        )
                    )
    ctx.imports.append(info)


def _handle_export(
    node: Node, ctx: _FileContext, parent: Chunk | None, wrapper: Node | None
) -> None:
    declaration = node.child_by_field_name("declaration")
    if declaration is not None:
        _visit(declaration, ctx, parent, wrapper=node)
        return

    source = _string_value(node.child_by_field_name("source")) or None
    clause = _first_child(node, "export_clause")
    if clause is not None:
        for spec in clause.named_children:
            if spec.type != "export_specifier":
                continue
            alias = spec.child_by_field_name("alias")
            name = spec.child_by_field_name("name")
            ctx.exports.append(
                ExportInfo(
                    name=node_text(alias or name),
                    is_re_export=source is not None,
                    source=source,
                )
            )
        return

    namespace = _first_child(node, "namespace_export")
    if namespace is not None:
        ctx.exports.append(
            ExportInfo(
                name=node_text(namespace.named_children[-1])
                if namespace.named_children
                else "*",
                is_re_export=True,
                source=source,
            )
        )
        return

    if any(c.type == "*" for c in node.children):
        ctx.exports.append(
            ExportInfo(name="*", is_re_export=True, source=source)
        )
        return

    value = node.child_by_field_name("value")
    if value is None:
        return
    if value.type in _CLASS_NODES:
        _handle_class(value, ctx, parent, node)
    elif value.type in _FUNCTION_VALUE_NODES:
        _handle_function(value, ctx, parent, node)
    elif value.type == "identifier":
        ctx.exports.append(
            ExportInfo(name=node_text(value), is_default=True)
        )


def _handle_class(
    node: Node, ctx: _FileContext, parent: Chunk | None, wrapper: Node | None
) -> None:
    name = _declared_name(node, wrapper)
    outer = wrapper or node
    type_params = _type_parameters(node)
    body = node.child_by_field_name("body")
    ctor = _constructor(body)

    deps: list[Dependency] = []
    extends: list[str] = []
    implements: list[str] = []
    heritage = _first_child(node, "class_heritage")
    if heritage is not None:
        _collect_heritage(heritage, extends, implements)
    deps.extend(Dependency(name=n, kind=DependencyKind.EXTENDS) for n in extends)
    deps.extend(
        Dependency(name=n, kind=DependencyKind.IMPLEMENTS) for n in implements
    )

    params: list[ParameterInfo] = []
    if ctor is not None:
        formal = ctor.child_by_field_name("parameters")
        params = _parameters(formal)
        deps.extend(_type_references(formal))

    signature = f"class {name}{_generic_text(type_params)}"
    if extends:
        signature += f" extends {', '.join(extends)}"
    if implements:
        signature += f" implements {', '.join(implements)}"

    modifiers = _modifiers(node, wrapper)
    if node.type == "abstract_class_declaration" and "abstract" not in modifiers:
        modifiers.append("abstract")

    chunk = ctx.add(
        _new_chunk(
            ctx,
            ChunkType.CLASS,
            name,
            outer,
            signature=signature,
            modifiers=modifiers,
            dependencies=_dedupe(deps),
            exported=wrapper is not None,
            metadata=ChunkMetadata(
                complexity=_complexity(node),
                line_count=_line_count(outer),
                parameters=params,
                decorators=_decorators(node, wrapper),
                generic_types=[
                    node_text(tp.child_by_field_name("name"))
                    for tp in type_params
                ],
                access_modifier=_access_modifier(modifiers),
            ),
        ),
        parent,
    )
    if wrapper is not None:
        _record_declaration_export(ctx, chunk, wrapper)

    if body is not None:
        for member in body.named_children:
            _visit(member, ctx, chunk)


def _handle_interface(
    node: Node, ctx: _FileContext, parent: Chunk | None, wrapper: Node | None
) -> None:
    name = _declared_name(node, wrapper)
    type_params = _type_parameters(node)
    deps: list[Dependency] = []
    clause = _first_child(node, "extends_type_clause")
    if clause is not None:
        deps.extend(
            Dependency(name=_strip_generics(node_text(t)), kind=DependencyKind.EXTENDS)
            for t in clause.named_children
        )

    chunk = ctx.add(
        _new_chunk(
            ctx,
            ChunkType.INTERFACE,
            name,
            wrapper or node,
            signature=f"interface {name}{_generic_text(type_params)}",
            modifiers=_modifiers(node, wrapper),
            dependencies=_dedupe(deps),
            exported=wrapper is not None,
            metadata=ChunkMetadata(
                line_count=_line_count(wrapper or node),
                generic_types=[
                    node_text(tp.child_by_field_name("name"))
                    for tp in type_params
                ],
            ),
        ),
        parent,
    )
    if wrapper is not None:
        _record_declaration_export(ctx, chunk, wrapper)

    body = node.child_by_field_name("body")
    if body is not None:
        for member in body.named_children:
            _visit(member, ctx, chunk)


def _handle_type_alias(
    node: Node, ctx: _FileContext, parent: Chunk | None, wrapper: Node | None
) -> None:
    name = _declared_name(node, wrapper)
    type_params = _type_parameters(node)
    value = node_text(node.child_by_field_name("value"))
    shown = value if value and "\n" not in value and len(value) <= 60 else "..."
    chunk = ctx.add(
        _new_chunk(
            ctx,
            ChunkType.TYPE,
            name,
            wrapper or node,
            signature=f"type {name}{_generic_text(type_params)} = {shown}",
            modifiers=_modifiers(node, wrapper),
            exported=wrapper is not None,
            metadata=ChunkMetadata(
                line_count=_line_count(wrapper or node),
                generic_types=[
                    node_text(tp.child_by_field_name("name"))
                    for tp in type_params
                ],
            ),
        ),
        parent,
    )
    if wrapper is not None:
        _record_declaration_export(ctx, chunk, wrapper)


def _handle_enum(
    node: Node, ctx: _FileContext, parent: Chunk | None, wrapper: Node | None
) -> None:
    name = _declared_name(node, wrapper)
    modifiers = _modifiers(node, wrapper)
    if any(c.type == "const" for c in node.children):
        modifiers.append("const")
    chunk = ctx.add(
        _new_chunk(
            ctx,
            ChunkType.ENUM,
            name,
            wrapper or node,
            signature=f"enum {name}",
            modifiers=modifiers,
            exported=wrapper is not None,
            metadata=ChunkMetadata(line_count=_line_count(wrapper or node)),
        ),
        parent,
    )
    if wrapper is not None:
        _record_declaration_export(ctx, chunk, wrapper)


def _handle_function(
    node: Node, ctx: _FileContext, parent: Chunk | None, wrapper: Node | None
) -> None:
    name = _declared_name(node, wrapper)
    outer = wrapper or node
    chunk = ctx.add(
        _callable_chunk(
            ctx,
            ChunkType.FUNCTION,
            name,
            node,
            outer,
            modifiers=_modifiers(node, wrapper),
            exported=wrapper is not None,
            decorators=[],
            access=None,
        ),
        parent,
    )
    if wrapper is not None:
        _record_declaration_export(ctx, chunk, wrapper)


def _handle_method(
    node: Node, ctx: _FileContext, parent: Chunk | None, wrapper: Node | None
) -> None:
    raw_name = node_text(node.child_by_field_name("name"))
    if raw_name == "constructor" and parent is not None:
        return
    modifiers = _modifiers(node, None)
    if node.type == "abstract_method_signature" and "abstract" not in modifiers:
        modifiers.append("abstract")
    if raw_name.startswith("#") and "private" not in modifiers:
        modifiers.append("private")
    ctx.add(
        _callable_chunk(
            ctx,
            ChunkType.METHOD,
            raw_name,
            node,
            node,
            modifiers=modifiers,
            exported=False,
            decorators=[node_text(d) for d in _preceding_decorators(node)],
            access=_access_modifier(modifiers),
            id_name=_member_id_name(parent, raw_name),
        ),
        parent,
    )


def _handle_property(
    node: Node, ctx: _FileContext, parent: Chunk | None, wrapper: Node | None
) -> None:
    name_node = node.child_by_field_name("name") or node.child_by_field_name(
        "property"
    )
    raw_name = node_text(name_node)
    modifiers = _modifiers(node, None)
    if raw_name.startswith("#") and "private" not in modifiers:
        modifiers.append("private")
    prop_type = _annotation(node.child_by_field_name("type"))
    decorators = [
        node_text(c) for c in node.children if c.type == "decorator"
    ] + [node_text(d) for d in _preceding_decorators(node)]
    ctx.add(
        _new_chunk(
            ctx,
            ChunkType.PROPERTY,
            raw_name,
            node,
            id_name=_member_id_name(parent, raw_name),
            signature=f"{raw_name}: {prop_type or 'unknown'}",
            modifiers=modifiers,
            dependencies=_type_references(node.child_by_field_name("type")),
            exported=False,
            metadata=ChunkMetadata(
                line_count=_line_count(node),
                return_type=prop_type,
                decorators=decorators,
                access_modifier=_access_modifier(modifiers),
            ),
        ),
        parent,
    )


def _handle_variable(
    node: Node, ctx: _FileContext, parent: Chunk | None, wrapper: Node | None
) -> None:
    outer = wrapper or node
    keyword = node.children[0].type if node.children else "const"
    if keyword not in ("const", "let", "var"):
        keyword = "var" if node.type == "variable_declaration" else "const"
    modifiers = _modifiers(node, wrapper)
    for declarator in node.named_children:
        if declarator.type != "variable_declarator":
            continue
        name_node = declarator.child_by_field_name("name")
        if name_node is None or name_node.type != "identifier":
            continue
        name = node_text(name_node)
        var_type = _annotation(declarator.child_by_field_name("type"))
        chunk = ctx.add(
            _new_chunk(
                ctx,
                ChunkType.VARIABLE,
                name,
                outer,
                signature=f"{keyword} {name}: {var_type or 'inferred'}",
                modifiers=list(modifiers),
                dependencies=_type_references(
                    declarator.child_by_field_name("type")
                ),
                exported=wrapper is not None,
                metadata=ChunkMetadata(
                    line_count=_line_count(outer),
                    return_type=var_type,
                ),
            ),
            parent,
        )
        if wrapper is not None:
            _record_declaration_export(ctx, chunk, wrapper)


def _handle_namespace(
    node: Node, ctx: _FileContext, parent: Chunk | None, wrapper: Node | None
) -> None:
    is_module = node.type == "module"
    chunk_type = ChunkType.MODULE if is_module else ChunkType.NAMESPACE
    name = node_text(node.child_by_field_name("name")).strip("'\"")
    chunk = ctx.add(
        _new_chunk(
            ctx,
            chunk_type,
            name,
            wrapper or node,
            signature=f"{chunk_type} {name}",
            modifiers=_modifiers(node, wrapper),
            exported=wrapper is not None,
            metadata=ChunkMetadata(line_count=_line_count(wrapper or node)),
        ),
        parent,
    )
    if wrapper is not None:
        _record_declaration_export(ctx, chunk, wrapper)
    body = node.child_by_field_name("body")
    if body is not None:
        for child in body.named_children:
            _visit(child, ctx, chunk)


_HANDLERS: dict[str, _Handler] = {
    "import_statement": _handle_import,
    "export_statement": _handle_export,
    "class_declaration": _handle_class,
    "abstract_class_declaration": _handle_class,
    "class": _handle_class,
    "interface_declaration": _handle_interface,
    "type_alias_declaration": _handle_type_alias,
    "enum_declaration": _handle_enum,
    "function_declaration": _handle_function,
    "generator_function_declaration": _handle_function,
    "function_signature": _handle_function,
    "method_definition": _handle_method,
    "method_signature": _handle_method,
    "abstract_method_signature": _handle_method,
    "public_field_definition": _handle_property,
    "field_definition": _handle_property,
    "property_signature": _handle_property,
    "lexical_declaration": _handle_variable,
    "variable_declaration": _handle_variable,
    "internal_module": _handle_namespace,
    "module": _handle_namespace,
}


# ---------------------------------------------------------------------------
# Chunk construction
# ---------------------------------------------------------------------------


def _new_chunk(
    ctx: _FileContext,
    chunk_type: ChunkType,
    name: str,
    span: Node,
    id_name: str | None = None,
    **fields: object,
) -> Chunk:
    start = span.start_point[0] + 1
    return Chunk(
        id=ctx.make_id(chunk_type, id_name or name, start),
        chunk_type=chunk_type,
        name=name,
        file_path=ctx.file_path,
        start_line=start,
        end_line=span.end_point[0] + 1,
        code=node_text(span),
        documentation=_jsdoc(span),
        **fields,  # type: ignore[arg-type]
    )


def _callable_chunk(
    ctx: _FileContext,
    chunk_type: ChunkType,
    name: str,
    node: Node,
    span: Node,
    *,
    modifiers: list[str],
    exported: bool,
    decorators: list[str],
    access: str | None,
    id_name: str | None = None,
) -> Chunk:
    formal = node.child_by_field_name("parameters")
    params = _parameters(formal)
    return_node = node.child_by_field_name("return_type")
    return_type = _annotation(return_node) or "void"
    type_params = _type_parameters(node)

    rendered = ", ".join(
        f"{p.name}{'?' if p.optional else ''}: {p.type}" for p in params
    )
    signature = (
        f"{name}{_generic_text(type_params)}({rendered}): {return_type}"
    )

    deps = _call_dependencies(node.child_by_field_name("body"))
    deps.extend(_type_references(formal))
    deps.extend(_type_references(return_node))

    return _new_chunk(
        ctx,
        chunk_type,
        name,
        span,
        id_name=id_name,
        signature=signature,
        modifiers=modifiers,
        dependencies=_dedupe(deps),
        exported=exported,
        metadata=ChunkMetadata(
            complexity=_complexity(node),
            line_count=_line_count(span),
            parameters=params,
            return_type=return_type,
            decorators=decorators,
            generic_types=[
                node_text(tp.child_by_field_name("name"))
                for tp in type_params
            ],
            access_modifier=access,
        ),
    )


def _record_declaration_export(
    ctx: _FileContext, chunk: Chunk, wrapper: Node
) -> None:
    is_default = any(c.type == "default" for c in wrapper.children)
    if chunk.parent is None:
        ctx.exports.append(ExportInfo(name=chunk.name, is_default=is_default))


def _mark_clause_exports(ctx: _FileContext) -> None:
    """Flag top-level chunks exported through ``export { X }`` lists."""
    local = {
        e.name for e in ctx.exports if not e.is_re_export and e.name != "*"
    }
    for chunk in ctx.chunks:
        if chunk.parent is None and not chunk.exported and chunk.name in local:
            chunk.exported = True


def _resolve_external(ctx: _FileContext) -> None:
    """Attach import sources to dependencies bound by an import."""
    bound: dict[str, str] = {}
    for imp in ctx.imports:
        for spec in imp.specifiers:
            bound[spec.alias or spec.name] = imp.source
    if not bound:
        return
    for chunk in ctx.chunks:
        for dep in chunk.dependencies:
            source = bound.get(dep.name)
            if source is not None:
                dep.source = source
                dep.is_external = not source.startswith(".")


# ---------------------------------------------------------------------------
# Node helpers
# ---------------------------------------------------------------------------


def _declared_name(node: Node, wrapper: Node | None) -> str:
    name = node.child_by_field_name("name")
    if name is not None:
        return node_text(name)
    if wrapper is not None and any(c.type == "default" for c in wrapper.children):
        return "default"
    return "anonymous"


def _member_id_name(parent: Chunk | None, name: str) -> str:
    return f"{parent.name}.{name}" if parent is not None else name


def _first_child(node: Node, node_type: str) -> Node | None:
    for child in node.children:
        if child.type == node_type:
            return child
    return None


def _string_value(node: Node | None) -> str:
    if node is None:
        return ""
    return node_text(node).strip("'\"`")


def _annotation(node: Node | None) -> str | None:
    """Type text of a type_annotation node, without the leading colon."""
    if node is None:
        return None
    text = node_text(node).strip()
    if node.type in ("type_annotation", "asserts_annotation", "type_predicate_annotation"):
        text = text.removeprefix(":").strip()
    return text or None


def _strip_generics(text: str) -> str:
    return text.split("<", 1)[0].strip()


def _type_parameters(node: Node) -> list[Node]:
    params = node.child_by_field_name("type_parameters")
    if params is None:
        return []
    return [c for c in params.named_children if c.type == "type_parameter"]


def _generic_text(type_params: list[Node]) -> str:
    if not type_params:
        return ""
    return "<" + ", ".join(node_text(tp) for tp in type_params) + ">"


def _collect_heritage(
    heritage: Node, extends: list[str], implements: list[str]
) -> None:
    for clause in heritage.named_children:
        if clause.type == "extends_clause":
            for value in clause.named_children:
                if value.type != "type_arguments":
                    extends.append(_strip_generics(node_text(value)))
        elif clause.type == "implements_clause":
            implements.extend(
                _strip_generics(node_text(t)) for t in clause.named_children
            )
        else:
            # JavaScript grammar: class_heritage holds the expression directly
            extends.append(_strip_generics(node_text(clause)))


def _constructor(body: Node | None) -> Node | None:
    if body is None:
        return None
    for member in body.named_children:
        if (
            member.type == "method_definition"
            and node_text(member.child_by_field_name("name")) == "constructor"
        ):
            return member
    return None


def _parameters(formal: Node | None) -> list[ParameterInfo]:
    if formal is None:
        return []
    params: list[ParameterInfo] = []
    for p in formal.named_children:
        if p.type in ("required_parameter", "optional_parameter"):
            pattern = p.child_by_field_name("pattern")
            value = p.child_by_field_name("value")
            params.append(
                ParameterInfo(
                    name=_pattern_name(pattern),
                    type=_annotation(p.child_by_field_name("type")) or "any",
                    optional=p.type == "optional_parameter" or value is not None,
                    default_value=node_text(value) if value else None,
                )
            )
        elif p.type == "assignment_pattern":
            value = p.child_by_field_name("right")
            params.append(
                ParameterInfo(
                    name=_pattern_name(p.child_by_field_name("left")),
                    optional=True,
                    default_value=node_text(value) if value else None,
                )
            )
        elif p.type in ("identifier", "rest_pattern", "object_pattern", "array_pattern"):
            params.append(ParameterInfo(name=_pattern_name(p)))
    return params


def _pattern_name(pattern: Node | None) -> str:
    return node_text(pattern).removeprefix("...")


def _modifiers(node: Node, wrapper: Node | None) -> list[str]:
    mods: list[str] = []
    if wrapper is not None:
        mods.append("export")
        if any(c.type == "default" for c in wrapper.children):
            mods.append("default")
    for child in node.children:
        if child.type == "accessibility_modifier":
            mods.append(node_text(child))
        elif child.type == "override_modifier":
            mods.append("override")
        elif child.type in _MODIFIER_TOKENS and child.type not in mods:
            mods.append(child.type)
        elif child.type == "?" and "optional" not in mods:
            mods.append("optional")
    return mods


def _access_modifier(modifiers: list[str]) -> str:
    if "private" in modifiers:
        return "private"
    if "protected" in modifiers:
        return "protected"
    return "public"


def _decorators(node: Node, wrapper: Node | None) -> list[str]:
    found = [node_text(c) for c in node.children if c.type == "decorator"]
    if wrapper is not None:
        found = [
            node_text(c) for c in wrapper.children if c.type == "decorator"
        ] + found
    return found


def _preceding_decorators(node: Node) -> list[Node]:
    """Decorators written as siblings directly before a class member."""
    found: list[Node] = []
    sib = node.prev_named_sibling
    while sib is not None and sib.type == "decorator":
        found.append(sib)
        sib = sib.prev_named_sibling
    found.reverse()
    return found


def _jsdoc(node: Node) -> str | None:
    sib = node.prev_named_sibling
    while sib is not None and sib.type == "decorator":
        sib = sib.prev_named_sibling
    if sib is None or sib.type != "comment":
        return None
    text = node_text(sib)
    if not text.startswith("/**"):
        return None
    text = _JSDOC_CLOSE.sub("", _JSDOC_OPEN.sub("", text))
    lines = [_JSDOC_LINE.sub("", line).strip() for line in text.split("\n")]
    doc = "\n".join(line for line in lines if line)
    return doc or None


def _line_count(node: Node) -> int:
    return node.end_point[0] - node.start_point[0] + 1


def _complexity(node: Node) -> int:
    score = 1
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type in _DECISION_NODES:
            score += 1
        elif current.type == "binary_expression":
            op = current.child_by_field_name("operator")
            if op is not None and op.type in _LOGICAL_OPERATORS:
                score += 1
        stack.extend(current.children)
    return score


def _call_dependencies(body: Node | None) -> list[Dependency]:
    if body is None:
        return []
    deps: list[Dependency] = []
    stack = [body]
    while stack:
        current = stack.pop()
        if current.type == "call_expression":
            deps.extend(_callee_names(current.child_by_field_name("function")))
        elif current.type == "new_expression":
            deps.extend(
                _callee_names(current.child_by_field_name("constructor"))
            )
        stack.extend(reversed(current.named_children))
    return deps


def _callee_names(callee: Node | None) -> list[Dependency]:
    if callee is None:
        return []
    if callee.type == "identifier":
        return [Dependency(name=node_text(callee), kind=DependencyKind.USES)]
    if callee.type != "member_expression":
        return []
    names: list[Dependency] = []
    prop = callee.child_by_field_name("property")
    if prop is not None:
        names.append(Dependency(name=node_text(prop), kind=DependencyKind.USES))
    root = callee.child_by_field_name("object")
    while root is not None and root.type == "member_expression":
        root = root.child_by_field_name("object")
    if root is not None and root.type == "identifier":
        names.append(Dependency(name=node_text(root), kind=DependencyKind.USES))
    return names


def _type_references(node: Node | None) -> list[Dependency]:
    if node is None:
        return []
    deps: list[Dependency] = []
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "type_identifier":
            deps.append(
                Dependency(name=node_text(current), kind=DependencyKind.REFERENCE)
            )
        stack.extend(reversed(current.named_children))
    return deps


def _dedupe(deps: list[Dependency]) -> list[Dependency]:
    seen: set[tuple[str, DependencyKind]] = set()
    unique: list[Dependency] = []
    for dep in deps:
        key = (dep.name, dep.kind)
        if dep.name and key not in seen:
            seen.add(key)
            unique.append(dep)
    return unique


def _relative_path(file_path: Path, base_path: str | Path | None) -> str:
    if base_path is not None:
        try:
            return file_path.resolve().relative_to(
                Path(base_path).resolve()
            ).as_posix()
        except ValueError:
            pass
    return file_path.as_posix()
