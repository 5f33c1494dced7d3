"""Collect the top-level declarations of one Go file into a File record."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple, Type, Union

from ..logging import get_logger
from ..models import (
    Comment,
    Const,
    File,
    Func,
    Import,
    Interface,
    Method,
    Struct,
    StructField,
    TypeDefinition,
    Var,
    is_exported,
)
from .comments import Classified, classify_nodes, comment_groups, leading_comments, trailing_comments
from .nodes import Node, field_nodes, first_named, has_token, significant_children, text_of, type_text
from .parser import SourceUnit
from .types import (
    GENERIC,
    IDENTIFIER,
    INTERFACE,
    POINTER,
    QUALIFIED,
    STRUCT,
    normalize_field,
    normalize_pointee,
    parameter_values,
    qualified_name,
    unwrap,
)

_LITERAL_KINDS = {
    "int_literal": "INT",
    "float_literal": "FLOAT",
    "imaginary_literal": "IMAG",
    "rune_literal": "CHAR",
    "interpreted_string_literal": "STRING",
    "raw_string_literal": "STRING",
}

_METHOD_ELEMS = {"method_elem", "method_spec"}
_EMBED_ELEMS = {"type_elem", "constraint_elem", "interface_type_name"}
_TYPE_SET_TERMS = {"negated_type", "union_type", "constraint_term"}


@dataclass
class _Docs:
    """Doc comment (classified) and trailing comment of one declaration."""

    leading: Classified = field(default_factory=Classified)
    trailing: Comment = field(default_factory=Comment)


def package_name(root: Node) -> str:
    for child in significant_children(root):
        if child.type == "package_clause":
            return text_of(first_named(child))
    return ""


def capture_literal(node: Optional[Node]) -> Optional[Tuple[str, str]]:
    """Return ``(value, kind)`` for a basic literal or a negated basic literal."""
    if node is None:
        return None
    kind = _LITERAL_KINDS.get(node.type)
    if kind is not None:
        return text_of(node), kind
    if node.type == "unary_expression" and text_of(node.child_by_field_name("operator")) == "-":
        operand = node.child_by_field_name("operand")
        if operand is not None and operand.type in _LITERAL_KINDS:
            return "-" + text_of(operand), _LITERAL_KINDS[operand.type]
    return None


def receiver_type(receiver: Optional[Node]) -> Tuple[str, bool]:
    """Return the receiver's base type name and whether it is a pointer."""
    if receiver is None:
        return "", False
    for param in significant_children(receiver):
        type_node = unwrap(param.child_by_field_name("type"))
        indirect = False
        if type_node is not None and type_node.type == POINTER:
            indirect = True
            type_node = unwrap(first_named(type_node))
        if type_node is not None and type_node.type == GENERIC:
            type_node = type_node.child_by_field_name("type")
        return text_of(type_node), indirect
    return "", False


class FileCollector:
    """Walks the top-level declarations of one Go file once, in source order.

    Methods are held in a provisional map keyed by receiver type name and
    bound to their Struct or TypeDefinition after the pass, so a method may
    appear before or after its type. A receiver with no matching type in the
    same file becomes a synthetic TypeDefinition carrying only methods.
    """

    def __init__(self) -> None:
        self.logger = get_logger("collector")

    def collect(self, unit: SourceUnit) -> File:
        root = unit.root
        result = File(name=unit.name, package=package_name(root))
        self._collect_comments(root, result)

        unresolved: Dict[str, List[Method]] = {}
        structs: Dict[str, Struct] = {}
        type_defs: Dict[str, TypeDefinition] = {}

        for decl in significant_children(root):
            kind = decl.type
            if kind == "import_declaration":
                result.imports.extend(self._imports(decl))
            elif kind == "function_declaration":
                result.funcs.append(self._func(decl))
            elif kind == "method_declaration":
                method = self._method(decl)
                unresolved.setdefault(method.receiver, []).append(method)
            elif kind == "const_declaration":
                result.consts.extend(self._values(decl, "const_spec", Const))
            elif kind == "var_declaration":
                result.vars.extend(self._values(decl, "var_spec", Var))
            elif kind == "type_declaration":
                self._types(decl, structs, type_defs, result.interfaces)

        result.structs = list(structs.values())
        result.type_defs = list(type_defs.values())
        self._bind_methods(result, unresolved)
        self.logger.debug(
            "Collected %s: %d structs, %d type defs, %d interfaces, %d funcs",
            unit.name,
            len(result.structs),
            len(result.type_defs),
            len(result.interfaces),
            len(result.funcs),
        )
        return result

    # ------------------------------------------------------------------
    # Comments

    def _collect_comments(self, root: Node, result: File) -> None:
        for group in comment_groups(root):
            classified = classify_nodes(group)
            result.build_tags.extend(classified.build_tags)
            result.magic_comments.extend(classified.magic_comments)
            result.generate_comments.extend(classified.generate_comments)
            result.comments.append(classified.doc)

    @staticmethod
    def _docs(node: Node, decl: Optional[Node] = None) -> _Docs:
        """Docs of ``node``; an ungrouped ``decl`` lends its own comments."""
        leading = leading_comments(node)
        trailing = trailing_comments(node)
        if decl is not None and not leading:
            leading = leading_comments(decl)
        if decl is not None and not trailing:
            trailing = trailing_comments(decl)
        return _Docs(leading=classify_nodes(leading), trailing=classify_nodes(trailing).doc)

    @staticmethod
    def _specs(decl: Node, spec_type: str) -> Iterator[Tuple[Node, Optional[Node]]]:
        """Yield ``(spec, ungrouped_decl)``; the decl is None inside ``( ... )``."""
        grouped = has_token(decl, "(")
        for child in significant_children(decl):
            if child.type == spec_type:
                yield child, None if grouped else decl
            elif child.type.endswith("_list"):
                for inner in significant_children(child):
                    if inner.type == spec_type:
                        yield inner, None

    # ------------------------------------------------------------------
    # Declarations

    def _imports(self, decl: Node) -> List[Import]:
        imports: List[Import] = []
        for spec, ungrouped in self._specs(decl, "import_spec"):
            docs = self._docs(spec, ungrouped)
            imports.append(
                Import(
                    name=text_of(spec.child_by_field_name("name")),
                    path=text_of(spec.child_by_field_name("path")),
                    doc=docs.leading.doc,
                    comment=docs.trailing,
                    magic_comments=docs.leading.magic_comments,
                    generate_comments=docs.leading.generate_comments,
                )
            )
        return imports

    def _func(self, decl: Node) -> Func:
        name = text_of(decl.child_by_field_name("name"))
        docs = self._docs(decl)
        return Func(
            is_exported=is_exported(name),
            name=name,
            doc=docs.leading.doc,
            comment=docs.trailing,
            magic_comments=docs.leading.magic_comments,
            generate_comments=docs.leading.generate_comments,
            params=parameter_values(decl.child_by_field_name("parameters")),
            results=parameter_values(decl.child_by_field_name("result")),
        )

    def _method(self, decl: Node) -> Method:
        name = text_of(decl.child_by_field_name("name"))
        receiver, indirect = receiver_type(decl.child_by_field_name("receiver"))
        docs = self._docs(decl)
        return Method(
            is_exported=is_exported(name),
            name=name,
            doc=docs.leading.doc,
            comment=docs.trailing,
            magic_comments=docs.leading.magic_comments,
            generate_comments=docs.leading.generate_comments,
            receiver=receiver,
            receiver_indirect=indirect,
            params=parameter_values(decl.child_by_field_name("parameters")),
            results=parameter_values(decl.child_by_field_name("result")),
        )

    def _values(
        self, decl: Node, spec_type: str, record: Type[Union[Const, Var]]
    ) -> List[Union[Const, Var]]:
        records: List[Union[Const, Var]] = []
        for spec, ungrouped in self._specs(decl, spec_type):
            docs = self._docs(spec, ungrouped)
            value_list = spec.child_by_field_name("value")
            values = list(significant_children(value_list)) if value_list is not None else []
            for index, ident in enumerate(field_nodes(spec, "name")):
                name = text_of(ident)
                literal = capture_literal(values[index]) if index < len(values) else None
                if literal is None:
                    self.logger.debug("Skipping %s %s: initializer is not a literal", spec_type, name)
                    continue
                value, kind = literal
                records.append(
                    record(
                        is_exported=is_exported(name),
                        name=name,
                        type=kind,
                        value=value,
                        doc=docs.leading.doc,
                        comment=docs.trailing,
                        magic_comments=docs.leading.magic_comments,
                        generate_comments=docs.leading.generate_comments,
                    )
                )
        return records

    def _types(
        self,
        decl: Node,
        structs: Dict[str, Struct],
        type_defs: Dict[str, TypeDefinition],
        interfaces: List[Interface],
    ) -> None:
        specs = list(self._specs(decl, "type_spec")) + list(self._specs(decl, "type_alias"))
        specs.sort(key=lambda pair: pair[0].start_byte)
        for spec, ungrouped in specs:
            name = text_of(spec.child_by_field_name("name"))
            type_node = unwrap(spec.child_by_field_name("type"))
            kind = type_node.type if type_node is not None else None
            docs = self._docs(spec, ungrouped)
            if kind == STRUCT:
                structs[name] = Struct(
                    is_exported=is_exported(name),
                    name=name,
                    doc=docs.leading.doc,
                    comment=docs.trailing,
                    magic_comments=docs.leading.magic_comments,
                    generate_comments=docs.leading.generate_comments,
                    fields=self._struct_fields(type_node),
                )
            elif kind == INTERFACE:
                interfaces.append(
                    Interface(
                        is_exported=is_exported(name),
                        name=name,
                        doc=docs.leading.doc,
                        comment=docs.trailing,
                        method_set=self._method_set(type_node),
                        magic_comments=docs.leading.magic_comments,
                        generate_comments=docs.leading.generate_comments,
                    )
                )
            elif kind == IDENTIFIER:
                type_defs[name] = TypeDefinition(
                    is_exported=is_exported(name),
                    name=name,
                    type=text_of(type_node),
                    doc=docs.leading.doc,
                    comment=docs.trailing,
                    magic_comments=docs.leading.magic_comments,
                    generate_comments=docs.leading.generate_comments,
                )
            else:
                self.logger.debug("Skipping type %s: %s is not collected", name, kind)

    def _struct_fields(self, struct_node: Node) -> List[StructField]:
        fields: List[StructField] = []
        body = first_named(struct_node)
        if body is None:
            return fields
        for decl in significant_children(body):
            if decl.type != "field_declaration":
                continue
            docs = self._docs(decl)
            names = field_nodes(decl, "name")
            type_node = decl.child_by_field_name("type")
            if not names and has_token(decl, "*"):
                shape = normalize_pointee(type_node)
            else:
                shape = normalize_field(type_node)
            tag = text_of(decl.child_by_field_name("tag"))
            for ident in names or [None]:
                name = text_of(ident)
                fields.append(
                    StructField(
                        indirect=shape.indirect,
                        embed=ident is None,
                        is_map=shape.is_map,
                        is_exported=is_exported(name),
                        is_interface=shape.is_interface,
                        is_slice=shape.is_slice,
                        is_array=shape.is_array,
                        array_length=shape.array_length,
                        name=name,
                        doc=docs.leading.doc,
                        comment=docs.trailing,
                        magic_comments=docs.leading.magic_comments,
                        generate_comments=docs.leading.generate_comments,
                        field_type=shape.field_type,
                        tag=tag,
                    )
                )
        return fields

    def _method_set(self, iface: Node) -> List[Union[Interface, Func]]:
        method_set: List[Union[Interface, Func]] = []
        for elem in significant_children(iface):
            if elem.type in _METHOD_ELEMS:
                name = text_of(elem.child_by_field_name("name"))
                docs = self._docs(elem)
                method_set.append(
                    Func(
                        is_exported=is_exported(name),
                        name=name,
                        doc=docs.leading.doc,
                        comment=docs.trailing,
                        params=parameter_values(elem.child_by_field_name("parameters")),
                        results=parameter_values(elem.child_by_field_name("result")),
                    )
                )
            elif elem.type in _EMBED_ELEMS:
                terms = list(significant_children(elem))
                if len(terms) == 1 and terms[0].type not in _TYPE_SET_TERMS:
                    method_set.append(self._embedded(terms[0]))
                else:
                    self.logger.debug("Skipping type set element %r", type_text(elem))
            elif elem.type in (IDENTIFIER, QUALIFIED):
                method_set.append(self._embedded(elem))
        return [entry for entry in method_set if entry is not None]

    def _embedded(self, node: Node) -> Optional[Interface]:
        node = unwrap(node)
        if node is not None and node.type == IDENTIFIER:
            name = text_of(node)
            return Interface(name=name, is_exported=is_exported(name), embed=True)
        if node is not None and node.type == QUALIFIED:
            selector = text_of(node.child_by_field_name("name"))
            return Interface(name=qualified_name(node), is_exported=is_exported(selector), embed=True)
        self.logger.debug("Skipping interface element %s", node.type if node is not None else None)
        return None

    # ------------------------------------------------------------------
    # Method binding

    def _bind_methods(self, result: File, unresolved: Dict[str, List[Method]]) -> None:
        pending = dict(unresolved)
        for struct in result.structs:
            struct.methods.extend(pending.pop(struct.name, []))
        for type_def in result.type_defs:
            type_def.methods.extend(pending.pop(type_def.name, []))
        for receiver, methods in pending.items():
            self.logger.debug(
                "Receiver %s has no type in %s; recording %d method(s) on a synthetic type",
                receiver,
                result.name,
                len(methods),
            )
            result.type_defs.append(
                TypeDefinition(is_exported=is_exported(receiver), name=receiver, methods=methods)
            )


def collect_file(unit: SourceUnit) -> File:
    """Collect one parsed source unit."""
    return FileCollector().collect(unit)


__all__ = ["FileCollector", "capture_literal", "collect_file", "package_name", "receiver_type"]
