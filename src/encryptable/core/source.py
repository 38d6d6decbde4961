from collections.abc import Iterator
from pathlib import Path
from typing import cast

from tree_sitter import Node, Parser
from tree_sitter_language_pack import SupportedLanguage, get_parser

from encryptable.core.classifier import unwrap_annotated
from encryptable.errors import SourceError, UnknownDirective
from encryptable.models import FieldDeclaration, StructureDeclaration, TypeExpr

_DECORATOR_NAME = "encryptable"
_MARKER_NAME = "Crypt"
_SKIPPED_ANNOTATIONS = {"ClassVar", "InitVar"}
_WRAPPERS = {"type", "parenthesized_expression"}

# A ``Crypt(...)`` call node together with the source bytes it was parsed from.
Marker = tuple[Node, bytes]


def _parser() -> Parser:
    return get_parser(cast(SupportedLanguage, "python"))


def _tail(name: str) -> str:
    return name.rsplit(".", 1)[-1]


def _text(node: Node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8")


def _walk(node: Node) -> Iterator[Node]:
    yield node
    for child in node.children:
        yield from _walk(child)


def _unwrap(node: Node) -> Node:
    while node.type in _WRAPPERS and node.named_children:
        node = node.named_children[0]
    return node


def _string_value(node: Node, source: bytes) -> str | None:
    """Value of a plain string literal node, or None for f-strings, bytes and concatenations."""
    if node.type != "string":
        return None
    if any(child.type == "interpolation" for child in node.children):
        return None
    start = next((child for child in node.children if child.type == "string_start"), None)
    if start is not None:
        if any(ch in "fFbB" for ch in _text(start, source)):
            return None
        return "".join(_text(child, source) for child in node.children if child.type == "string_content")
    text = _text(node, source)
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        return text[1:-1]
    return None


def _annotation_node(text: str) -> tuple[Node, bytes] | None:
    """Parse annotation ``text`` on its own and return its ``type`` node."""
    source = f"_: {text}\n".encode()
    tree = _parser().parse(source)
    if tree.root_node.has_error or not tree.root_node.named_children:
        return None
    statement = tree.root_node.named_children[0]
    assignment = statement.named_children[0] if statement.named_children else None
    if assignment is None or assignment.type != "assignment":
        return None
    annotation = assignment.child_by_field_name("type")
    return None if annotation is None else (annotation, source)


def _union_members(node: Node, source: bytes) -> list[Node]:
    node = _unwrap(node)
    if node.type == "union_type":
        return [member for child in node.named_children for member in _union_members(child, source)]
    if node.type == "binary_operator":
        operator = node.child_by_field_name("operator")
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        if operator is not None and _text(operator, source) == "|" and left is not None and right is not None:
            return _union_members(left, source) + _union_members(right, source)
    return [node]


def _generic_parts(node: Node) -> tuple[Node, list[Node]] | None:
    if node.type == "generic_type" and len(node.named_children) == 2:
        head, parameters = node.named_children
        return head, list(parameters.named_children)
    if node.type == "subscript":
        value = node.child_by_field_name("value")
        if value is not None:
            return value, list(node.children_by_field_name("subscript"))
    return None


def _is_marker(node: Node, source: bytes) -> bool:
    if node.type != "call":
        return False
    function = node.child_by_field_name("function")
    return function is not None and _tail(_text(function, source)) == _MARKER_NAME


def type_expr_of_node(node: Node, source: bytes, markers: list[Marker]) -> TypeExpr:
    """Convert an annotation node into a ``TypeExpr``.

    Every ``Crypt(...)`` found in ``Annotated[...]`` metadata, at any depth of the annotation,
    is appended to ``markers``.
    """
    node = _unwrap(node)

    if node.type == "none":
        return TypeExpr(name="None")

    if node.type == "string":
        value = _string_value(node, source)
        parsed = _annotation_node(value) if value is not None else None
        if parsed is None:
            return TypeExpr(name=_text(node, source))
        return type_expr_of_node(parsed[0], parsed[1], markers)

    members = _union_members(node, source)
    if len(members) > 1:
        return TypeExpr(name="Union", args=tuple(type_expr_of_node(m, source, markers) for m in members))

    generic = _generic_parts(node)
    if generic is not None:
        head, arguments = generic
        name = _text(head, source)
        if _tail(name) == "Annotated" and arguments:
            base = type_expr_of_node(arguments[0], source, markers)
            for metadata in arguments[1:]:
                metadata = _unwrap(metadata)
                if _is_marker(metadata, source):
                    markers.append((metadata, source))
            return TypeExpr(name="Annotated", args=(base,))
        return TypeExpr(name=name, args=tuple(type_expr_of_node(arg, source, markers) for arg in arguments))

    return TypeExpr(name=_text(node, source))


def parse_type_text(text: str) -> TypeExpr:
    """``TypeExpr`` of a standalone annotation such as ``"Optional[str]"``."""
    parsed = _annotation_node(text)
    if parsed is None:
        raise SourceError(f"Cannot parse annotation: {text}")
    return type_expr_of_node(parsed[0], parsed[1], [])


def _directive_keys(structure: str, field: str, marker: Marker) -> tuple[str, ...]:
    call, source = marker
    arguments = call.child_by_field_name("arguments")
    keys = []
    for argument in arguments.named_children if arguments is not None else []:
        if argument.type == "comment":
            continue
        value = _string_value(argument, source)
        if value is None:
            raise UnknownDirective(structure, _text(argument, source), field=field)
        keys.append(value)
    return tuple(keys)


def _container_options(structure: str, decorator: Node, source: bytes) -> dict[str, str] | None:
    """Options of an ``@encryptable(...)`` decorator, or None for any other decorator."""
    expression = decorator.named_children[0] if decorator.named_children else None
    if expression is None:
        return None

    if expression.type in ("identifier", "attribute"):
        return {} if _tail(_text(expression, source)) == _DECORATOR_NAME else None
    if expression.type != "call":
        return None

    function = expression.child_by_field_name("function")
    if function is None or _tail(_text(function, source)) != _DECORATOR_NAME:
        return None

    options: dict[str, str] = {}
    arguments = expression.child_by_field_name("arguments")
    for argument in arguments.named_children if arguments is not None else []:
        if argument.type == "comment":
            continue
        if argument.type != "keyword_argument":
            raise UnknownDirective(structure, _text(argument, source))
        name = argument.child_by_field_name("name")
        value = argument.child_by_field_name("value")
        if name is None or value is None:
            raise UnknownDirective(structure, _text(argument, source))
        options[_text(name, source)] = _text(value, source)
    return options


def _class_fields(structure: str, body: Node, source: bytes) -> tuple[FieldDeclaration, ...]:
    fields = []
    for statement in body.named_children:
        if statement.type != "expression_statement" or not statement.named_children:
            continue
        assignment = statement.named_children[0]
        if assignment.type != "assignment":
            continue
        left = assignment.child_by_field_name("left")
        annotation = assignment.child_by_field_name("type")
        if left is None or annotation is None or left.type != "identifier":
            continue

        markers: list[Marker] = []
        type_expr = type_expr_of_node(annotation, source, markers)
        if _tail(unwrap_annotated(type_expr).name) in _SKIPPED_ANNOTATIONS:
            continue

        name = _text(left, source)
        fields.append(
            FieldDeclaration(
                name=name,
                type=type_expr,
                directives=tuple(_directive_keys(structure, name, marker) for marker in markers),
            )
        )
    return tuple(fields)


def read_structures(source: bytes) -> list[StructureDeclaration]:
    """Find every ``@encryptable``-decorated class in Python ``source``, in source order."""
    try:
        source.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise SourceError(f"Source is not valid UTF-8: {exc.reason} at byte {exc.start}") from exc

    tree = _parser().parse(source)
    if tree.root_node.has_error:
        raise SourceError("Source contains syntax errors")

    structures = []
    for node in _walk(tree.root_node):
        if node.type != "decorated_definition":
            continue
        definition = node.child_by_field_name("definition")
        if definition is None or definition.type != "class_definition":
            continue
        name_node = definition.child_by_field_name("name")
        body = definition.child_by_field_name("body")
        if name_node is None or body is None:
            continue

        name = _text(name_node, source)
        options = None
        for decorator in node.children:
            if decorator.type == "decorator":
                options = _container_options(name, decorator, source)
                if options is not None:
                    break
        if options is None:
            continue

        structures.append(StructureDeclaration(name=name, fields=_class_fields(name, body, source), options=options))
    return structures


def read_structures_from_file(path: str | Path) -> list[StructureDeclaration]:
    file_path = Path(path)
    try:
        source_bytes = file_path.read_bytes()
    except FileNotFoundError:
        raise SourceError(f"File not found: {path}") from None
    except OSError as exc:
        raise SourceError(f"Cannot read {path}: {exc.strerror or exc}") from exc
    return read_structures(source_bytes)
