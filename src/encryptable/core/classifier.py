from encryptable.models import FieldDeclaration, Operation, Shape, TypeExpr

_TEXT = {"str", "builtins.str"}
_NONE = {"None", "NoneType", "types.NoneType"}
_LIST = {"list", "builtins.list"}


def _tail(name: str) -> str:
    return name.rsplit(".", 1)[-1]


def unwrap_annotated(type_expr: TypeExpr) -> TypeExpr:
    while _tail(type_expr.name) == "Annotated" and type_expr.args:
        type_expr = type_expr.args[0]
    return type_expr


def _is_text(type_expr: TypeExpr) -> bool:
    type_expr = unwrap_annotated(type_expr)
    return type_expr.name in _TEXT and not type_expr.args


def _is_none(type_expr: TypeExpr) -> bool:
    return unwrap_annotated(type_expr).name in _NONE


def classify_shape(type_expr: TypeExpr) -> Shape:
    """Map a declared type onto the shape that drives synthesis.

    Only text values are transformable: ``str``, ``str | None`` (in any of its spellings)
    and ``list[str]``. Every other declaration is ``UNSUPPORTED`` and gets copied through.
    """
    type_expr = unwrap_annotated(type_expr)
    name, args = type_expr.name, type_expr.args

    if _is_text(type_expr):
        return Shape.PLAIN
    if _tail(name) == "Optional" and len(args) == 1 and _is_text(args[0]):
        return Shape.OPTIONAL
    if _tail(name) in ("Union", "UnionType") and len(args) == 2:
        if any(_is_none(arg) for arg in args) and any(_is_text(arg) for arg in args):
            return Shape.OPTIONAL
    if (name in _LIST or _tail(name) == "List") and len(args) == 1 and _is_text(args[0]):
        return Shape.LIST
    return Shape.UNSUPPORTED


def has_digest_sibling(
    name: str,
    shape: Shape,
    operations: frozenset[Operation],
    field_names: set[str],
    digest_configured: bool,
) -> bool:
    return (
        digest_configured
        and shape is not Shape.UNSUPPORTED
        and Operation.ENCRYPT in operations
        and f"{name}_digest" in field_names
    )


def declared_field_names(fields: tuple[FieldDeclaration, ...]) -> set[str]:
    return {f.name for f in fields}
