import dataclasses
import types
from collections.abc import Iterable
from typing import Annotated, Any, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel

from encryptable.errors import DirectiveError, UnsupportedStructure
from encryptable.markers import Crypt
from encryptable.models import FieldDeclaration, StructureDeclaration, TypeExpr


def _type_name(tp: Any) -> str:
    if tp is None or tp is type(None):
        return "None"
    if isinstance(tp, type):
        if tp.__module__ == "builtins":
            return tp.__name__
        return f"{tp.__module__}.{tp.__qualname__}"
    return repr(tp)


def type_expr_of(tp: Any) -> TypeExpr:
    """Reduce a runtime annotation to the ``TypeExpr`` the classifier understands."""
    origin = get_origin(tp)
    if origin is None:
        return TypeExpr(name=_type_name(tp))
    if origin is Annotated:
        return TypeExpr(name="Annotated", args=(type_expr_of(get_args(tp)[0]),))
    if origin is Union or origin is types.UnionType:
        return TypeExpr(name="Union", args=tuple(type_expr_of(arg) for arg in get_args(tp)))
    return TypeExpr(name=_type_name(origin), args=tuple(type_expr_of(arg) for arg in get_args(tp)))


def _directive_keys(marker: Crypt) -> tuple[str, ...]:
    return tuple(key if isinstance(key, str) else repr(key) for key in marker.keys)


def directives_of(metadata: Iterable[Any]) -> tuple[tuple[str, ...], ...]:
    return tuple(_directive_keys(item) for item in metadata if isinstance(item, Crypt))


def annotated_metadata(tp: Any) -> tuple[Any, ...]:
    """Metadata of every ``Annotated`` layer in ``tp``, outermost first, at any nesting depth."""
    origin = get_origin(tp)
    if origin is None:
        return ()
    args = get_args(tp)
    if origin is Annotated:
        return args[1:] + annotated_metadata(args[0])
    return tuple(item for arg in args for item in annotated_metadata(arg))


def _dataclass_fields(cls: type) -> tuple[FieldDeclaration, ...]:
    try:
        hints = get_type_hints(cls, include_extras=True)
    except NameError as exc:
        raise DirectiveError(
            f"{cls.__qualname__}: cannot resolve field annotations: {exc}", structure=cls.__qualname__
        ) from exc

    declarations = []
    for field in dataclasses.fields(cls):
        if not field.init:
            continue
        tp = hints.get(field.name, field.type)
        declarations.append(
            FieldDeclaration(
                name=field.name,
                type=type_expr_of(tp),
                directives=directives_of(annotated_metadata(tp)),
            )
        )
    return tuple(declarations)


def _model_fields(cls: type[BaseModel]) -> tuple[FieldDeclaration, ...]:
    return tuple(
        FieldDeclaration(
            name=name,
            type=type_expr_of(info.annotation),
            directives=directives_of((*info.metadata, *annotated_metadata(info.annotation))),
        )
        for name, info in cls.model_fields.items()
    )


def reference_label(obj: Any) -> str:
    """Human-readable reference for an injected service or digest callable."""
    label = getattr(obj, "__qualname__", None)
    if not isinstance(label, str):
        label = type(obj).__qualname__
    return label


def declare_structure(cls: type, *, service: Any, digest: Any = None) -> StructureDeclaration:
    """Build the raw declaration of a dataclass or pydantic model."""
    if dataclasses.is_dataclass(cls):
        fields = _dataclass_fields(cls)
    elif isinstance(cls, type) and issubclass(cls, BaseModel):
        fields = _model_fields(cls)
    else:
        raise UnsupportedStructure(getattr(cls, "__qualname__", repr(cls)))

    options: dict[str, str] = {}
    if service is not None:
        options["service"] = reference_label(service)
    if digest is not None:
        options["digest"] = reference_label(digest)
    return StructureDeclaration(name=cls.__qualname__, fields=fields, options=options)
