import logging

from encryptable.config import resolve_strict
from encryptable.core.classifier import classify_shape, declared_field_names, has_digest_sibling
from encryptable.errors import (
    DigestTargetConflict,
    DigestTargetMismatch,
    MissingService,
    UnknownDirective,
    UnsupportedFieldDirective,
)
from encryptable.models import (
    FieldDeclaration,
    FieldDescriptor,
    Operation,
    Shape,
    StructureDeclaration,
    StructureDescriptor,
)

logger = logging.getLogger(__name__)

CONTAINER_KEYS = frozenset({"service", "digest", "strict"})
FIELD_KEYS = frozenset(op.value for op in Operation)

# Sibling shapes able to receive a source's digest: one text digest, or one per list element.
_DIGEST_TARGET_SHAPES = {
    Shape.PLAIN: frozenset({Shape.PLAIN, Shape.OPTIONAL}),
    Shape.OPTIONAL: frozenset({Shape.PLAIN, Shape.OPTIONAL}),
    Shape.LIST: frozenset({Shape.LIST}),
}


def parse_operations(structure: str, field: FieldDeclaration) -> frozenset[Operation]:
    """Merge every directive attached to ``field`` into a set of operations.

    Keys are validated before anything else so a typo never silently disables encryption.
    """
    operations: set[Operation] = set()
    for directive in field.directives:
        for key in directive:
            if key not in FIELD_KEYS:
                raise UnknownDirective(structure, key, field=field.name)
            operations.add(Operation(key))
    return frozenset(operations)


def _parse_strict(declaration: StructureDeclaration) -> bool | None:
    value = declaration.options.get("strict")
    if value is None:
        return None
    if value.strip() not in ("True", "False"):
        raise UnknownDirective(declaration.name, f"strict={value}")
    return value.strip() == "True"


def _parse_options(declaration: StructureDeclaration) -> tuple[str, str | None]:
    for key in declaration.options:
        if key not in CONTAINER_KEYS:
            raise UnknownDirective(declaration.name, key)

    service = declaration.options.get("service", "").strip()
    if not service:
        raise MissingService(declaration.name)

    digest = declaration.options.get("digest")
    if digest is not None:
        digest = digest.strip() or None
    return service, digest


def _describe_field(
    structure: str,
    field: FieldDeclaration,
    field_names: set[str],
    digest_configured: bool,
    strict: bool,
) -> FieldDescriptor:
    operations = parse_operations(structure, field)
    shape = classify_shape(field.type)

    if shape is Shape.UNSUPPORTED and operations:
        first = sorted(op.value for op in operations)[0]
        if strict:
            raise UnsupportedFieldDirective(structure, field.name, first, str(field.type))
        logger.warning(
            "%s.%s: ignoring %s directive on unsupported type %s; field is copied unchanged",
            structure,
            field.name,
            "/".join(sorted(op.value for op in operations)),
            field.type,
        )

    return FieldDescriptor(
        name=field.name,
        shape=shape,
        operations=operations,
        has_digest_sibling=has_digest_sibling(field.name, shape, operations, field_names, digest_configured),
    )


def parse_structure(declaration: StructureDeclaration, *, strict: bool | None = None) -> StructureDescriptor:
    """Validate ``declaration`` and build its descriptor; any error aborts the whole structure."""
    service, digest = _parse_options(declaration)
    field_names = declared_field_names(declaration.fields)
    strict_mode = resolve_strict(strict if strict is not None else _parse_strict(declaration))

    fields = tuple(
        _describe_field(declaration.name, field, field_names, digest is not None, strict_mode)
        for field in declaration.fields
    )

    by_name = {f.name: f for f in fields}
    types = {f.name: f.type for f in declaration.fields}
    for source in fields:
        if not source.has_digest_sibling:
            continue
        target = by_name[source.digest_target]
        if Operation.ENCRYPT in target.operations:
            raise DigestTargetConflict(declaration.name, target.name, source.name)
        if target.shape not in _DIGEST_TARGET_SHAPES[source.shape]:
            raise DigestTargetMismatch(declaration.name, target.name, source.name, str(types[target.name]))

    return StructureDescriptor(name=declaration.name, fields=fields, service=service, digest=digest)
