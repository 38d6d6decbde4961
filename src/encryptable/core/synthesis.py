import logging
from collections.abc import Callable
from typing import Any

from encryptable.core.ports.services import DigestFunction
from encryptable.models import (
    DigestBinding,
    FieldDescriptor,
    GeneratedRoutine,
    Operation,
    Shape,
    StructureDescriptor,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "__encryptable_service__"
DIGEST_NAME = "__encryptable_digest__"

_INDENT = "    "


def _local(name: str) -> str:
    # Prefixing keeps locals clear of ``self`` and of names used by the service/digest references.
    return f"_{name}"


def _transform_lines(field: FieldDescriptor, operation: Operation, service_ref: str) -> list[str]:
    name = field.name
    local = _local(name)
    call = f"{service_ref}.{operation.value}"

    if field.shape is Shape.PLAIN:
        return [
            f"{local} = self.{name}",
            f'if {local} != "":',
            f"{_INDENT}{local} = {call}({local})",
        ]
    if field.shape is Shape.OPTIONAL:
        return [
            f"{local} = self.{name}",
            f'if {local} is not None and {local} != "":',
            f"{_INDENT}{local} = {call}({local})",
        ]
    if field.shape is Shape.LIST:
        return [f'{local} = [{call}(item) if item != "" else item for item in self.{name}]']
    raise ValueError(f"Cannot transform field '{name}' of shape {field.shape.value}")


def _digest_lines(binding: DigestBinding, digest_ref: str) -> list[str]:
    source = _local(binding.source.name)
    target = _local(binding.target)

    if binding.source.shape is Shape.OPTIONAL:
        return [
            f"{target} = self.{binding.target}",
            f"if {source} is not None:",
            f"{_INDENT}{target} = {digest_ref}({source})",
        ]
    if binding.source.shape is Shape.LIST:
        return [f"{target} = [{digest_ref}(item) for item in {source}]"]
    return [f"{target} = {digest_ref}({source})"]


def _render_routine(
    descriptor: StructureDescriptor,
    operation: Operation,
    service_ref: str,
    digest_ref: str | None,
) -> GeneratedRoutine:
    body: list[str] = []
    assigned: set[str] = set()

    for field in descriptor.fields:
        if field.applies(operation):
            body.extend(_transform_lines(field, operation, service_ref))
            assigned.add(field.name)

    if operation is Operation.ENCRYPT and digest_ref is not None:
        for binding in descriptor.digest_bindings:
            body.extend(_digest_lines(binding, digest_ref))
            assigned.add(binding.target)

    arguments = [
        f"{field.name}={_local(field.name) if field.name in assigned else f'self.{field.name}'},"
        for field in descriptor.fields
    ]
    if arguments:
        body.append("return self.__class__(")
        body.extend(f"{_INDENT}{argument}" for argument in arguments)
        body.append(")")
    else:
        body.append("return self.__class__()")

    lines = [f"def {operation.value}(self):"]
    lines.extend(f"{_INDENT}{line}" for line in body)
    return GeneratedRoutine(name=operation.value, source="\n".join(lines) + "\n")


def synthesize(
    descriptor: StructureDescriptor,
    *,
    service_ref: str | None = None,
    digest_ref: str | None = None,
) -> tuple[GeneratedRoutine, GeneratedRoutine]:
    """Emit the ``encrypt`` and ``decrypt`` routines for ``descriptor``.

    ``service_ref`` and ``digest_ref`` are the expressions the generated code calls; they
    default to the references recorded in the descriptor. Digest population only happens
    in ``encrypt``, after every field has been transformed.
    """
    service = service_ref or descriptor.service
    digest = (digest_ref or descriptor.digest) if descriptor.digest is not None else None

    encrypt = _render_routine(descriptor, Operation.ENCRYPT, service, digest)
    decrypt = _render_routine(descriptor, Operation.DECRYPT, service, None)
    logger.debug(
        "Synthesized routines for %s (%d fields, %d digest bindings)",
        descriptor.name,
        len(descriptor.fields),
        len(descriptor.digest_bindings),
    )
    return encrypt, decrypt


def compile_routines(
    descriptor: StructureDescriptor,
    service: Any,
    digest: DigestFunction | None = None,
) -> dict[str, Callable[..., Any]]:
    """Compile the synthesized routines with ``service`` and ``digest`` bound as globals."""
    routines = synthesize(descriptor, service_ref=SERVICE_NAME, digest_ref=DIGEST_NAME)
    namespace: dict[str, Any] = {SERVICE_NAME: service, DIGEST_NAME: digest}
    compiled: dict[str, Callable[..., Any]] = {}
    for routine in routines:
        code = compile(routine.source, f"<encryptable {descriptor.name}.{routine.name}>", "exec")
        exec(code, namespace)  # noqa: S102
        compiled[routine.name] = namespace[routine.name]
    return compiled


def render_source(descriptor: StructureDescriptor) -> str:
    """Generated routines for ``descriptor`` as one source block, for display."""
    encrypt, decrypt = synthesize(descriptor)
    header = f"# {descriptor.name}: service={descriptor.service}"
    if descriptor.digest is not None:
        header += f", digest={descriptor.digest}"
    return f"{header}\n{encrypt.source}\n{decrypt.source}"
