import logging
from collections.abc import Callable
from typing import Any, TypeVar

from encryptable.core.directives import parse_structure
from encryptable.core.introspect import declare_structure
from encryptable.core.ports.services import DigestFunction, EncryptionService
from encryptable.core.synthesis import compile_routines, synthesize
from encryptable.errors import InvalidDigest, InvalidService
from encryptable.models import StructureDescriptor

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=type)


def _check_service(structure: str, service: Any) -> None:
    if not isinstance(service, EncryptionService):
        raise InvalidService(structure, service)
    if not (callable(service.encrypt) and callable(service.decrypt)):
        raise InvalidService(structure, service)


def encryptable(
    *,
    service: EncryptionService | None = None,
    digest: DigestFunction | None = None,
    strict: bool | None = None,
) -> Callable[[T], T]:
    """Class decorator that synthesizes ``encrypt()`` and ``decrypt()`` for a dataclass or pydantic model.

    Fields opt in with ``Annotated[str, Crypt("encrypt", "decrypt")]``. When ``digest`` is given,
    ``encrypt()`` also fills ``<field>_digest`` siblings with the digest of the encrypted value.
    Both routines return a new instance; exceptions raised by ``service`` or ``digest`` propagate.
    """

    def wrap(cls: T) -> T:
        declaration = declare_structure(cls, service=service, digest=digest)
        descriptor = parse_structure(declaration, strict=strict)
        _check_service(descriptor.name, service)
        if digest is not None and not callable(digest):
            raise InvalidDigest(descriptor.name, digest)

        routines = compile_routines(descriptor, service, digest)
        for name, function in routines.items():
            function.__qualname__ = f"{cls.__qualname__}.{name}"
            function.__module__ = cls.__module__
            setattr(cls, name, function)

        cls.__encryptable__ = descriptor  # type: ignore[attr-defined]
        cls.__encryptable_source__ = {r.name: r.source for r in synthesize(descriptor)}  # type: ignore[attr-defined]
        logger.debug("Attached encrypt/decrypt to %s.%s", cls.__module__, cls.__qualname__)
        return cls

    return wrap


def is_encryptable(obj: Any) -> bool:
    cls = obj if isinstance(obj, type) else type(obj)
    return isinstance(getattr(cls, "__encryptable__", None), StructureDescriptor)


def descriptor_of(obj: Any) -> StructureDescriptor:
    cls = obj if isinstance(obj, type) else type(obj)
    descriptor = getattr(cls, "__encryptable__", None)
    if not isinstance(descriptor, StructureDescriptor):
        raise TypeError(f"{cls.__qualname__} is not encryptable")
    return descriptor
