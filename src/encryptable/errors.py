class EncryptableError(Exception):
    """Base class for all errors raised by encryptable."""


class DirectiveError(EncryptableError, ValueError):
    """A structure's directives cannot be turned into encrypt/decrypt routines."""

    def __init__(
        self,
        message: str,
        *,
        structure: str | None = None,
        field: str | None = None,
        directive: str | None = None,
    ) -> None:
        self.structure = structure
        self.field = field
        self.directive = directive
        super().__init__(message)


class MissingService(DirectiveError):
    def __init__(self, structure: str) -> None:
        super().__init__(
            f"{structure}: container directive requires a non-empty 'service'",
            structure=structure,
            directive="service",
        )


class UnknownDirective(DirectiveError):
    def __init__(self, structure: str, key: str, field: str | None = None) -> None:
        where = f"{structure}.{field}" if field else structure
        super().__init__(f"{where}: unknown directive '{key}'", structure=structure, field=field, directive=key)


class UnsupportedFieldDirective(DirectiveError):
    def __init__(self, structure: str, field: str, directive: str, declared_type: str) -> None:
        super().__init__(
            f"{structure}.{field}: directive '{directive}' is not supported on fields of type {declared_type}",
            structure=structure,
            field=field,
            directive=directive,
        )


class DigestTargetConflict(DirectiveError):
    def __init__(self, structure: str, field: str, source: str) -> None:
        super().__init__(
            f"{structure}.{field}: digest target of '{source}' cannot carry an 'encrypt' directive",
            structure=structure,
            field=field,
            directive="encrypt",
        )


class DigestTargetMismatch(DirectiveError):
    def __init__(self, structure: str, field: str, source: str, declared_type: str) -> None:
        super().__init__(
            f"{structure}.{field}: digest target of '{source}' has type {declared_type}, "
            f"which cannot hold the digest of '{source}'",
            structure=structure,
            field=field,
            directive="digest",
        )


class InvalidService(DirectiveError):
    def __init__(self, structure: str, service: object) -> None:
        super().__init__(
            f"{structure}: service {service!r} must provide callable 'encrypt' and 'decrypt'",
            structure=structure,
            directive="service",
        )


class InvalidDigest(DirectiveError):
    def __init__(self, structure: str, digest: object) -> None:
        super().__init__(f"{structure}: digest {digest!r} is not callable", structure=structure, directive="digest")


class UnsupportedStructure(DirectiveError):
    def __init__(self, structure: str) -> None:
        super().__init__(
            f"{structure}: only dataclasses and pydantic models can be made encryptable",
            structure=structure,
        )


class SourceError(EncryptableError):
    """A source file could not be read or parsed."""
