from encryptable.core.directives import parse_structure
from encryptable.core.ports.services import DigestFunction, EncryptionService
from encryptable.core.synthesis import compile_routines, render_source, synthesize
from encryptable.decorator import descriptor_of, encryptable, is_encryptable
from encryptable.digest import hmac_sha256
from encryptable.errors import (
    DigestTargetConflict,
    DigestTargetMismatch,
    DirectiveError,
    EncryptableError,
    InvalidDigest,
    InvalidService,
    MissingService,
    SourceError,
    UnknownDirective,
    UnsupportedFieldDirective,
    UnsupportedStructure,
)
from encryptable.markers import Crypt
from encryptable.models import (
    DigestBinding,
    FieldDescriptor,
    GeneratedRoutine,
    Operation,
    Shape,
    StructureDescriptor,
)

__all__ = [
    "Crypt",
    "DigestBinding",
    "DigestFunction",
    "DigestTargetConflict",
    "DigestTargetMismatch",
    "DirectiveError",
    "EncryptableError",
    "EncryptionService",
    "FieldDescriptor",
    "GeneratedRoutine",
    "InvalidDigest",
    "InvalidService",
    "MissingService",
    "Operation",
    "Shape",
    "SourceError",
    "StructureDescriptor",
    "UnknownDirective",
    "UnsupportedFieldDirective",
    "UnsupportedStructure",
    "compile_routines",
    "descriptor_of",
    "encryptable",
    "hmac_sha256",
    "is_encryptable",
    "parse_structure",
    "render_source",
    "synthesize",
]
