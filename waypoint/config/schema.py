"""
Waypoint API: Environment Schema
================================

What:  Declares every environment variable the server recognizes.
How:   A plain ordered tuple of FieldSpec descriptors. The validator walks it
       in order, so error reports list fields in the same order as below.
When:  Defined at import time; never mutated.

Field kinds:
    string  → str, optional minimum length
    number  → strictly positive int, coerced from the raw string, optional maximum
    enum    → str, must be one of `choices`
    url     → str, must parse as an absolute URL (kept verbatim)
    email   → str, must be a syntactically valid address (kept verbatim)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple, Union


class FieldKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    ENUM = "enum"
    URL = "url"
    EMAIL = "email"


FieldValue = Union[str, int]


def unescape_newlines(value: str) -> str:
    """Turn literal backslash-n pairs into real newlines (PEM keys in env vars)."""
    return value.replace("\\n", "\n")


def escape_newlines(value: str) -> str:
    """Inverse of unescape_newlines, used when rendering config back to env form."""
    return value.replace("\n", "\\n")


@dataclass(frozen=True)
class FieldSpec:
    """
    Descriptor for a single environment variable.

    Attributes:
        name:        Variable name, also used as the field path in error reports
        kind:        Expected primitive shape (see FieldKind)
        required:    Absent + required → "Field required" error
        default:     Substituted when the variable is absent
        min_length:  Minimum length for string kinds
        maximum:     Inclusive upper bound for number kinds
        choices:     Allowed members for enum kinds
        transform:   Applied to the coerced value after validation succeeds
        render:      Inverse of `transform`, used by ValidatedConfig.to_environ()
    """

    name: str
    kind: FieldKind = FieldKind.STRING
    required: bool = True
    default: Optional[FieldValue] = None
    min_length: Optional[int] = None
    maximum: Optional[int] = None
    choices: Tuple[str, ...] = ()
    transform: Optional[Callable[[str], str]] = None
    render: Optional[Callable[[str], str]] = None

    def __post_init__(self) -> None:
        if self.kind is FieldKind.ENUM and not self.choices:
            raise ValueError(f"Enum field {self.name} declares no choices")
        if self.required and self.default is not None:
            raise ValueError(f"Required field {self.name} cannot declare a default")


ENVIRONMENTS = ("development", "production", "test")

DEFAULT_CORS_ORIGINS = "http://localhost:3001,http://localhost:8081"

MAX_PORT = 65535

ENV_SCHEMA: Tuple[FieldSpec, ...] = (
    # ── Server ────────────────────────────────────────────────────────────
    FieldSpec(
        "NODE_ENV",
        FieldKind.ENUM,
        required=False,
        default="development",
        choices=ENVIRONMENTS,
    ),
    FieldSpec("PORT", FieldKind.NUMBER, required=False, default=3000, maximum=MAX_PORT),
    FieldSpec("CORS_ORIGINS", required=False, default=DEFAULT_CORS_ORIGINS),

    # ── Database (PostgreSQL) ─────────────────────────────────────────────
    # DATABASE_URL is the pooled connection; DATABASE_URL_DIRECT bypasses
    # the pooler and is what migrations connect through.
    FieldSpec("DATABASE_URL", FieldKind.URL),
    FieldSpec("DATABASE_URL_DIRECT", FieldKind.URL),

    # ── Cache (Redis) ─────────────────────────────────────────────────────
    FieldSpec("REDIS_URL", required=False),

    # ── Identity provider (Firebase Admin SDK) ────────────────────────────
    FieldSpec("FIREBASE_PROJECT_ID", min_length=1),
    FieldSpec(
        "FIREBASE_PRIVATE_KEY",
        min_length=1,
        transform=unescape_newlines,
        render=escape_newlines,
    ),
    FieldSpec("FIREBASE_CLIENT_EMAIL", FieldKind.EMAIL),

    # ── Token signing (JWT) ───────────────────────────────────────────────
    FieldSpec("JWT_SECRET", min_length=32),
    FieldSpec("JWT_EXPIRES_IN", required=False, default="15m"),

    # ── Media storage (Cloudinary) ────────────────────────────────────────
    FieldSpec("CLOUDINARY_CLOUD_NAME", min_length=1),
    FieldSpec("CLOUDINARY_API_KEY", min_length=1),
    FieldSpec("CLOUDINARY_API_SECRET", min_length=1),

    # ── Mapping service (Goong Maps) ──────────────────────────────────────
    FieldSpec("GOONG_API_KEY", min_length=1),

    # ── Rate limiting ─────────────────────────────────────────────────────
    # THROTTLE_TTL is the window length in milliseconds.
    FieldSpec("THROTTLE_TTL", FieldKind.NUMBER, required=False, default=60000),
    FieldSpec("THROTTLE_LIMIT", FieldKind.NUMBER, required=False, default=100),
)


def required_fields(schema: Tuple[FieldSpec, ...] = ENV_SCHEMA) -> Tuple[str, ...]:
    return tuple(spec.name for spec in schema if spec.required)
