"""
Waypoint API: Environment Validator
===================================

What:  Applies ENV_SCHEMA to a raw environment snapshot, once, at startup.
How:   Every field is resolved independently (default, required check, pydantic
       coercion, constraint check). Failures are collected for the whole schema
       before anything is reported, so one run surfaces every problem.
Who:   Called by load_config(); nothing downstream ever sees a raw string.

Outcome:
    success → ValidatedConfig (immutable, typed, defaults applied)
    failure → ConfigValidationError with one FieldError per offending field
"""

import logging
from functools import lru_cache
from typing import Annotated, Any, Dict, Iterator, List, Literal, Mapping, Optional, Tuple

from pydantic import AnyUrl, EmailStr, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from waypoint.config.schema import ENV_SCHEMA, FieldKind, FieldSpec, FieldValue
from waypoint.exceptions import ConfigValidationError, FieldError

logger = logging.getLogger("waypoint.config")

MISSING_MESSAGE = "Field required"


class ValidatedConfig(Mapping[str, Optional[FieldValue]]):
    """
    Read-only mapping of field name → typed value.

    Every schema field is a key. Optional fields without a default that were
    absent from the environment map to None.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Optional[FieldValue]]):
        self._values: Dict[str, Optional[FieldValue]] = dict(values)

    def __getitem__(self, key: str) -> Optional[FieldValue]:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ValidatedConfig({sorted(self._values)})"

    def to_environ(self, schema: Tuple[FieldSpec, ...] = ENV_SCHEMA) -> Dict[str, str]:
        """
        Render the config back to environment-variable strings.

        Feeding the result through validate_env() yields an equal config.
        """
        rendered: Dict[str, str] = {}
        for spec in schema:
            value = self._values.get(spec.name)
            if value is None:
                continue
            text = str(value)
            if spec.render is not None:
                text = spec.render(text)
            rendered[spec.name] = text
        return rendered


@lru_cache(maxsize=None)
def _adapter_for(spec: FieldSpec) -> TypeAdapter:
    if spec.kind is FieldKind.NUMBER:
        return TypeAdapter(Annotated[int, Field(gt=0, le=spec.maximum)])
    if spec.kind is FieldKind.ENUM:
        return TypeAdapter(Literal[spec.choices])
    if spec.kind is FieldKind.URL:
        return TypeAdapter(AnyUrl)
    if spec.kind is FieldKind.EMAIL:
        return TypeAdapter(EmailStr)
    if spec.min_length is not None:
        return TypeAdapter(Annotated[str, Field(min_length=spec.min_length)])
    return TypeAdapter(str)


def coerce_field(spec: FieldSpec, raw: str) -> FieldValue:
    """
    Coerce one raw string according to its descriptor.

    Raises pydantic's ValidationError on failure. URL and email values are
    checked but returned exactly as given, so database URLs reach the ORM
    unchanged.
    """
    coerced = _adapter_for(spec).validate_python(raw)
    if spec.kind is FieldKind.NUMBER:
        value: FieldValue = coerced
    elif spec.kind in (FieldKind.URL, FieldKind.EMAIL):
        value = raw
    else:
        value = str(coerced)
    if spec.transform is not None and isinstance(value, str):
        value = spec.transform(value)
    return value


def _first_message(exc: PydanticValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    return errors[0]["msg"]


def validate_env(
    raw: Mapping[str, Any],
    schema: Tuple[FieldSpec, ...] = ENV_SCHEMA,
) -> ValidatedConfig:
    """
    Validate a raw environment mapping against the schema.

    Args:
        raw:     Variable name → raw value. A key that is absent is "missing";
                 an empty string is a present (and usually invalid) value.
        schema:  Ordered field descriptors (defaults to ENV_SCHEMA).

    Returns:
        ValidatedConfig holding every schema field.

    Raises:
        ConfigValidationError: if any field failed. All failures are reported
        together, in schema order.
    """
    values: Dict[str, Optional[FieldValue]] = {}
    errors: List[FieldError] = []

    for spec in schema:
        if spec.name not in raw or raw[spec.name] is None:
            if spec.required:
                errors.append(FieldError(spec.name, MISSING_MESSAGE))
            else:
                values[spec.name] = spec.default
            continue

        try:
            values[spec.name] = coerce_field(spec, str(raw[spec.name]))
        except PydanticValidationError as exc:
            errors.append(FieldError(spec.name, _first_message(exc)))

    if errors:
        raise ConfigValidationError(errors)

    logger.info("Environment variables validated successfully")
    return ValidatedConfig(values)
