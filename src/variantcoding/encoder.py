# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Encoder engine: variant values to document trees.

Encoding happens in two steps. The case's payload is rendered first from its
field shape alone (:func:`render_payload`), then the configured case keying
wraps or tags it (:func:`apply_case_keying`). Field values recurse through
:func:`encode_value`, which follows the field annotations recorded in the
schema and reuses the same configuration for the whole call tree.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping, Sequence
from enum import Enum
from typing import Literal, cast, get_args, get_origin

from ._annotations import (
    dataclass_field_types,
    is_none_type,
    is_passthrough,
    strip_annotated,
    type_name,
    union_members,
)
from .dbc import ensure, pure, require
from .errors import (
    ConfigurationConflictError,
    DiscriminatorCollisionError,
    SchemaMismatchError,
    VariantCodingError,
)
from .logging import StructuredLogger, get_logger
from .schema import (
    CaseDescriptor,
    FieldPair,
    LabeledFields,
    NoFields,
    SingleUnlabeledField,
    VariantSchema,
    schema_for,
)
from .strategies import (
    DEFAULT_CONFIGURATION,
    SINGLE_VALUE_KEY,
    BooleanMarker,
    CaseStrategy,
    Discriminator,
    FlattenUnlabeled,
    KeyedByCase,
    StrategyConfiguration,
)
from .types import ContractResult, JSONObject, JSONValue, is_json_value

logger: StructuredLogger = get_logger(__name__, context={"component": "encoder"})

_NOT_HANDLED = object()


def _produces_document(*args: object, result: object, **kwargs: object) -> bool:
    return is_json_value(result)


@ensure(_produces_document)
def encode(
    value: object,
    schema: VariantSchema,
    config: StrategyConfiguration | None = None,
) -> JSONObject:
    """Encode a variant ``value`` described by ``schema`` into a document tree."""

    resolved = config if config is not None else DEFAULT_CONFIGURATION
    log = logger.bind(schema=schema.name)
    try:
        case = schema.case_of(value)
        document = encode_case(
            case, schema.fields_of(value), resolved, path=f"{schema.name}.{case.name}"
        )
    except VariantCodingError as error:
        log.debug(
            "variant.encode_failed",
            event="variant.encode_failed",
            context={"error": type(error).__name__, "path": error.path},
        )
        raise
    log.debug(
        "variant.encode",
        event="variant.encode",
        context={
            "case": case.name,
            "case_encoding": repr(resolved.case_encoding),
        },
    )
    return document


def _field_pairs(
    case: CaseDescriptor, fields: Sequence[FieldPair], *args: object, **kwargs: object
) -> ContractResult:
    for pair in fields:
        if not (
            isinstance(pair, tuple)
            and len(pair) == 2
            and (pair[0] is None or isinstance(pair[0], str))
        ):
            return False, f"field pairs must be (name or None, value) tuples, got {pair!r}"
    return True


@require(_field_pairs)
def encode_case(
    case: CaseDescriptor,
    fields: Sequence[FieldPair],
    config: StrategyConfiguration | None = None,
    *,
    path: str | None = None,
) -> JSONObject:
    """Encode one case from its ``(name, value)`` field pairs."""

    resolved = config if config is not None else DEFAULT_CONFIGURATION
    path = path if path is not None else case.name
    payload = render_payload(case, tuple(fields), resolved, path)
    return apply_case_keying(case.name, payload, resolved.case_encoding, path)


@pure
def render_payload(
    case: CaseDescriptor,
    fields: tuple[FieldPair, ...],
    config: StrategyConfiguration,
    path: str,
) -> JSONValue:
    """Render the payload of ``case`` independently of case keying."""

    match case.shape:
        case NoFields():
            if fields:
                raise SchemaMismatchError(
                    "case takes no fields", path=path, case=case.name
                )
            if isinstance(config.no_value_encoding, BooleanMarker):
                return config.no_value_encoding.value
            return {}
        case SingleUnlabeledField(annotation=annotation):
            if len(fields) != 1 or fields[0][0] is not None:
                raise SchemaMismatchError(
                    "case takes exactly one unlabeled field", path=path, case=case.name
                )
            if isinstance(config.single_value_encoding, FlattenUnlabeled):
                encoded = encode_value(fields[0][1], annotation, config, path)
                if _is_single_value_wrapper(encoded):
                    raise ConfigurationConflictError(
                        f"flattened value of case {case.name!r} would read as a "
                        f"{SINGLE_VALUE_KEY!r} wrapper",
                        path=path,
                        case=case.name,
                        key=SINGLE_VALUE_KEY,
                    )
                return encoded
            return {
                SINGLE_VALUE_KEY: encode_value(
                    fields[0][1], annotation, config, f"{path}.{SINGLE_VALUE_KEY}"
                )
            }
        case LabeledFields() as shape:
            return _render_labeled(case, shape, fields, config, path)


def _is_single_value_wrapper(encoded: JSONValue) -> bool:
    return isinstance(encoded, Mapping) and set(encoded) == {SINGLE_VALUE_KEY}


def _render_labeled(
    case: CaseDescriptor,
    shape: LabeledFields,
    fields: tuple[FieldPair, ...],
    config: StrategyConfiguration,
    path: str,
) -> dict[str, JSONValue]:
    provided: dict[str, object] = {}
    for name, value in fields:
        if name is None or name not in shape.names:
            raise SchemaMismatchError(
                f"unexpected field {name!r}", path=path, case=case.name, key=name
            )
        provided[name] = value
    payload: dict[str, JSONValue] = {}
    for spec in shape.fields:
        if spec.name not in provided:
            raise SchemaMismatchError(
                f"missing value for field {spec.name!r}",
                path=path,
                case=case.name,
                key=spec.name,
            )
        payload[spec.name] = encode_value(
            provided[spec.name], spec.annotation, config, f"{path}.{spec.name}"
        )
    return payload


@pure
def apply_case_keying(
    case_name: str, payload: JSONValue, strategy: CaseStrategy, path: str
) -> JSONObject:
    """Wrap or tag a rendered payload with the case name."""

    match strategy:
        case KeyedByCase():
            return {case_name: payload}
        case Discriminator(key=key):
            if not isinstance(payload, Mapping):
                raise ConfigurationConflictError(
                    f"payload of case {case_name!r} is not an object and cannot "
                    f"carry discriminator {key!r}",
                    path=path,
                    case=case_name,
                    key=key,
                )
            entries = cast(Mapping[str, JSONValue], payload)
            if key in entries:
                raise DiscriminatorCollisionError(
                    f"payload of case {case_name!r} already has an entry {key!r}",
                    path=path,
                    case=case_name,
                    key=key,
                )
            return {key: case_name, **entries}
    raise ConfigurationConflictError(  # pragma: no cover - guarded by configuration
        f"unsupported case strategy {strategy!r}", path=path, case=case_name
    )


def encode_value(
    value: object,
    annotation: object,
    config: StrategyConfiguration,
    path: str,
) -> JSONValue:
    """Encode a field value according to its annotation."""

    base = strip_annotated(annotation)
    for handler in _VALUE_ENCODERS:
        result = handler(value, base, config, path)
        if result is not _NOT_HANDLED:
            return cast(JSONValue, result)
    raise SchemaMismatchError(f"unsupported annotation {type_name(base)}", path=path)


def _mismatch(value: object, base: object, path: str) -> SchemaMismatchError:
    return SchemaMismatchError(
        f"expected {type_name(base)}, got {type(value).__name__}", path=path
    )


def _encode_passthrough(
    value: object, base: object, config: StrategyConfiguration, path: str
) -> object:
    if not is_passthrough(base):
        return _NOT_HANDLED
    if not is_json_value(value):
        raise SchemaMismatchError(
            f"{type(value).__name__} is not a document value", path=path
        )
    return value


def _encode_none(
    value: object, base: object, config: StrategyConfiguration, path: str
) -> object:
    if not is_none_type(base):
        return _NOT_HANDLED
    if value is not None:
        raise _mismatch(value, base, path)
    return None


def _encode_union(
    value: object, base: object, config: StrategyConfiguration, path: str
) -> object:
    members = union_members(base)
    if members is None:
        return _NOT_HANDLED
    if value is None and any(is_none_type(member) for member in members):
        return None
    last_error: VariantCodingError | None = None
    for member in members:
        if is_none_type(member):
            continue
        try:
            return encode_value(value, member, config, path)
        except VariantCodingError as error:
            last_error = error
    raise SchemaMismatchError(
        f"{type(value).__name__} matches no member of {type_name(base)}", path=path
    ) from last_error


def _encode_variant(
    value: object, base: object, config: StrategyConfiguration, path: str
) -> object:
    schema = schema_for(base)
    if schema is None:
        return _NOT_HANDLED
    case = schema.case_of(value)
    return encode_case(case, schema.fields_of(value), config, path=f"{path}.{case.name}")


def _encode_literal(
    value: object, base: object, config: StrategyConfiguration, path: str
) -> object:
    if get_origin(base) is not Literal:
        return _NOT_HANDLED
    if value not in get_args(base):
        raise SchemaMismatchError(
            f"expected one of {list(get_args(base))}, got {value!r}", path=path
        )
    return value


def _encode_enum(
    value: object, base: object, config: StrategyConfiguration, path: str
) -> object:
    if not (isinstance(base, type) and issubclass(base, Enum)):
        return _NOT_HANDLED
    if not isinstance(value, base):
        raise _mismatch(value, base, path)
    return value.value


def _encode_primitive(
    value: object, base: object, config: StrategyConfiguration, path: str
) -> object:
    if base not in (str, int, float, bool):
        return _NOT_HANDLED
    if base is bool:
        accepted = isinstance(value, bool)
    elif base is float:
        accepted = isinstance(value, (int, float)) and not isinstance(value, bool)
    else:
        accepted = isinstance(value, cast(type, base)) and not isinstance(value, bool)
    if not accepted:
        raise _mismatch(value, base, path)
    return value


def _encode_dataclass(
    value: object, base: object, config: StrategyConfiguration, path: str
) -> object:
    if not (isinstance(base, type) and dataclasses.is_dataclass(base)):
        return _NOT_HANDLED
    if not isinstance(value, base):
        raise _mismatch(value, base, path)
    return {
        field.name: encode_value(
            getattr(value, field.name), hint, config, f"{path}.{field.name}"
        )
        for field, hint in dataclass_field_types(base)
    }


def _encode_collection(
    value: object, base: object, config: StrategyConfiguration, path: str
) -> object:
    origin = get_origin(base)
    args = get_args(base)
    if origin in (dict, Mapping):
        if not isinstance(value, Mapping):
            raise _mismatch(value, base, path)
        item_hint = args[1] if len(args) == 2 else object
        encoded: dict[str, JSONValue] = {}
        for key, item in cast(Mapping[object, object], value).items():
            if not isinstance(key, str):
                raise SchemaMismatchError(
                    f"object keys must be strings, got {type(key).__name__}", path=path
                )
            encoded[key] = encode_value(item, item_hint, config, f"{path}.{key}")
        return encoded
    if origin not in (list, tuple, Sequence):
        return _NOT_HANDLED
    if not isinstance(value, (list, tuple)):
        raise _mismatch(value, base, path)
    items = cast(Sequence[object], value)
    hints = _item_hints(origin, args, len(items), path)
    return [
        encode_value(item, hint, config, f"{path}[{index}]")
        for index, (item, hint) in enumerate(zip(items, hints, strict=True))
    ]


def _item_hints(
    origin: object, args: tuple[object, ...], length: int, path: str
) -> tuple[object, ...]:
    if origin is tuple and args and args[-1] is not Ellipsis:
        if len(args) != length:
            raise SchemaMismatchError(
                f"expected {len(args)} items, got {length}", path=path
            )
        return args
    item_hint = args[0] if args else object
    return (item_hint,) * length


_VALUE_ENCODERS: tuple[
    Callable[[object, object, StrategyConfiguration, str], object], ...
] = (
    _encode_passthrough,
    _encode_none,
    _encode_union,
    _encode_variant,
    _encode_literal,
    _encode_enum,
    _encode_primitive,
    _encode_dataclass,
    _encode_collection,
)


__all__ = [
    "apply_case_keying",
    "encode",
    "encode_case",
    "encode_value",
    "render_payload",
]
