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

"""Decoder engine: document trees back to variant values.

Decoding is a single pass with no backtracking. :func:`select_case` reads the
case name and isolates the payload according to the configured case keying,
:func:`decode_payload` interprets the payload by the case's field shape, and
the schema constructs the value. Any error aborts the whole call; no partial
value is returned.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping, Sequence
from enum import Enum
from typing import Literal, cast, get_args, get_origin

from ._annotations import (
    dataclass_field_types,
    has_default,
    is_none_type,
    is_passthrough,
    strip_annotated,
    type_name,
    union_members,
)
from .dbc import pure
from .errors import (
    AmbiguousOrEmptyVariantError,
    MissingFieldError,
    SchemaMismatchError,
    ShapeMismatchError,
    UnknownCaseError,
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
    EmptyPayload,
    ExtraPolicy,
    FlattenUnlabeled,
    KeyedByCase,
    Nested,
    StrategyConfiguration,
)
from .types import JSONValue, is_json_value

logger: StructuredLogger = get_logger(__name__, context={"component": "decoder"})

_NOT_HANDLED = object()


def decode(
    document: JSONValue,
    schema: VariantSchema,
    config: StrategyConfiguration | None = None,
) -> object:
    """Decode ``document`` into a value of the variant described by ``schema``."""

    resolved = config if config is not None else DEFAULT_CONFIGURATION
    log = logger.bind(schema=schema.name)
    try:
        case, pairs = decode_case(document, schema, resolved, path=schema.name)
        value = case.build(pairs, path=f"{schema.name}.{case.name}")
    except VariantCodingError as error:
        log.debug(
            "variant.decode_failed",
            event="variant.decode_failed",
            context={"error": type(error).__name__, "path": error.path},
        )
        raise
    log.debug(
        "variant.decode",
        event="variant.decode",
        context={
            "case": case.name,
            "case_decoding": repr(resolved.case_decoding),
        },
    )
    return value


def decode_case(
    document: JSONValue,
    schema: VariantSchema,
    config: StrategyConfiguration | None = None,
    *,
    path: str | None = None,
) -> tuple[CaseDescriptor, tuple[FieldPair, ...]]:
    """Return the case named by ``document`` and its decoded field pairs."""

    resolved = config if config is not None else DEFAULT_CONFIGURATION
    path = path if path is not None else schema.name
    case, payload = select_case(document, schema, resolved.case_decoding, path)
    pairs = decode_payload(case, payload, resolved, f"{path}.{case.name}")
    return case, pairs


@pure
def select_case(
    document: JSONValue,
    schema: VariantSchema,
    strategy: CaseStrategy,
    path: str,
) -> tuple[CaseDescriptor, JSONValue]:
    """Determine the case name and isolate its payload."""

    if not isinstance(document, Mapping):
        raise ShapeMismatchError(
            f"expected object for variant {schema.name}, got {_shape_of(document)}",
            path=path,
        )
    entries = cast(Mapping[str, JSONValue], document)
    match strategy:
        case KeyedByCase():
            if len(entries) != 1:
                raise AmbiguousOrEmptyVariantError(
                    f"expected exactly one case entry, found {len(entries)}",
                    path=path,
                )
            ((name, payload),) = entries.items()
        case Discriminator(key=key):
            if key not in entries:
                raise ShapeMismatchError(
                    f"missing discriminator entry {key!r}", path=path, key=key
                )
            name = entries[key]
            if not isinstance(name, str):
                raise ShapeMismatchError(
                    f"discriminator {key!r} must be a string, got {_shape_of(name)}",
                    path=path,
                    key=key,
                )
            payload = {entry: item for entry, item in entries.items() if entry != key}
    case = schema.case_named(name)
    if case is None:
        known = ", ".join(descriptor.name for descriptor in schema.cases)
        raise UnknownCaseError(
            f"unknown case {name!r}, expected one of: {known}", path=path, case=name
        )
    return case, payload


def decode_payload(
    case: CaseDescriptor,
    payload: JSONValue,
    config: StrategyConfiguration,
    path: str,
) -> tuple[FieldPair, ...]:
    """Interpret a payload by the case's field shape."""

    match case.shape:
        case NoFields():
            _check_no_value(case, payload, config, path)
            return ()
        case SingleUnlabeledField(annotation=annotation):
            return ((None, _decode_single(case, annotation, payload, config, path)),)
        case LabeledFields() as shape:
            return _decode_labeled(case, shape, payload, config, path)


def _check_no_value(
    case: CaseDescriptor,
    payload: JSONValue,
    config: StrategyConfiguration,
    path: str,
) -> None:
    strategy = config.no_value_decoding
    match strategy:
        case EmptyPayload():
            if not isinstance(payload, Mapping) or payload:
                raise ShapeMismatchError(
                    f"expected empty object, got {_shape_of(payload)}",
                    path=path,
                    case=case.name,
                )
        case BooleanMarker(value=marker, strict=strict):
            if not isinstance(payload, bool):
                raise ShapeMismatchError(
                    f"expected boolean marker, got {_shape_of(payload)}",
                    path=path,
                    case=case.name,
                )
            if strict and payload is not marker:
                raise ShapeMismatchError(
                    f"expected boolean marker {str(marker).lower()}",
                    path=path,
                    case=case.name,
                )


def _decode_single(
    case: CaseDescriptor,
    annotation: object,
    payload: JSONValue,
    config: StrategyConfiguration,
    path: str,
) -> object:
    match config.single_value_decoding:
        case FlattenUnlabeled():
            # A lone "_0" entry is the nested form, never a flattened value.
            if isinstance(payload, Mapping) and set(payload) == {SINGLE_VALUE_KEY}:
                raise ShapeMismatchError(
                    f"expected flattened value, got object with the single entry "
                    f"{SINGLE_VALUE_KEY!r}",
                    path=path,
                    case=case.name,
                    key=SINGLE_VALUE_KEY,
                )
            return decode_value(payload, annotation, config, path)
        case Nested():
            if not isinstance(payload, Mapping) or set(payload) != {SINGLE_VALUE_KEY}:
                raise ShapeMismatchError(
                    f"expected object with the single entry {SINGLE_VALUE_KEY!r}, "
                    f"got {_shape_of(payload)}",
                    path=path,
                    case=case.name,
                )
            inner = cast(Mapping[str, JSONValue], payload)[SINGLE_VALUE_KEY]
            return decode_value(inner, annotation, config, f"{path}.{SINGLE_VALUE_KEY}")


def _decode_labeled(
    case: CaseDescriptor,
    shape: LabeledFields,
    payload: JSONValue,
    config: StrategyConfiguration,
    path: str,
) -> tuple[FieldPair, ...]:
    if not isinstance(payload, Mapping):
        raise ShapeMismatchError(
            f"expected object of labeled fields, got {_shape_of(payload)}",
            path=path,
            case=case.name,
        )
    entries = cast(Mapping[str, JSONValue], payload)
    _check_extra(entries, shape.names, config.extra, path, case.name)
    pairs: list[FieldPair] = []
    for spec in shape.fields:
        if spec.name not in entries:
            raise MissingFieldError(
                f"missing field {spec.name!r}", path=path, case=case.name, key=spec.name
            )
        pairs.append(
            (
                spec.name,
                decode_value(
                    entries[spec.name], spec.annotation, config, f"{path}.{spec.name}"
                ),
            )
        )
    return tuple(pairs)


def _check_extra(
    entries: Mapping[str, JSONValue],
    declared: Sequence[str],
    policy: ExtraPolicy,
    path: str,
    case: str | None = None,
) -> None:
    if policy != "forbid":
        return
    unexpected = [key for key in entries if key not in declared]
    if unexpected:
        raise ShapeMismatchError(
            f"unexpected entries: {', '.join(unexpected)}",
            path=path,
            case=case,
            key=unexpected[0],
        )


def decode_value(
    document: JSONValue,
    annotation: object,
    config: StrategyConfiguration,
    path: str,
) -> object:
    """Decode a field value according to its annotation."""

    base = strip_annotated(annotation)
    for handler in _VALUE_DECODERS:
        result = handler(document, base, config, path)
        if result is not _NOT_HANDLED:
            return result
    raise SchemaMismatchError(f"unsupported annotation {type_name(base)}", path=path)


def _shape_of(document: object) -> str:
    if document is None:
        return "null"
    if isinstance(document, bool):
        return "boolean"
    if isinstance(document, (int, float)):
        return "number"
    if isinstance(document, str):
        return "string"
    if isinstance(document, Mapping):
        return "object"
    if isinstance(document, (list, tuple)):
        return "array"
    return type(document).__name__


def _expected(base: object, document: object, path: str) -> ShapeMismatchError:
    return ShapeMismatchError(
        f"expected {type_name(base)}, got {_shape_of(document)}", path=path
    )


def _decode_passthrough(
    document: JSONValue, base: object, config: StrategyConfiguration, path: str
) -> object:
    if not is_passthrough(base):
        return _NOT_HANDLED
    if not is_json_value(document):
        raise ShapeMismatchError(
            f"{type(document).__name__} is not a document value", path=path
        )
    return document


def _decode_none(
    document: JSONValue, base: object, config: StrategyConfiguration, path: str
) -> object:
    if not is_none_type(base):
        return _NOT_HANDLED
    if document is not None:
        raise _expected(base, document, path)
    return None


def _decode_union(
    document: JSONValue, base: object, config: StrategyConfiguration, path: str
) -> object:
    members = union_members(base)
    if members is None:
        return _NOT_HANDLED
    optional = any(is_none_type(member) for member in members)
    if document is None and optional:
        return None
    candidates = [member for member in members if not is_none_type(member)]
    if len(candidates) == 1:
        return decode_value(document, candidates[0], config, path)
    last_error: VariantCodingError | None = None
    for member in candidates:
        try:
            return decode_value(document, member, config, path)
        except VariantCodingError as error:
            last_error = error
    raise ShapeMismatchError(
        f"{_shape_of(document)} matches no member of {type_name(base)}", path=path
    ) from last_error


def _decode_variant(
    document: JSONValue, base: object, config: StrategyConfiguration, path: str
) -> object:
    schema = schema_for(base)
    if schema is None:
        return _NOT_HANDLED
    case, pairs = decode_case(document, schema, config, path=path)
    return case.build(pairs, path=f"{path}.{case.name}")


def _decode_literal(
    document: JSONValue, base: object, config: StrategyConfiguration, path: str
) -> object:
    if get_origin(base) is not Literal:
        return _NOT_HANDLED
    for literal in get_args(base):
        if document == literal and type(document) is type(literal):
            return literal
    raise SchemaMismatchError(
        f"expected one of {list(get_args(base))}, got {document!r}", path=path
    )


def _decode_enum(
    document: JSONValue, base: object, config: StrategyConfiguration, path: str
) -> object:
    if not (isinstance(base, type) and issubclass(base, Enum)):
        return _NOT_HANDLED
    # true == 1, so booleans only match members whose value is that boolean.
    if isinstance(document, bool):
        for member in base:
            if member.value is document:
                return member
        raise SchemaMismatchError(
            f"{document!r} is not a valid {base.__name__}", path=path
        )
    try:
        return base(document)
    except ValueError as error:
        raise SchemaMismatchError(
            f"{document!r} is not a valid {base.__name__}", path=path
        ) from error


def _decode_primitive(
    document: JSONValue, base: object, config: StrategyConfiguration, path: str
) -> object:
    if base not in (str, int, float, bool):
        return _NOT_HANDLED
    if isinstance(document, bool):
        if base is bool:
            return document
        raise _expected(base, document, path)
    if base is float and isinstance(document, (int, float)):
        return float(document)
    if base in (int, str) and isinstance(document, cast(type, base)):
        return document
    raise _expected(base, document, path)


def _decode_dataclass(
    document: JSONValue, base: object, config: StrategyConfiguration, path: str
) -> object:
    if not (isinstance(base, type) and dataclasses.is_dataclass(base)):
        return _NOT_HANDLED
    if not isinstance(document, Mapping):
        raise _expected(base, document, path)
    entries = cast(Mapping[str, JSONValue], document)
    declared = dataclass_field_types(base)
    _check_extra(entries, [field.name for field, _ in declared], config.extra, path)
    arguments: dict[str, object] = {}
    for field, hint in declared:
        if field.name in entries:
            arguments[field.name] = decode_value(
                entries[field.name], hint, config, f"{path}.{field.name}"
            )
        elif not has_default(field):
            raise MissingFieldError(
                f"missing field {field.name!r}", path=path, key=field.name
            )
    try:
        return base(**arguments)
    except (TypeError, ValueError) as error:
        raise SchemaMismatchError(
            f"{base.__name__} rejected fields: {error}", path=path
        ) from error


def _decode_collection(
    document: JSONValue, base: object, config: StrategyConfiguration, path: str
) -> object:
    origin = get_origin(base)
    args = get_args(base)
    if origin in (dict, Mapping):
        if not isinstance(document, Mapping):
            raise _expected(base, document, path)
        item_hint = args[1] if len(args) == 2 else object
        return {
            key: decode_value(item, item_hint, config, f"{path}.{key}")
            for key, item in cast(Mapping[str, JSONValue], document).items()
        }
    if origin not in (list, tuple, Sequence):
        return _NOT_HANDLED
    if not isinstance(document, (list, tuple)):
        raise _expected(base, document, path)
    items = cast(Sequence[JSONValue], document)
    if origin is tuple and args and args[-1] is not Ellipsis:
        if len(args) != len(items):
            raise ShapeMismatchError(
                f"expected {len(args)} items, got {len(items)}", path=path
            )
        hints: tuple[object, ...] = args
    else:
        hints = (args[0] if args else object,) * len(items)
    decoded = [
        decode_value(item, hint, config, f"{path}[{index}]")
        for index, (item, hint) in enumerate(zip(items, hints, strict=True))
    ]
    return tuple(decoded) if origin is tuple else decoded


_VALUE_DECODERS: tuple[
    Callable[[JSONValue, object, StrategyConfiguration, str], object], ...
] = (
    _decode_passthrough,
    _decode_none,
    _decode_union,
    _decode_variant,
    _decode_literal,
    _decode_enum,
    _decode_primitive,
    _decode_dataclass,
    _decode_collection,
)


__all__ = [
    "decode",
    "decode_case",
    "decode_payload",
    "decode_value",
    "select_case",
]
