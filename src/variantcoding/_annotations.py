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

"""Annotation inspection shared by the encoder and decoder."""

from __future__ import annotations

import dataclasses
from functools import cache
from types import NoneType, UnionType
from typing import Annotated, Any, Union, get_args, get_origin, get_type_hints

_UNION_ORIGINS = (Union, UnionType)


def strip_annotated(annotation: object) -> object:
    """Return the base type of ``Annotated[T, ...]``; other annotations unchanged."""

    while get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    return annotation


def is_passthrough(annotation: object) -> bool:
    return annotation is object or annotation is Any


def union_members(annotation: object) -> tuple[object, ...] | None:
    """Return the members of a union annotation, ``None`` for non-unions."""

    if get_origin(annotation) in _UNION_ORIGINS:
        return get_args(annotation)
    return None


def is_none_type(annotation: object) -> bool:
    return annotation is None or annotation is NoneType


def type_name(annotation: object) -> str:
    name = getattr(annotation, "__name__", None)
    if isinstance(name, str) and get_origin(annotation) is None:
        return name
    return repr(annotation).replace("typing.", "")


@cache
def dataclass_field_types(cls: type[object]) -> tuple[tuple[dataclasses.Field[Any], object], ...]:
    """Return ``(field, resolved annotation)`` for each init field of ``cls``."""

    hints = get_type_hints(cls, include_extras=True)
    return tuple(
        (field, hints.get(field.name, object))
        for field in dataclasses.fields(cls)
        if field.init
    )


def has_default(field: dataclasses.Field[Any]) -> bool:
    return (
        field.default is not dataclasses.MISSING
        or field.default_factory is not dataclasses.MISSING
    )


__all__ = [
    "dataclass_field_types",
    "has_default",
    "is_none_type",
    "is_passthrough",
    "strip_annotated",
    "type_name",
    "union_members",
]
