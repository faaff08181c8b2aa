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

"""Static description of variant types.

A variant type is declared once as a :class:`VariantSchema`: an ordered tuple
of :class:`CaseDescriptor` entries, each naming a case, the Python class that
represents it and the case's :data:`FieldShape`. Nothing is discovered by
reflection at coding time; the annotations recorded on each shape tell the
engines how to recurse into field values.

::

    @dataclass(frozen=True)
    class Store:
        key: str
        value: int

    COMMAND = VariantSchema(
        "Command",
        (
            CaseDescriptor("store", Store, LabeledFields.of(key=str, value=int)),
            CaseDescriptor("none", Nothing, NoFields()),
        ),
    )
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Final, cast

from .errors import SchemaMismatchError

type FieldPair = tuple[str | None, object]

VARIANT_SCHEMA_ATTR: Final[str] = "__variant_schema__"


@dataclass(slots=True, frozen=True)
class FieldSpec:
    """A labeled field: its name and the annotation of its value."""

    name: str
    annotation: object = object


@dataclass(slots=True, frozen=True)
class NoFields:
    """Shape of a case carrying no values."""


@dataclass(slots=True, frozen=True)
class SingleUnlabeledField:
    """Shape of a case carrying one positional value."""

    annotation: object = object


@dataclass(slots=True, frozen=True)
class LabeledFields:
    """Shape of a case carrying named values in declared order."""

    fields: tuple[FieldSpec, ...]

    def __post_init__(self) -> None:
        names = [spec.name for spec in self.fields]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate field names: {', '.join(duplicates)}")

    @classmethod
    def of(cls, **annotations: object) -> LabeledFields:
        """Build a shape from keyword annotations, keeping their order."""

        return cls(tuple(FieldSpec(name, hint) for name, hint in annotations.items()))

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self.fields)


type FieldShape = NoFields | SingleUnlabeledField | LabeledFields


@dataclass(slots=True, frozen=True)
class CaseDescriptor:
    """One case of a variant type.

    Attributes:
        name: Case name written to documents.
        cls: Class whose instances represent the case.
        shape: Field shape of the case.
        construct: Builds a value from decoded fields. Receives keyword
            arguments for labeled fields, one positional argument for a
            single unlabeled field, and nothing otherwise. Defaults to ``cls``.
        deconstruct: Returns the field values of a value in declared order.
            Defaults to reading the labeled attributes, the first dataclass
            field of a single-field case, or nothing.
    """

    name: str
    cls: type[object]
    shape: FieldShape = NoFields()
    construct: Callable[..., object] | None = None
    deconstruct: Callable[[object], Sequence[object]] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.shape, (NoFields, SingleUnlabeledField, LabeledFields)):
            raise TypeError(f"case {self.name!r}: unsupported field shape {self.shape!r}")

    def values_of(self, value: object) -> tuple[object, ...]:
        if self.deconstruct is not None:
            return tuple(self.deconstruct(value))
        match self.shape:
            case NoFields():
                return ()
            case SingleUnlabeledField():
                return (_first_field(value, self.name),)
            case LabeledFields(fields=specs):
                try:
                    return tuple(getattr(value, spec.name) for spec in specs)
                except AttributeError as error:
                    raise SchemaMismatchError(str(error), case=self.name) from error

    def build(self, pairs: Sequence[FieldPair], *, path: str) -> object:
        factory = self.construct if self.construct is not None else self.cls
        match self.shape:
            case NoFields():
                if pairs:
                    raise SchemaMismatchError(
                        "case takes no fields", path=path, case=self.name
                    )
                return _invoke(factory, (), {}, path=path, case=self.name)
            case SingleUnlabeledField():
                if len(pairs) != 1 or pairs[0][0] is not None:
                    raise SchemaMismatchError(
                        "case takes exactly one unlabeled field",
                        path=path,
                        case=self.name,
                    )
                return _invoke(factory, (pairs[0][1],), {}, path=path, case=self.name)
            case LabeledFields():
                arguments = self._labeled_arguments(pairs, path=path)
                return _invoke(factory, (), arguments, path=path, case=self.name)

    def _labeled_arguments(
        self, pairs: Sequence[FieldPair], *, path: str
    ) -> dict[str, object]:
        shape = cast(LabeledFields, self.shape)
        arguments: dict[str, object] = {}
        for name, value in pairs:
            if name is None:
                raise SchemaMismatchError(
                    "labeled case given an unlabeled value", path=path, case=self.name
                )
            if name not in shape.names:
                raise SchemaMismatchError(
                    f"unknown field {name!r}", path=path, case=self.name, key=name
                )
            arguments[name] = value
        missing = [name for name in shape.names if name not in arguments]
        if missing:
            raise SchemaMismatchError(
                f"missing fields: {', '.join(missing)}",
                path=path,
                case=self.name,
                key=missing[0],
            )
        return arguments


def _invoke(
    factory: Callable[..., object],
    args: tuple[object, ...],
    kwargs: dict[str, object],
    *,
    path: str,
    case: str,
) -> object:
    try:
        return factory(*args, **kwargs)
    except (TypeError, ValueError) as error:
        raise SchemaMismatchError(
            f"constructor rejected fields: {error}", path=path, case=case
        ) from error


def _first_field(value: object, case: str) -> object:
    if not dataclasses.is_dataclass(value) or isinstance(value, type):
        raise SchemaMismatchError(
            "single-field case needs a dataclass value or a deconstruct callable",
            case=case,
        )
    declared = dataclasses.fields(value)
    if len(declared) != 1:
        raise SchemaMismatchError(
            f"single-field case class declares {len(declared)} fields", case=case
        )
    return getattr(value, declared[0].name)


@dataclass(slots=True, frozen=True)
class VariantSchema:
    """Ordered case list of a variant type.

    Case names and case classes must be unique. Instances are immutable and
    may be shared freely between threads.
    """

    name: str
    cases: tuple[CaseDescriptor, ...]
    _by_name: dict[str, CaseDescriptor] = field(
        init=False, repr=False, compare=False, hash=False
    )
    _by_cls: dict[type[object], CaseDescriptor] = field(
        init=False, repr=False, compare=False, hash=False
    )

    def __post_init__(self) -> None:
        cases = tuple(self.cases)
        if not cases:
            raise ValueError(f"variant {self.name!r} declares no cases")
        by_name: dict[str, CaseDescriptor] = {}
        by_cls: dict[type[object], CaseDescriptor] = {}
        for case in cases:
            if case.name in by_name:
                raise ValueError(f"variant {self.name!r}: duplicate case {case.name!r}")
            if case.cls in by_cls:
                raise ValueError(
                    f"variant {self.name!r}: class {case.cls.__name__} used by "
                    f"cases {by_cls[case.cls].name!r} and {case.name!r}"
                )
            by_name[case.name] = case
            by_cls[case.cls] = case
        object.__setattr__(self, "cases", cases)
        object.__setattr__(self, "_by_name", by_name)
        object.__setattr__(self, "_by_cls", by_cls)

    def case_named(self, name: str) -> CaseDescriptor | None:
        return self._by_name.get(name)

    def case_of(self, value: object) -> CaseDescriptor:
        """Return the descriptor of the case ``value`` belongs to."""

        exact = self._by_cls.get(type(value))
        if exact is not None:
            return exact
        for case in self.cases:
            if isinstance(value, case.cls):
                return case
        raise SchemaMismatchError(
            f"{type(value).__name__} is not a case of {self.name}", path=self.name
        )

    def fields_of(self, value: object) -> tuple[FieldPair, ...]:
        """Return ``(name, value)`` pairs of ``value``; names are ``None`` when unlabeled."""

        case = self.case_of(value)
        values = case.values_of(value)
        match case.shape:
            case NoFields():
                expected: tuple[str | None, ...] = ()
            case SingleUnlabeledField():
                expected = (None,)
            case LabeledFields() as shape:
                expected = shape.names
        if len(values) != len(expected):
            raise SchemaMismatchError(
                f"expected {len(expected)} field values, got {len(values)}",
                path=f"{self.name}.{case.name}",
                case=case.name,
            )
        return tuple(zip(expected, values, strict=True))

    def construct(self, case_name: str, pairs: Sequence[FieldPair]) -> object:
        """Build the value of ``case_name`` from ``(name, value)`` pairs."""

        case = self.case_named(case_name)
        if case is None:
            raise SchemaMismatchError(
                f"{self.name} has no case {case_name!r}", path=self.name, case=case_name
            )
        return case.build(pairs, path=f"{self.name}.{case_name}")


def register_variant[T](cls: type[T], schema: VariantSchema) -> type[T]:
    """Attach ``schema`` to ``cls`` so annotations naming ``cls`` resolve to it."""

    setattr(cls, VARIANT_SCHEMA_ATTR, schema)
    return cls


def schema_for(annotation: object) -> VariantSchema | None:
    """Return the schema an annotation refers to, if any.

    Only the class's own attribute counts: case classes deriving from a
    registered union base are not themselves treated as the union.
    """

    if isinstance(annotation, VariantSchema):
        return annotation
    if isinstance(annotation, type):
        candidate = vars(annotation).get(VARIANT_SCHEMA_ATTR)
        if isinstance(candidate, VariantSchema):
            return candidate
    return None


__all__ = [
    "VARIANT_SCHEMA_ATTR",
    "CaseDescriptor",
    "FieldPair",
    "FieldShape",
    "FieldSpec",
    "LabeledFields",
    "NoFields",
    "SingleUnlabeledField",
    "VariantSchema",
    "register_variant",
    "schema_for",
]
