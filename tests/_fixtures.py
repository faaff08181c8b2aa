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

"""Shared variant declarations for the test suite."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from variantcoding import (
    BooleanMarker,
    CaseDescriptor,
    Discriminator,
    EmptyPayload,
    FlattenUnlabeled,
    KeyedByCase,
    LabeledFields,
    Nested,
    NoFields,
    SingleUnlabeledField,
    StrategyConfiguration,
    VariantSchema,
    register_variant,
)


@dataclass(slots=True, frozen=True)
class Person:
    name: str


class Command:
    """Union base of the command variant."""


@dataclass(slots=True, frozen=True)
class Load(Command):
    key: str


@dataclass(slots=True, frozen=True)
class Store(Command):
    key: str
    value: int


@dataclass(slots=True, frozen=True)
class Single(Command):
    person: Person


@dataclass(slots=True, frozen=True)
class Nothing(Command):
    pass


COMMAND = VariantSchema(
    "Command",
    (
        CaseDescriptor("load", Load, LabeledFields.of(key=str)),
        CaseDescriptor("store", Store, LabeledFields.of(key=str, value=int)),
        CaseDescriptor("single", Single, SingleUnlabeledField(Person)),
        CaseDescriptor("none", Nothing, NoFields()),
    ),
)
register_variant(Command, COMMAND)


class Priority(Enum):
    LOW = "low"
    HIGH = "high"


@dataclass(slots=True, frozen=True)
class Envelope:
    command: Command
    tags: list[str] = field(default_factory=list)
    priority: Priority | None = None


class Batch:
    """Union base of a variant nesting :class:`Command`."""


@dataclass(slots=True, frozen=True)
class One(Batch):
    command: Command


@dataclass(slots=True, frozen=True)
class Many(Batch):
    commands: tuple[Command, ...]
    label: str | None


@dataclass(slots=True, frozen=True)
class Wrapped(Batch):
    envelope: Envelope


@dataclass(slots=True, frozen=True)
class Mode(Batch):
    mode: Literal["fast", "safe"]


BATCH = VariantSchema(
    "Batch",
    (
        CaseDescriptor("one", One, SingleUnlabeledField(Command)),
        CaseDescriptor(
            "many", Many, LabeledFields.of(commands=tuple[Command, ...], label=str | None)
        ),
        CaseDescriptor("wrapped", Wrapped, SingleUnlabeledField(Envelope)),
        CaseDescriptor("mode", Mode, SingleUnlabeledField(Literal["fast", "safe"])),
    ),
)
register_variant(Batch, BATCH)


@dataclass(slots=True, frozen=True)
class Settings:
    name: str = "anon"


class Option:
    """Union base whose single values decode without required entries."""


@dataclass(slots=True, frozen=True)
class Raw(Option):
    data: object


@dataclass(slots=True, frozen=True)
class Configure(Option):
    settings: Settings


OPTION = VariantSchema(
    "Option",
    (
        CaseDescriptor("raw", Raw, SingleUnlabeledField()),
        CaseDescriptor("configure", Configure, SingleUnlabeledField(Settings)),
    ),
)
register_variant(Option, OPTION)


SAMPLE_COMMANDS: tuple[Command, ...] = (
    Load("a"),
    Store("a", 42),
    Single(Person("Jane Doe")),
    Nothing(),
)

CASE_STRATEGIES = (KeyedByCase(), Discriminator("_discrim"))
SINGLE_VALUE_STRATEGIES = (Nested(), FlattenUnlabeled())
NO_VALUE_STRATEGIES = (EmptyPayload(), BooleanMarker(True), BooleanMarker(False))


def all_configurations() -> list[StrategyConfiguration]:
    return [
        StrategyConfiguration.symmetric(
            case=case, single_value=single_value, no_value=no_value
        )
        for case, single_value, no_value in itertools.product(
            CASE_STRATEGIES, SINGLE_VALUE_STRATEGIES, NO_VALUE_STRATEGIES
        )
    ]


def supports(config: StrategyConfiguration, value: object) -> bool:
    """Return ``False`` for the one combination that cannot be encoded."""

    return not (
        isinstance(value, Nothing)
        and isinstance(config.case_encoding, Discriminator)
        and isinstance(config.no_value_encoding, BooleanMarker)
    )


def config_id(config: StrategyConfiguration) -> str:
    case = (
        f"discriminator({config.case_encoding.key})"
        if isinstance(config.case_encoding, Discriminator)
        else "keyed"
    )
    single = type(config.single_value_encoding).__name__.lower()
    no_value = (
        f"bool({config.no_value_encoding.value})"
        if isinstance(config.no_value_encoding, BooleanMarker)
        else "empty"
    )
    return f"{case}-{single}-{no_value}"
