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

"""Document tree typing helpers."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

_JSONPrimitive = str | int | float | bool | None


type JSONArray = Sequence["JSONValue"]
type JSONObject = Mapping[str, "JSONValue"]
type JSONValue = _JSONPrimitive | JSONObject | JSONArray

type ContractResult = bool | tuple[bool, *tuple[object, ...]] | None


def is_json_value(value: object) -> bool:
    """Return ``True`` when ``value`` is a well-formed document tree."""

    if value is None or isinstance(value, (str, int, float, bool)):
        return True
    if isinstance(value, Mapping):
        return all(
            isinstance(key, str) and is_json_value(item)
            for key, item in value.items()
        )
    if isinstance(value, (list, tuple)):
        return all(is_json_value(item) for item in value)
    return False


__all__ = [
    "ContractResult",
    "JSONArray",
    "JSONObject",
    "JSONValue",
    "is_json_value",
]
