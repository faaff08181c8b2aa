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

"""Shared type aliases for :mod:`variantcoding`.

The encoder and decoder exchange a generic document tree with the JSON
printer and parser. The aliases below name that tree:

- **JSONValue**: any node (``str``, ``int``, ``float``, ``bool``, ``None``,
  an object or an array).
- **JSONObject**: ``Mapping[str, JSONValue]``. Encoders build plain ``dict``
  instances so entry order follows insertion order.
- **JSONArray**: ``Sequence[JSONValue]``. Encoders build ``list`` instances.
- **ContractResult**: return type accepted from predicates passed to the
  ``@require`` and ``@ensure`` decorators in :mod:`variantcoding.dbc`.
"""

from __future__ import annotations

from .json import ContractResult, JSONArray, JSONObject, JSONValue, is_json_value

__all__ = [
    "ContractResult",
    "JSONArray",
    "JSONObject",
    "JSONValue",
    "is_json_value",
]
