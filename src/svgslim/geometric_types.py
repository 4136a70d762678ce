# Copyright 2020 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import math
from typing import NamedTuple, Optional, Tuple


class Point(NamedTuple):
    x: float = 0
    y: float = 0


class Rect(NamedTuple):
    x: float = 0
    y: float = 0
    w: float = 0
    h: float = 0

    @classmethod
    def from_bounds(cls, x_min, y_min, x_max, y_max) -> "Rect":
        return cls(x_min, y_min, x_max - x_min, y_max - y_min)

    def bounds(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.x + self.w, self.y + self.h)

    def empty(self) -> bool:
        """Return True if the Rect has no area."""
        return self.w <= 0 or self.h <= 0

    def union(self, other: Optional["Rect"]) -> "Rect":
        if other is None:
            return self
        x_min, y_min, x_max, y_max = self.bounds()
        o_x_min, o_y_min, o_x_max, o_y_max = other.bounds()
        return Rect.from_bounds(
            min(x_min, o_x_min),
            min(y_min, o_y_min),
            max(x_max, o_x_max),
            max(y_max, o_y_max),
        )

    def snap_outward(self) -> "Rect":
        """Return the smallest integer Rect containing self."""
        x_min, y_min, x_max, y_max = self.bounds()
        return Rect.from_bounds(
            math.floor(x_min), math.floor(y_min), math.ceil(x_max), math.ceil(y_max)
        )
