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


import pytest
from svgslim.arc_to_cubic import arc_to_cubic
from svgslim.geometric_types import Point


@pytest.mark.parametrize(
    "start, rx, ry, rotation, large, sweep, end, expected_count",
    [
        # half circle
        ((0, 0), 5, 5, 0, 0, 1, (10, 0), 2),
        # quarter circle
        ((0, 0), 10, 10, 0, 0, 1, (10, 10), 1),
        # the long way around the same quarter
        ((0, 0), 10, 10, 0, 1, 1, (10, 10), 3),
        # radii too small get scaled up
        ((0, 0), 1, 1, 0, 0, 0, (10, 0), 2),
    ],
)
def test_arc_to_cubic(start, rx, ry, rotation, large, sweep, end, expected_count):
    curves = list(arc_to_cubic(start, rx, ry, rotation, large, sweep, end))
    print(f"A: {curves}")

    assert len(curves) == expected_count
    # the last curve lands exactly on the end point
    assert curves[-1][2] == Point(*end)
    for c1, c2, curve_end in curves:
        assert isinstance(c1, Point)
        assert isinstance(c2, Point)
        assert isinstance(curve_end, Point)


def test_arc_to_cubic_sweep_direction():
    # y points down, so a positive sweep from (0, 0) to (10, 0) goes up
    (_, _, mid), _ = arc_to_cubic((0, 0), 5, 5, 0, 0, 1, (10, 0))
    assert mid == pytest.approx(Point(5, -5))

    (_, _, mid), _ = arc_to_cubic((0, 0), 5, 5, 0, 0, 0, (10, 0))
    assert mid == pytest.approx(Point(5, 5))


def test_arc_to_cubic_zero_radius_is_a_line():
    assert list(arc_to_cubic((0, 0), 0, 5, 0, 0, 1, (4, 2))) == [
        (Point(0, 0), Point(4, 2), Point(4, 2))
    ]


def test_arc_to_cubic_same_point_draws_nothing():
    assert list(arc_to_cubic((3, 3), 5, 5, 0, 1, 1, (3, 3))) == []
