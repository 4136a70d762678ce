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
from svgslim.svg_path import (
    absolute_commands,
    normalize_start,
    parse_path,
    path_to_string,
    translate_path_data,
)
from svgslim.svg_path_iter import PathCommand, PathDataError


def test_path_to_string():
    cmds = (
        PathCommand("M", (0.5, -1.0)),
        PathCommand("l", (2.0, 3.0)),
        PathCommand("A", (5.0, 5.0, 0.0, 1, 0, 10.0, 10.0)),
        PathCommand("z"),
    )
    assert path_to_string(cmds) == "M.5 -1l2 3A5 5 0 1 0 10 10z"


@pytest.mark.parametrize(
    "d, dx, dy, expected",
    [
        ("M0 0h10v10z", 5, 5, "M5 5h10v10z"),
        # a leading relative moveto is absolute
        ("m1 1l2 2", 1, -1, "M2 0l2 2"),
        ("m1 1 2 2", 1, 1, "M2 2l2 2"),
        (
            "M1 1L2 2H5V6C1 1 2 2 3 3A5 5 0 1 0 10 10Z",
            1,
            2,
            "M2 3L3 4H6V8C2 3 3 4 4 5A5 5 0 1 0 11 12Z",
        ),
        # relative commands after the start don't move
        ("M0 0l5 5m1 1l1 1", 10, 0, "M10 0l5 5m1 1l1 1"),
        ("M0 0Q1 1 2 2T4 4S5 5 6 6", 1, 1, "M1 1Q2 2 3 3T5 5S6 6 7 7"),
        ("", 3, 3, ""),
    ],
)
def test_translate_path_data(d, dx, dy, expected):
    actual = translate_path_data(d, dx, dy)
    print(f"A: {actual}")
    print(f"E: {expected}")
    assert actual == expected


def test_translate_path_data_invalid():
    with pytest.raises(PathDataError):
        translate_path_data("M1", 1, 1)


@pytest.mark.parametrize(
    "d, expected",
    [
        ("M1 2L3 4", "M1 2L3 4"),
        ("  M1 2L3 4 ", "M1 2L3 4"),
        ("m1 2l3 4", "M1 2l3 4"),
        ("m1,2", "M1 2"),
        # implicit linetos after a relative moveto stay relative
        ("m1 2 3 4", "M1 2l3 4"),
        ("m-1-2h5", "M-1 -2h5"),
        ("", None),
        ("   ", None),
        ("L1 2", None),
        ("M1", None),
        ("m1 2 3", None),
    ],
)
def test_normalize_start(d, expected):
    actual = normalize_start(d)
    print(f"A: {actual}")
    print(f"E: {expected}")
    assert actual == expected


@pytest.mark.parametrize(
    "d, expected",
    [
        (
            "M10 10h5v5H0Z",
            (
                ("M", (10, 10)),
                ("L", (15, 10)),
                ("L", (15, 15)),
                ("L", (0, 15)),
                ("Z", ()),
            ),
        ),
        ("m1 1l2 0", (("M", (1, 1)), ("L", (3, 1)))),
        # closepath returns to the subpath start
        ("M1 1h4zl1 1", (("M", (1, 1)), ("L", (5, 1)), ("Z", ()), ("L", (2, 2)))),
        # smooth curves reflect the previous control point
        (
            "M0 0C1 1 2 2 3 3S5 5 6 6",
            (
                ("M", (0, 0)),
                ("C", (1, 1, 2, 2, 3, 3)),
                ("C", (4, 4, 5, 5, 6, 6)),
            ),
        ),
        (
            "M0 0Q1 1 2 2t2 0",
            (("M", (0, 0)), ("Q", (1, 1, 2, 2)), ("Q", (3, 3, 4, 2))),
        ),
        # ...or use the current point when there is none
        ("M0 0T2 2", (("M", (0, 0)), ("Q", (0, 0, 2, 2)))),
        ("M1 1a1 1 0 0 1 2 0", (("M", (1, 1)), ("A", (1, 1, 0, 0, 1, 3, 1)))),
    ],
)
def test_absolute_commands(d, expected):
    actual = tuple(absolute_commands(parse_path(d)))
    print(f"A: {actual}")
    print(f"E: {expected}")
    assert actual == expected
