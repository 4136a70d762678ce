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
from math import degrees, pi
from svgslim import svg_transform
from svgslim.svg_transform import (
    Affine2D,
    collapse_transforms,
    extract_translation,
    parse_svg_transform,
)
from svg_test_helpers import children, svg
from typing import Tuple


@pytest.mark.parametrize(
    "transform, expected_result",
    [
        # translate(tx)
        ("translate(-5)", Affine2D(1, 0, 0, 1, -5, 0)),
        # translate(tx ty)
        ("translate(3.5, -0.65)", Affine2D(1, 0, 0, 1, 3.5, -0.65)),
        # scale(sx)
        ("scale(2)", Affine2D(2, 0, 0, 2, 0, 0)),
        # scale(sx,sy)
        ("scale(-2 -3)", Affine2D(-2, 0, 0, -3, 0, 0)),
        # rotate(angle)
        (f"rotate({degrees(pi / 4)})", Affine2D(0.707, 0.707, -0.707, 0.707, 0, 0)),
        # rotate(angle cx cy)
        (f"rotate({degrees(pi / 2)}, 5, 6)", Affine2D(0, 1, -1, 0, 11, 1)),
        # skewX(angle)
        (f"skewx({degrees(pi / 8)})", Affine2D(1, 0, 0.414, 1, 0, 0)),
        # skewY(angle)
        (f"skewY({degrees(pi / 8)})", Affine2D(1, 0.414, 0, 1, 0, 0)),
        (
            "matrix(2, 0, 0, 3, 1, 6) matrix(4, 3, 2, 1, 5, 6)",
            Affine2D(8, 9, 4, 3, 11, 24),
        ),
        (
            "translate(50 90),rotate(-45) translate(130,160)",
            Affine2D(0.707, -0.707, 0.707, 0.707, 255.061, 111.213),
        ),
        # odd spacing
        (
            "matrix( -1,0,0,1,3717.75,0 )",
            Affine2D(-1, 0, 0, 1, 3717.75, 0),
        ),
    ],
)
def test_parse_svg_transform(transform: str, expected_result: Tuple[str, ...]):
    actual = parse_svg_transform(transform)
    print(f"A: {actual}")
    print(f"E: {expected_result}")

    assert actual == pytest.approx(expected_result, rel=1e-3)


class TestAffine2D:
    def test_product_order(self):
        scale = Affine2D(2, 0, 0, 2, 0, 0)
        move = Affine2D(1, 0, 0, 1, 10, 0)
        assert Affine2D.product(scale, move) == Affine2D(2, 0, 0, 2, 10, 0)
        assert Affine2D.product(move, scale) == Affine2D(2, 0, 0, 2, 20, 0)

    def test_compose_ltr(self):
        scale = Affine2D.identity().scale(2)
        move = Affine2D.identity().translate(10, 0)
        # scale first, then move
        assert Affine2D.compose_ltr((scale, move)) == Affine2D(2, 0, 0, 2, 10, 0)
        # move first, then scale
        assert Affine2D.compose_ltr((move, scale)) == Affine2D(2, 0, 0, 2, 20, 0)
        assert Affine2D.compose_ltr(()) == Affine2D.identity()


@pytest.mark.parametrize(
    "transform, expected",
    [
        ("translate(1 2)", (1, 2, "")),
        ("translate(1,2) translate(3)", (4, 2, "")),
        ("TRANSLATE ( -1.5 )", (-1.5, 0, "")),
        ("rotate(10) translate(5 5)", (5, 5, "rotate(10)")),
        ("translate(1,2)scale(2)", (1, 2, "scale(2)")),
        ("scale(2)", (0, 0, "scale(2)")),
    ],
)
def test_extract_translation(transform, expected):
    assert extract_translation(transform) == expected


@pytest.mark.parametrize("transform", ["translate(1 2 3)", "translate(a)"])
def test_extract_translation_invalid(transform):
    with pytest.raises(ValueError):
        extract_translation(transform)


@pytest.mark.parametrize(
    "el, expected",
    [
        (
            '<g transform="translate(5 5)"><path d="M0 0h10v10z"/></g>',
            '<g><path d="M5 5h10v10z"/></g>',
        ),
        # anything but translation leaves the transform untouched
        (
            '<g transform="rotate(10) translate(5 5)"><path d="M0 0h10v10z"/></g>',
            '<g transform="rotate(10) translate(5 5)"><path d="M0 0h10v10z"/></g>',
        ),
        (
            '<path transform="translate(0 0)" d="M1 1h1"/>',
            '<path d="M1 1h1"/>',
        ),
        # missing geometry defaults to 0
        (
            '<rect transform="translate(5,6)" width="1" height="1"/>',
            '<rect width="1" height="1" x="5" y="6"/>',
        ),
        (
            '<circle transform="translate(5 6)" cx="1" r="2"/>',
            '<circle cx="6" r="2" cy="6"/>',
        ),
        (
            '<line transform="translate(1 1)" x1="1" y1="2" x2="3" y2="4"/>',
            '<line x1="2" y1="3" x2="4" y2="5"/>',
        ),
        (
            '<polygon transform="translate(5 6)" points="0,0 1,1 2 0"/>',
            '<polygon points="5,6 6,7 7,6"/>',
        ),
        (
            '<text transform="translate(5 1)" x="1 2 3" y="1">hi</text>',
            '<text x="6 7 8" y="2">hi</text>',
        ),
        # a child with its own transform gets the translation prepended
        (
            '<g transform="translate(1 1)"><path transform="scale(2)" d="M0 0h1"/></g>',
            '<g><path transform="translate(1 1) scale(2)" d="M0 0h1"/></g>',
        ),
        # ...and collapses too when it's a translation itself
        (
            '<g transform="translate(1 1)">'
            '<rect transform="translate(2 2)" width="1" height="1"/>'
            "</g>",
            '<g><rect width="1" height="1" x="3" y="3"/></g>',
        ),
        # unparseable path data can't absorb anything
        (
            '<g transform="translate(1 1)"><path d="M1"/></g>',
            '<g transform="translate(1 1)"><path d="M1"/></g>',
        ),
        # nor can relative lengths
        (
            '<rect transform="translate(1 1)" x="10%" width="1" height="1"/>',
            '<rect transform="translate(1 1)" x="10%" width="1" height="1"/>',
        ),
        # referenced content keeps its own transform
        (
            '<clipPath id="c" transform="translate(5 5)">'
            '<rect width="10" height="10"/></clipPath>',
            '<clipPath id="c" transform="translate(5 5)">'
            '<rect width="10" height="10"/></clipPath>',
        ),
        (
            '<marker id="m" transform="translate(1 2)"><path d="M0 0h1"/></marker>',
            '<marker id="m" transform="translate(1 2)"><path d="M0 0h1"/></marker>',
        ),
        # ...but a group still moves past the clipPath inside it
        (
            '<g transform="translate(1 1)"><clipPath id="c"><rect width="1" height="1"/>'
            '</clipPath><path d="M0 0h1"/></g>',
            '<g><clipPath id="c"><rect width="1" height="1"/></clipPath>'
            '<path d="M1 1h1"/></g>',
        ),
    ],
)
def test_collapse_transforms(el, expected):
    actual = svg(el)
    collapse_transforms(actual.svg_root)
    print(f"A: {children(actual)}")
    print(f"E: {expected}")
    assert children(actual) == expected


def test_collapse_blocked_by_user_space_gradient():
    actual = svg(
        '<defs><linearGradient id="grad" gradientUnits="userSpaceOnUse"/></defs>',
        '<g transform="translate(5 5)"><path fill="url(#grad)" d="M0 0h1"/></g>',
    )
    assert collapse_transforms(actual.svg_root) == 0
    assert actual.xpath_one("//svg:g").get("transform") == "translate(5 5)"


def test_collapse_follows_gradient_href_chain():
    actual = svg(
        '<defs><linearGradient id="base" gradientUnits="userSpaceOnUse"/>'
        '<linearGradient id="grad" href="#base"/></defs>',
        '<g transform="translate(5 5)"><path fill="url(#grad)" d="M0 0h1"/></g>',
    )
    assert collapse_transforms(actual.svg_root) == 0


def test_collapse_blocked_by_inherited_gradient():
    actual = svg(
        '<defs><linearGradient id="grad" gradientUnits="userSpaceOnUse"/></defs>',
        '<g fill="url(#grad)"><path transform="translate(5 5)" d="M0 0h1"/></g>',
    )
    assert collapse_transforms(actual.svg_root) == 0
    assert actual.xpath_one("//svg:path").get("transform") == "translate(5 5)"


def test_collapse_with_bounding_box_gradient():
    actual = svg(
        '<defs><linearGradient id="grad"/></defs>',
        '<g transform="translate(5 5)"><path fill="url(#grad)" d="M0 0h1"/></g>',
    )
    assert collapse_transforms(actual.svg_root) == 1
    assert actual.xpath_one("//svg:path").get("d") == "M5 5h1"


def test_collapse_restores_everything_when_bake_in_fails(monkeypatch):
    content = (
        '<g transform="translate(5 5)">'
        '<path d="M0 0h1"/><rect x="1" width="1" height="1"/><path d="M2 2h1"/>'
        "</g>"
    )
    actual = svg(content)
    translate_path_data = svg_transform.translate_path_data
    calls = []

    def fail_on_second_path(d, dx, dy):
        calls.append(d)
        if len(calls) == 2:
            raise ValueError("boom")
        return translate_path_data(d, dx, dy)

    monkeypatch.setattr(svg_transform, "translate_path_data", fail_on_second_path)

    assert collapse_transforms(actual.svg_root) == 0
    # the first path and the rect were already shifted before the failure
    assert len(calls) == 2
    assert children(actual) == content
