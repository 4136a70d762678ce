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

"""Helpers for https://www.w3.org/TR/SVG11/coords.html#TransformAttribute.

Parses transforms into affine matrices and bakes pure translations into
the coordinates of the elements they apply to.
"""
import collections
from functools import reduce
from math import cos, sin, radians, tan
import re
from absl import logging
from lxml import etree  # pytype: disable=import-error
from typing import Dict, MutableMapping, NamedTuple, Sequence, Tuple
from svgslim import svg_meta
from svgslim.svg_numbers import format_number
from svgslim.svg_path import parse_path, translate_path_data


_SVG_ARG_FIXUPS = collections.defaultdict(
    lambda: lambda _: None,
    {
        "rotate": lambda args: _fix_rotate(args),
        "skewx": lambda args: _fix_rotate(args),
        "skewy": lambda args: _fix_rotate(args),
    },
)

_TRANSFORM_RE = re.compile(
    r"(?i)(matrix|translate|scale|rotate|skewX|skewY)\s*\(([^)]*)\)"
)
_TRANSLATE_RE = re.compile(r"(?i)translate\s*\(([^)]*)\)")
_ARG_SEPARATOR_RE = re.compile(r"\s*[,\s]\s*")
_LIST_SEPARATOR_RE = re.compile(r"[\s,]+")


# 2D affine transform.
#
# View as vector of 6 values or matrix:
#
# a   c   e
# b   d   f
class Affine2D(NamedTuple):
    a: float
    b: float
    c: float
    d: float
    e: float
    f: float

    @staticmethod
    def identity():
        return Affine2D._identity

    @staticmethod
    def product(first: "Affine2D", second: "Affine2D") -> "Affine2D":
        """Returns the product of first x second.

        Order matters; meant to make that a bit more explicit.
        """
        return Affine2D(
            first.a * second.a + first.b * second.c,
            first.a * second.b + first.b * second.d,
            first.c * second.a + first.d * second.c,
            first.c * second.b + first.d * second.d,
            second.a * first.e + second.c * first.f + second.e,
            second.b * first.e + second.d * first.f + second.f,
        )

    def matrix(self, a, b, c, d, e, f):
        return Affine2D.product(Affine2D(a, b, c, d, e, f), self)

    # https://www.w3.org/TR/SVG11/coords.html#TranslationDefined
    def translate(self, tx, ty=0):
        if (0, 0) == (tx, ty):
            return self
        return self.matrix(1, 0, 0, 1, tx, ty)

    # https://www.w3.org/TR/SVG11/coords.html#ScalingDefined
    def scale(self, sx, sy=None):
        if sy is None:
            sy = sx
        return self.matrix(sx, 0, 0, sy, 0, 0)

    # https://www.w3.org/TR/SVG11/coords.html#RotationDefined
    # Note that rotation here is in radians
    def rotate(self, a, cx=0.0, cy=0.0):
        return (
            self.translate(cx, cy)
            .matrix(cos(a), sin(a), -sin(a), cos(a), 0, 0)
            .translate(-cx, -cy)
        )

    # https://www.w3.org/TR/SVG11/coords.html#SkewXDefined
    def skewx(self, a):
        return self.matrix(1, 0, tan(a), 1, 0, 0)

    # https://www.w3.org/TR/SVG11/coords.html#SkewYDefined
    def skewy(self, a):
        return self.matrix(1, tan(a), 0, 1, 0, 0)

    @classmethod
    def compose_ltr(cls, affines: Sequence["Affine2D"]) -> "Affine2D":
        """Creates merged transform equivalent to applying transforms left-to-right order.

        Affines apply like functions - f(g(x)) - so we merge them in reverse order.
        """
        return reduce(
            lambda acc, a: cls.product(a, acc), reversed(affines), cls.identity()
        )


Affine2D._identity = Affine2D(1, 0, 0, 1, 0, 0)


def _fix_rotate(args):
    args[0] = radians(args[0])


def _parse_args(raw_args: str):
    return [float(p) for p in _ARG_SEPARATOR_RE.split(raw_args.strip())]


def parse_svg_transform(raw_transform: str):
    transform = Affine2D.identity()

    for match in _TRANSFORM_RE.finditer(raw_transform):
        op = match.group(1).lower()
        args = _parse_args(match.group(2))
        _SVG_ARG_FIXUPS[op](args)
        transform = getattr(transform, op)(*args)

    return transform


def extract_translation(raw_transform: str) -> Tuple[float, float, str]:
    """Sum up the translate() functions of a transform attribute.

    Returns (dx, dy, residual) where residual is the transform text left once
    every translate() is removed. Raises ValueError on bad translate() args.
    """
    dx = dy = 0.0
    for match in _TRANSLATE_RE.finditer(raw_transform):
        args = _parse_args(match.group(1))
        if len(args) > 2:
            raise ValueError(f"Too many translate args: {match.group()!r}")
        dx += args[0]
        dy += args[1] if len(args) == 2 else 0.0
    residual = _TRANSLATE_RE.sub("", raw_transform)
    residual = _LIST_SEPARATOR_RE.sub(" ", residual).strip()
    return dx, dy, residual


# Elements whose children share their coordinate system
_CONTAINER_TAGS = frozenset(("g", "a", "switch"))

# Content referenced from elsewhere; positioned by whoever references it
_NON_RENDERED_TAGS = frozenset(
    (
        "defs",
        "clipPath",
        "mask",
        "pattern",
        "marker",
        "symbol",
        "linearGradient",
        "radialGradient",
        "filter",
        "style",
        "script",
        "title",
        "desc",
        "metadata",
    )
)

# Coordinates that default to 0 when absent, by element
_GEOMETRY_ATTRS = {
    "rect": (("x",), ("y",)),
    "image": (("x",), ("y",)),
    "use": (("x",), ("y",)),
    "text": (("x",), ("y",)),
    "foreignObject": (("x",), ("y",)),
    "svg": (("x",), ("y",)),
    "circle": (("cx",), ("cy",)),
    "ellipse": (("cx",), ("cy",)),
    "line": (("x1", "x2"), ("y1", "y2")),
}
_X_ATTRS = ("x", "x1", "x2", "cx")
_Y_ATTRS = ("y", "y1", "y2", "cy")

_URL_RE = re.compile(r"url\(\s*['\"]?#([^)'\"\s]+)['\"]?\s*\)")
_PAINT_ATTRS = ("fill", "stroke")
_GRADIENT_TAGS = frozenset(("linearGradient", "radialGradient"))


def _href_id(el):
    href = el.get("href", el.get(f"{{{svg_meta.xlinkns()}}}href", ""))
    return href[1:] if href.startswith("#") else None


def _gradient_units(gradient, ids: Dict[str, etree._Element]) -> str:
    # gradientUnits is inherited along href chains
    seen = set()
    el = gradient
    while el is not None and id(el) not in seen:
        seen.add(id(el))
        units = el.get("gradientUnits")
        if units is not None:
            return units.strip()
        el = ids.get(_href_id(el))
    return "objectBoundingBox"


def _referenced_ids(el, attr_names):
    for attr_name in attr_names:
        yield from _URL_RE.findall(el.get(attr_name, ""))
    style = el.get("style")
    if style:
        for declaration in style.split(";"):
            name, _, value = declaration.partition(":")
            if name.strip() in attr_names:
                yield from _URL_RE.findall(value)


def _paints_in_user_space(
    el, ids: Dict[str, etree._Element], inherited_only=False
) -> bool:
    for ref in _referenced_ids(el, _PAINT_ATTRS):
        target = ids.get(ref)
        if target is None:
            continue
        tag = svg_meta.strip_ns(target.tag)
        if tag == "pattern":
            return True
        if tag in _GRADIENT_TAGS and _gradient_units(target, ids) == "userSpaceOnUse":
            return True
    if inherited_only:
        return False
    for ref in _referenced_ids(el, ("clip-path", "mask")):
        target = ids.get(ref)
        if target is None:
            continue
        units = target.get("clipPathUnits", target.get("maskContentUnits", ""))
        if units.strip() != "objectBoundingBox":
            return True
    return False


def _parses_as_numbers(value: str, even=False) -> bool:
    try:
        numbers = [float(v) for v in _LIST_SEPARATOR_RE.split(value.strip()) if v]
    except ValueError:
        return False
    return not even or len(numbers) % 2 == 0


def _is_transferable(el, ids: Dict[str, etree._Element]) -> bool:
    tag = svg_meta.strip_ns(el.tag)
    if tag in _NON_RENDERED_TAGS:
        return True
    if _paints_in_user_space(el, ids):
        return False
    if tag == "path":
        try:
            parse_path(el.get("d", ""))
        except ValueError:
            return False
    if tag in ("polyline", "polygon"):
        if not _parses_as_numbers(el.get("points", ""), even=True):
            return False
    for attr_name in _X_ATTRS + _Y_ATTRS:
        value = el.get(attr_name)
        if value is not None and not _parses_as_numbers(value):
            return False
    if tag == "svg" and el.getparent() is not None:
        return True
    # a child with its own transform just gets ours prepended
    return all(
        _is_transferable(child, ids)
        for child in el.iterchildren(etree.Element)
        if "transform" not in child.attrib
    )


def _shift_list(value: str, delta: float) -> str:
    values = [v for v in _LIST_SEPARATOR_RE.split(value.strip()) if v]
    return " ".join(format_number(float(v) + delta) for v in values)


def _shift_points(value: str, dx: float, dy: float) -> str:
    values = [float(v) for v in _LIST_SEPARATOR_RE.split(value.strip()) if v]
    if len(values) % 2:
        raise ValueError(f"Odd number of coordinates in points {value!r}")
    return " ".join(
        f"{format_number(x + dx)},{format_number(y + dy)}"
        for x, y in zip(values[::2], values[1::2])
    )


def _prepend_translation(el, dx: float, dy: float):
    translation = f"translate({format_number(dx)} {format_number(dy)})"
    el.attrib["transform"] = f"{translation} {el.attrib['transform']}"


def _shift_attributes(el, tag: str, dx: float, dy: float):
    x_defaults, y_defaults = _GEOMETRY_ATTRS.get(tag, ((), ()))
    for attr_names, defaults, delta in (
        (_X_ATTRS, x_defaults, dx),
        (_Y_ATTRS, y_defaults, dy),
    ):
        for attr_name in attr_names:
            value = el.get(attr_name)
            if value is None:
                if attr_name not in defaults:
                    continue
                value = "0"
            el.attrib[attr_name] = _shift_list(value, delta)


def _apply_translation(el, dx: float, dy: float):
    tag = svg_meta.strip_ns(el.tag)
    if tag in _NON_RENDERED_TAGS:
        return
    is_root = el.getparent() is None
    if tag in _CONTAINER_TAGS or (tag == "svg" and is_root):
        _translate_children(el, dx, dy)
        return

    if tag == "path" and "d" in el.attrib:
        el.attrib["d"] = translate_path_data(el.attrib["d"], dx, dy)
    if tag in ("polyline", "polygon") and el.get("points", "").strip():
        el.attrib["points"] = _shift_points(el.attrib["points"], dx, dy)
    _shift_attributes(el, tag, dx, dy)
    # a nested viewport establishes its own coordinates for its children
    if tag != "svg":
        _translate_children(el, dx, dy)


def _translate_children(el, dx: float, dy: float):
    for child in el.iterchildren(etree.Element):
        if "transform" in child.attrib:
            _prepend_translation(child, dx, dy)
        else:
            _apply_translation(child, dx, dy)


def collapse_transform(el, ids: Dict[str, etree._Element]) -> bool:
    """Bake a pure translation transform on el into coordinates.

    Returns True if the transform attribute was removed. Anything but a pure
    translation, or content that can't absorb the translation, leaves el as
    it was.
    """
    raw_transform = el.get("transform")
    if raw_transform is None:
        return False
    try:
        dx, dy, residual = extract_translation(raw_transform)
    except ValueError:
        logging.debug("Unparseable transform %r left as is", raw_transform)
        return False
    if residual:
        return False
    if dx == 0 and dy == 0:
        del el.attrib["transform"]
        return True
    tag = svg_meta.strip_ns(el.tag)
    if tag in _NON_RENDERED_TAGS:
        # its own transform positions the content in the referencing user space
        logging.debug("Keeping %r on <%s>", raw_transform, tag)
        return False
    if not _is_transferable(el, ids) or any(
        _paints_in_user_space(a, ids, inherited_only=True) for a in el.iterancestors()
    ):
        logging.debug(
            "Keeping %r on <%s>, content can't absorb it", raw_transform, tag
        )
        return False

    snapshot = [(e, dict(e.attrib)) for e in el.iter(etree.Element)]
    del el.attrib["transform"]
    try:
        _apply_translation(el, dx, dy)
    except ValueError as e:
        logging.warning("Restoring %r after failed bake-in: %s", raw_transform, e)
        for touched, attrib in snapshot:
            touched.attrib.clear()
            touched.attrib.update(attrib)
        return False
    return True


def element_ids(root) -> MutableMapping[str, etree._Element]:
    return {el.get("id"): el for el in root.iter(etree.Element) if el.get("id")}


def collapse_transforms(root) -> int:
    """Remove every translate-only transform that can be baked in.

    Returns the number of transform attributes removed.
    """
    ids = element_ids(root)
    collapsed = 0
    for el in list(root.iter(etree.Element)):
        if collapse_transform(el, ids):
            collapsed += 1
    return collapsed
