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

"""Geometric bounds of svg content, used to resize and crop the canvas.

Bounds are geometric only: stroke width, markers and filters don't count.
"""
import re
from absl import logging
from lxml import etree  # pytype: disable=import-error
from typing import Optional, Tuple
from svgslim import svg_meta
from svgslim.geometric_types import Rect
from svgslim.svg_numbers import format_number
from svgslim.svg_path import absolute_commands, parse_path
from svgslim.svg_path_iter import PathCommand
from svgslim.svg_pathops import bounding_box
from svgslim.svg_transform import Affine2D, parse_svg_transform


# user units per unit
UNIT_CONVERSION = {
    "px": 1.0,
    "pt": 1.25,
    "pc": 15.0,
    "mm": 3.7795275591,
    "cm": 37.795275591,
    "in": 96.0,
}

_LENGTH_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)([a-zA-Z]*)\s*$")

_POINTS_SEPARATOR_RE = re.compile(r"[\s,]+")

_SKIP_TAGS = frozenset(
    (
        "defs",
        "symbol",
        "clipPath",
        "mask",
        "pattern",
        "marker",
        "linearGradient",
        "radialGradient",
        "filter",
        "metadata",
        "title",
        "desc",
        "style",
        "script",
    )
)


def parse_length(value: Optional[str], default: float = 0.0) -> float:
    """Convert an absolute svg length like "2in" to user units."""
    if value is None:
        return default
    match = _LENGTH_RE.match(value)
    if match is None:
        return default
    number, unit = match.groups()
    unit = unit.lower() or "px"
    if unit not in UNIT_CONVERSION:
        logging.warning("Unknown unit in %r, treating as px", value)
        return float(number)
    return float(number) * UNIT_CONVERSION[unit]


def _lengths(el, *names):
    return tuple(parse_length(el.get(n)) for n in names)


def _ellipse_commands(cx, cy, rx, ry):
    if rx <= 0 or ry <= 0:
        return ()
    return (
        PathCommand("M", (cx - rx, cy)),
        PathCommand("A", (rx, ry, 0, 1, 0, cx + rx, cy)),
        PathCommand("A", (rx, ry, 0, 1, 0, cx - rx, cy)),
        PathCommand("Z", ()),
    )


def _rect_commands(x, y, w, h):
    if w <= 0 or h <= 0:
        return ()
    return (
        PathCommand("M", (x, y)),
        PathCommand("L", (x + w, y)),
        PathCommand("L", (x + w, y + h)),
        PathCommand("L", (x, y + h)),
        PathCommand("Z", ()),
    )


def _points_commands(points: str, close: bool):
    coords = [float(v) for v in _POINTS_SEPARATOR_RE.split(points.strip()) if v]
    if len(coords) < 4:
        return ()
    cmds = [PathCommand("M", tuple(coords[:2]))]
    for i in range(2, len(coords) - 1, 2):
        cmds.append(PathCommand("L", tuple(coords[i : i + 2])))
    if close:
        cmds.append(PathCommand("Z", ()))
    return tuple(cmds)


def _shape_commands(el) -> Tuple[PathCommand, ...]:
    tag = svg_meta.strip_ns(el.tag)
    if tag == "path":
        return tuple(absolute_commands(parse_path(el.get("d", ""))))
    if tag in ("rect", "image"):
        return _rect_commands(*_lengths(el, "x", "y", "width", "height"))
    if tag == "circle":
        cx, cy, r = _lengths(el, "cx", "cy", "r")
        return _ellipse_commands(cx, cy, r, r)
    if tag == "ellipse":
        return _ellipse_commands(*_lengths(el, "cx", "cy", "rx", "ry"))
    if tag == "line":
        x1, y1, x2, y2 = _lengths(el, "x1", "y1", "x2", "y2")
        return (PathCommand("M", (x1, y1)), PathCommand("L", (x2, y2)))
    if tag in ("polyline", "polygon"):
        return _points_commands(el.get("points", ""), tag == "polygon")
    return ()


def _element_transform(el, root) -> Affine2D:
    transforms = []
    node = el
    while node is not None and node is not root:
        raw = node.get("transform")
        if raw:
            transforms.append(parse_svg_transform(raw))
        node = node.getparent()
    # innermost first, outer transforms apply last
    return Affine2D.compose_ltr(transforms)


def _is_skipped(el, root) -> bool:
    node = el
    while node is not None and node is not root:
        if svg_meta.strip_ns(node.tag) in _SKIP_TAGS:
            return True
        if node.get("display") == "none":
            return True
        node = node.getparent()
    return False


def content_bounds(root: etree.Element) -> Optional[Rect]:
    """Union of the geometric bounds of every rendered shape under root.

    Returns None if nothing under root has a measurable shape.
    """
    result = None
    for el in root.iter(etree.Element):
        if el is root or _is_skipped(el, root):
            continue
        try:
            cmds = _shape_commands(el)
            if not cmds:
                continue
            bounds = bounding_box(cmds, _element_transform(el, root))
        except ValueError as e:
            logging.debug("No bounds for <%s>: %s", svg_meta.strip_ns(el.tag), e)
            continue
        if bounds is None:
            continue
        result = bounds if result is None else result.union(bounds)
    return result


def _fallback_view_box(root) -> Rect:
    raw_view_box = root.get("viewBox")
    if raw_view_box:
        try:
            view_box = svg_meta.parse_view_box(raw_view_box)
        except ValueError:
            view_box = None
        if view_box is not None:
            return view_box.snap_outward()
    return Rect(
        0,
        0,
        parse_length(root.get("width"), 100.0),
        parse_length(root.get("height"), 100.0),
    ).snap_outward()


def _view_box_text(rect: Rect) -> str:
    return " ".join(format_number(v) for v in rect)


def _at_least_one(rect: Rect) -> Rect:
    return rect._replace(w=rect.w or 1, h=rect.h or 1)


def resize(root: etree.Element, width: float, height: float):
    """Fit the viewBox to the content and set the canvas size."""
    bounds = content_bounds(root)
    if bounds is not None and not bounds.empty():
        view_box = _at_least_one(bounds.snap_outward())
    else:
        logging.warning("Unable to measure content, keeping the current canvas")
        view_box = _fallback_view_box(root)
        if view_box.empty():
            view_box = Rect(0, 0, 100, 100)
    root.attrib["width"] = format_number(width)
    root.attrib["height"] = format_number(height)
    root.attrib["viewBox"] = _view_box_text(view_box)


def autocrop(root: etree.Element, margin: float = 3) -> bool:
    """Shrink the viewBox to the content plus margin.

    Returns False, leaving root untouched, if the content can't be measured.
    """
    bounds = content_bounds(root)
    if bounds is None or bounds.empty():
        logging.warning("Unable to measure content, not cropping")
        return False
    x_min, y_min, x_max, y_max = bounds.bounds()
    padded = Rect.from_bounds(
        x_min - margin, y_min - margin, x_max + margin, y_max + margin
    )
    root.attrib["viewBox"] = _view_box_text(_at_least_one(padded.snap_outward()))
    return True
