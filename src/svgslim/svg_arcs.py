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

"""Convert Inkscape's legacy sodipodi:type="arc" shapes to plain SVG.

Older Inkscape wrote arcs as a circle or ellipse whose real geometry lives in
sodipodi:cx, cy, rx, ry, start and end (radians). Renderers only see the
circle/ellipse, so anything but a full turn draws wrong once the editor data
is stripped.
"""
from math import cos, isfinite, pi, sin
from absl import logging
from lxml import etree  # pytype: disable=import-error
from typing import NamedTuple
from svgslim import svg_meta
from svgslim.svg_numbers import format_number
from svgslim.svg_path import path_to_string
from svgslim.svg_path_iter import PathCommand


_EPSILON = 1e-6
_TWO_PI = 2 * pi

# Never carried over, the replacement defines its own geometry
_GEOMETRY_ATTRS = frozenset(("cx", "cy", "r", "rx", "ry", "d"))


class SodipodiArc(NamedTuple):
    cx: float
    cy: float
    rx: float
    ry: float
    start: float
    end: float

    def point_at(self, angle):
        return (self.cx + self.rx * cos(angle), self.cy + self.ry * sin(angle))

    def is_full_turn(self) -> bool:
        span = abs(self.end - self.start)
        return span < _EPSILON or abs(span - _TWO_PI) < _EPSILON

    def is_circular(self) -> bool:
        return abs(self.rx - self.ry) < _EPSILON

    def path_commands(self):
        start_x, start_y = self.point_at(self.start)
        end_x, end_y = self.point_at(self.end)
        span = self.end - self.start
        if span < 0:
            span += _TWO_PI
        large_arc = 1 if span > pi else 0
        # Inkscape angles increase clockwise on screen; assumed, not verified
        # for every start/end ordering
        sweep = 1
        return (
            PathCommand("M", (start_x, start_y)),
            PathCommand("A", (self.rx, self.ry, 0, large_arc, sweep, end_x, end_y)),
        )


def _sodipodi_attr(name):
    return f"{{{svg_meta.sodipodins()}}}{name}"


def _strip_sodipodi_attrs(el):
    sodipodi_attrs = [
        n for n in el.attrib if svg_meta.splitns(n)[0] == svg_meta.sodipodins()
    ]
    for name in sodipodi_attrs:
        del el.attrib[name]


def _float_attr(el, name, default):
    value = el.get(_sodipodi_attr(name))
    if value is None:
        return default
    result = float(value)
    if not isfinite(result):
        raise ValueError(f"sodipodi:{name} is not a finite number: {value!r}")
    return result


def parse_sodipodi_arc(el) -> SodipodiArc:
    """Read the arc geometry of el, angles normalized into [0, 2pi).

    Raises ValueError if any of the values isn't a number.
    """
    return SodipodiArc(
        cx=_float_attr(el, "cx", 0.0),
        cy=_float_attr(el, "cy", 0.0),
        rx=abs(_float_attr(el, "rx", 0.0)),
        ry=abs(_float_attr(el, "ry", 0.0)),
        start=_float_attr(el, "start", 0.0) % _TWO_PI,
        end=_float_attr(el, "end", _TWO_PI) % _TWO_PI,
    )


def _replacement(el, arc: SodipodiArc):
    ns = etree.QName(el).namespace
    if arc.is_full_turn():
        if arc.is_circular():
            new_el = etree.Element(etree.QName(ns, "circle"))
            new_el.attrib.update(
                {
                    "cx": format_number(arc.cx),
                    "cy": format_number(arc.cy),
                    "r": format_number(arc.rx),
                }
            )
        else:
            # an ellipse, not a path: an arc command between identical
            # points would draw nothing
            new_el = etree.Element(etree.QName(ns, "ellipse"))
            new_el.attrib.update(
                {
                    "cx": format_number(arc.cx),
                    "cy": format_number(arc.cy),
                    "rx": format_number(arc.rx),
                    "ry": format_number(arc.ry),
                }
            )
    else:
        new_el = etree.Element(etree.QName(ns, "path"))
        new_el.attrib["d"] = path_to_string(arc.path_commands())

    for name, value in el.attrib.items():
        if svg_meta.splitns(name)[0] == svg_meta.sodipodins():
            continue
        if name in _GEOMETRY_ATTRS:
            continue
        new_el.attrib[name] = value
    new_el.tail = el.tail
    return new_el


def convert_sodipodi_arcs(root: etree.Element) -> int:
    """Replace every sodipodi arc circle/ellipse under root.

    Returns the number of elements replaced.
    """
    converted = 0
    arcs = [
        el
        for el in root.iter(etree.Element)
        if svg_meta.strip_ns(el.tag) in ("circle", "ellipse")
        and el.get(_sodipodi_attr("type")) == "arc"
    ]
    for el in arcs:
        try:
            arc = parse_sodipodi_arc(el)
        except ValueError as e:
            logging.warning("Unable to convert sodipodi arc: %s", e)
            _strip_sodipodi_attrs(el)
            continue
        if arc.rx <= 0 or arc.ry <= 0:
            logging.warning("Skipping sodipodi arc with zero radius")
            _strip_sodipodi_attrs(el)
            continue
        el.getparent().replace(el, _replacement(el, arc))
        converted += 1
    return converted
