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

import re
from types import MappingProxyType
from lxml import etree  # pytype: disable=import-error
from typing import FrozenSet, Tuple
from svgslim.geometric_types import Rect


def svgns():
    return "http://www.w3.org/2000/svg"


def xlinkns():
    return "http://www.w3.org/1999/xlink"


def xmlns():
    return "http://www.w3.org/XML/1998/namespace"


def sodipodins():
    return "http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd"


def inkscapens():
    return "http://www.inkscape.org/namespaces/inkscape"


# Namespaces whose content is editor bookkeeping, never rendered
EDITOR_NAMESPACES = frozenset((sodipodins(), inkscapens()))


def splitns(name):
    qn = etree.QName(name)
    return qn.namespace, qn.localname


def strip_ns(tagname):
    return splitns(tagname)[1]


# https://www.w3.org/TR/SVG11/paths.html#PathData
_CMD_ARGS = {
    "m": 2,
    "z": 0,
    "l": 2,
    "h": 1,
    "v": 1,
    "c": 6,
    "s": 4,
    "q": 4,
    "t": 2,
    "a": 7,
}
_CMD_ARGS.update({k.upper(): v for k, v in _CMD_ARGS.items()})


def check_cmd(cmd, args):
    cmd_args = num_args(cmd)
    if cmd_args == 0:
        if args:
            raise ValueError(f"{cmd} has no args, {len(args)} invalid")
    elif not args or len(args) % cmd_args != 0:
        raise ValueError(f"{cmd} has sets of {cmd_args} args, {len(args)} invalid")
    return cmd_args


def num_args(cmd):
    if not cmd in _CMD_ARGS:
        raise ValueError(f'Invalid svg command "{cmd}"')
    return _CMD_ARGS[cmd]


def cmds():
    return _CMD_ARGS.keys()


# For each command iterable of x-coords and iterable of y-coords
_CMD_COORDS = {
    "m": ((0,), (1,)),
    "z": ((), ()),
    "l": ((0,), (1,)),
    "h": ((0,), ()),
    "v": ((), (0,)),
    "c": ((0, 2, 4), (1, 3, 5)),
    "s": ((0, 2), (1, 3)),
    "q": ((0, 2), (1, 3)),
    "t": ((0,), (1,)),
    "a": ((5,), (6,)),
}
_CMD_COORDS.update({k.upper(): v for k, v in _CMD_COORDS.items()})


def cmd_coords(cmd) -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
    if not cmd in _CMD_ARGS:
        raise ValueError(f'Invalid svg command "{cmd}"')
    return _CMD_COORDS[cmd]


def parse_view_box(s: str) -> Rect:
    box = tuple(float(v) for v in re.split(r"[,\s]+", s.strip()))
    if len(box) != 4:
        raise ValueError(f"Unable to parse viewBox: {s!r}")
    return Rect(*box)


# Attribute names as understood by renderers, lower case; prefixed names use
# their conventional prefix
KNOWN_SVG_ATTRS: FrozenSet[str] = frozenset(
    (
        "id",
        "class",
        "style",
        "transform",
        "opacity",
        "display",
        "visibility",
        "fill",
        "fill-opacity",
        "fill-rule",
        "clip-rule",
        "stroke",
        "stroke-width",
        "stroke-linecap",
        "stroke-linejoin",
        "stroke-dasharray",
        "stroke-dashoffset",
        "stroke-miterlimit",
        "stroke-opacity",
        "clip-path",
        "mask",
        "filter",
        "vector-effect",
        "shape-rendering",
        "text-rendering",
        "paint-order",
        "pointer-events",
        "x",
        "y",
        "x1",
        "y1",
        "x2",
        "y2",
        "cx",
        "cy",
        "r",
        "rx",
        "ry",
        "width",
        "height",
        "d",
        "points",
        "pathlength",
        "dx",
        "dy",
        "font-family",
        "font-size",
        "font-weight",
        "font-style",
        "text-anchor",
        "dominant-baseline",
        "letter-spacing",
        "word-spacing",
        "viewbox",
        "preserveaspectratio",
        "href",
        "xlink:href",
        "offset",
        "stop-color",
        "stop-opacity",
        "gradientunits",
        "gradienttransform",
        "fx",
        "fy",
        "markerwidth",
        "markerheight",
        "refx",
        "refy",
        "orient",
        "markerunits",
        "patternunits",
        "patterncontentunits",
        "patterntransform",
        "maskunits",
        "maskcontentunits",
        "clippathunits",
        "version",
        "baseprofile",
        "xmlns",
        "xmlns:xlink",
        "xml:space",
    )
)

# Rounded as a single number
NUMERIC_ATTRS: FrozenSet[str] = frozenset(
    (
        "x",
        "y",
        "x1",
        "y1",
        "x2",
        "y2",
        "cx",
        "cy",
        "r",
        "rx",
        "ry",
        "width",
        "height",
        "dx",
        "dy",
        "font-size",
        "stroke-width",
        "opacity",
        "fill-opacity",
        "stroke-opacity",
        "stroke-dashoffset",
        "stroke-miterlimit",
        "letter-spacing",
        "word-spacing",
        "pathlength",
    )
)

# Rounded token by token
NUMERIC_LIST_ATTRS: FrozenSet[str] = frozenset(("viewbox", "points", "stroke-dasharray"))

# Inheritable styling that may move between a group and its children
PRESENTATION_ATTRS: FrozenSet[str] = frozenset(
    (
        "fill",
        "stroke",
        "stroke-width",
        "stroke-linecap",
        "stroke-linejoin",
        "stroke-dasharray",
        "stroke-dashoffset",
        "stroke-miterlimit",
        "fill-rule",
        "opacity",
        "fill-opacity",
        "stroke-opacity",
        "clip-path",
        "mask",
        "filter",
        "vector-effect",
        "paint-order",
        "shape-rendering",
        "text-rendering",
    )
)

SHAPE_TAGS: FrozenSet[str] = frozenset(
    ("path", "circle", "ellipse", "rect", "line", "polyline", "polygon")
)

# Order matters, it's the order common attributes get hoisted in
SHAPE_GROUPABLE_ATTRS: Tuple[str, ...] = (
    "fill",
    "stroke",
    "stroke-width",
    "stroke-linecap",
    "stroke-linejoin",
    "stroke-dasharray",
    "stroke-dashoffset",
    "stroke-miterlimit",
    "fill-rule",
    "opacity",
    "fill-opacity",
    "stroke-opacity",
)

TEXT_TAGS: FrozenSet[str] = frozenset(("text", "tspan"))

TEXT_GROUPABLE_ATTRS: Tuple[str, ...] = (
    "font-family",
    "font-size",
    "text-anchor",
    "font-weight",
    "font-style",
)

# makes dict read-only
ATTRIB_DEFAULTS = MappingProxyType(
    {
        "letter-spacing": frozenset(("0", "normal")),
        "word-spacing": frozenset(("0", "normal")),
        "paint-order": frozenset(
            ("normal", "fill stroke markers", "markers stroke fill")
        ),
        "fill-opacity": frozenset(("1",)),
        "stroke-opacity": frozenset(("1",)),
        "opacity": frozenset(("1",)),
        "clip-rule": frozenset(("nonzero",)),
        "fill-rule": frozenset(("nonzero",)),
        "stroke-miterlimit": frozenset(("4",)),
        "stroke-linecap": frozenset(("butt",)),
        "stroke-linejoin": frozenset(("miter", "round")),
        f"{{{xmlns()}}}space": frozenset(("preserve",)),
        "font-weight": frozenset(("400",)),
    }
)

# Opacity at or above this is treated as fully opaque
OPACITY_THRESHOLD = 0.9

ROOT_DEFAULTS = MappingProxyType(
    {
        "version": "1.1",
        "baseProfile": "full",
        "preserveAspectRatio": "xMidYMid meet",
    }
)


def is_default_value(name: str, value: str) -> bool:
    defaults = ATTRIB_DEFAULTS.get(name)
    if defaults is not None and value in defaults:
        return True
    if name == "opacity":
        try:
            return float(value) >= OPACITY_THRESHOLD
        except ValueError:
            return False
    return False
