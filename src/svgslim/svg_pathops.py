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

"""Path commands => skia-pathops constructs, for geometry queries."""
import pathops  # pytype: disable=import-error
from typing import Optional
from svgslim.arc_to_cubic import arc_to_cubic
from svgslim.geometric_types import Rect
from svgslim.svg_path import PathCommandSeq
from svgslim.svg_transform import Affine2D


# Absolute coords assumed
# S,T,H,V should never occur because we eliminate shorthand
_SVG_CMD_TO_SKIA_FN = {
    "M": pathops.Path.moveTo,
    "L": pathops.Path.lineTo,
    "Q": pathops.Path.quadTo,
    "Z": pathops.Path.close,
    "C": pathops.Path.cubicTo,
}


def skia_path(svg_cmds: PathCommandSeq) -> pathops.Path:
    sk_path = pathops.Path()
    current = start = (0.0, 0.0)
    for cmd, args in svg_cmds:
        if cmd == "A":
            rx, ry, rotation, large, sweep, x, y = args
            for c1, c2, end in arc_to_cubic(
                current, rx, ry, rotation, large, sweep, (x, y)
            ):
                sk_path.cubicTo(*c1, *c2, *end)
        elif cmd in _SVG_CMD_TO_SKIA_FN:
            _SVG_CMD_TO_SKIA_FN[cmd](sk_path, *args)
        else:
            raise ValueError(f'No mapping to Skia for "{cmd} {args}"')

        if cmd == "Z":
            current = start
        else:
            current = tuple(args[-2:])
        if cmd == "M":
            start = current
    return sk_path


def bounding_box(
    svg_cmds: PathCommandSeq, affine: Affine2D = Affine2D.identity()
) -> Optional[Rect]:
    """Tight bounds of the commands once transformed by affine, if any."""
    sk_path = skia_path(svg_cmds)
    if affine != Affine2D.identity():
        sk_path = sk_path.transform(*affine)
    # a lone moveTo has bounds but nothing to draw
    if all(
        verb in ("moveTo", "closePath", "endPath") for verb, _ in sk_path.segments
    ):
        return None
    return Rect.from_bounds(*sk_path.bounds)
