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

"""Approximate elliptical arcs with cubic beziers.

Follows the endpoint to center conversion of
https://www.w3.org/TR/SVG11/implnote.html#ArcConversionEndpointToCenter
then splits the sweep into pieces of at most 90 degrees.
"""
from math import atan2, ceil, cos, pi, radians, sin, sqrt, tan
from typing import Iterator, Tuple
from svgslim.geometric_types import Point


def _angle(ux, uy, vx, vy) -> float:
    return atan2(ux * vy - uy * vx, ux * vx + uy * vy)


def arc_to_cubic(
    start_point: Tuple[float, float],
    rx: float,
    ry: float,
    rotation: float,
    large: int,
    sweep: int,
    end_point: Tuple[float, float],
) -> Iterator[Tuple[Point, Point, Point]]:
    """Yield (control1, control2, end) for each cubic replacing the arc.

    rotation is in degrees, as written in path data. A zero radius makes
    the arc a straight line, yielded as a single degenerate cubic.
    Nothing is yielded when start and end are the same point.
    """
    x1, y1 = start_point
    x2, y2 = end_point
    if (x1, y1) == (x2, y2):
        return
    rx, ry = abs(rx), abs(ry)
    if rx == 0 or ry == 0:
        yield Point(x1, y1), Point(x2, y2), Point(x2, y2)
        return

    phi = radians(rotation)
    cos_phi, sin_phi = cos(phi), sin(phi)

    # step 1: start point in the ellipse's axis aligned frame
    half_dx = (x1 - x2) / 2
    half_dy = (y1 - y2) / 2
    x1p = cos_phi * half_dx + sin_phi * half_dy
    y1p = -sin_phi * half_dx + cos_phi * half_dy

    # radii too small to reach the end point scale up uniformly
    scale = (x1p / rx) ** 2 + (y1p / ry) ** 2
    if scale > 1:
        rx, ry = rx * sqrt(scale), ry * sqrt(scale)

    # step 2: center in the axis aligned frame
    rx2, ry2 = rx * rx, ry * ry
    numerator = rx2 * ry2 - rx2 * y1p * y1p - ry2 * x1p * x1p
    denominator = rx2 * y1p * y1p + ry2 * x1p * x1p
    coef = sqrt(max(0.0, numerator / denominator))
    if large == sweep:
        coef = -coef
    cxp = coef * rx * y1p / ry
    cyp = -coef * ry * x1p / rx

    # step 3: center in user space
    cx = cos_phi * cxp - sin_phi * cyp + (x1 + x2) / 2
    cy = sin_phi * cxp + cos_phi * cyp + (y1 + y2) / 2

    # step 4: start angle and sweep
    ux, uy = (x1p - cxp) / rx, (y1p - cyp) / ry
    vx, vy = (-x1p - cxp) / rx, (-y1p - cyp) / ry
    theta1 = _angle(1, 0, ux, uy)
    delta_theta = _angle(ux, uy, vx, vy)
    if not sweep and delta_theta > 0:
        delta_theta -= 2 * pi
    elif sweep and delta_theta < 0:
        delta_theta += 2 * pi

    def point(angle):
        return Point(
            cx + rx * cos_phi * cos(angle) - ry * sin_phi * sin(angle),
            cy + rx * sin_phi * cos(angle) + ry * cos_phi * sin(angle),
        )

    def derivative(angle):
        return (
            -rx * cos_phi * sin(angle) - ry * sin_phi * cos(angle),
            -rx * sin_phi * sin(angle) + ry * cos_phi * cos(angle),
        )

    segments = max(1, ceil(abs(delta_theta) / (pi / 2) - 1e-9))
    step = delta_theta / segments
    handle = 4 / 3 * tan(step / 4)
    start = Point(x1, y1)
    for i in range(segments):
        angle1 = theta1 + i * step
        angle2 = angle1 + step
        end = Point(x2, y2) if i == segments - 1 else point(angle2)
        d1x, d1y = derivative(angle1)
        d2x, d2y = derivative(angle2)
        yield (
            start + (handle * d1x, handle * d1y),
            end + (-handle * d2x, -handle * d2y),
            end,
        )
        start = end
