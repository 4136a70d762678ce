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

"""Precision reduction and compact rendering of numbers in attribute values.

Rounding works on the exact binary value of the parsed number and rounds
halves away from zero, so 0.25 becomes .3 but 1.005 (really 1.00499...)
becomes 1.
"""
import math
import re
from decimal import Context, Decimal, ROUND_HALF_UP
from typing import Union


# Number tokens inside attribute values such as d, points or viewBox
_NUMBER_RE = re.compile(r"-?\d*\.?\d+(?:e[-+]?\d+)?", re.IGNORECASE)
# A whole attribute value that is a single number
_SCALAR_RE = re.compile(r"\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?\s*")
# 0110 style tokens only occur when arc flags are written without separators
_PACKED_FLAGS_RE = re.compile(r"-?0\d")

# Enough digits for any finite double in fixed notation
_CONTEXT = Context(prec=400, rounding=ROUND_HALF_UP)


def _compact(text: str) -> str:
    # text is fixed point notation, e.g. -0.50, 12, -0
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    negative = text.startswith("-")
    text = text.lstrip("-")
    if text.startswith("0."):
        text = text[1:]
    if text in ("", "0"):
        return "0"
    return "-" + text if negative else text


def format_number(value: Union[int, float]) -> str:
    """Shortest compact text for value, e.g. .5 rather than 0.5, never 1e-07."""
    if isinstance(value, int) or value.is_integer():
        return _compact(str(int(value)))
    return _compact(f"{Decimal(repr(value)):f}")


def round_fixed(value: str, precision: int) -> str:
    """Round a numeric attribute value to precision fractional digits.

    Values that aren't a finite number are returned unchanged.
    """
    if not _SCALAR_RE.fullmatch(value):
        return value
    number = float(value)
    if not math.isfinite(number):
        return value
    quantum = Decimal(1).scaleb(-precision)
    rounded = Decimal(number).quantize(quantum, context=_CONTEXT)
    return _compact(f"{rounded:f}")


def _fuses(previous: str, current: str) -> bool:
    # Would writing current right after previous read as a different number?
    if current.startswith("-"):
        return False
    if current.startswith("."):
        return "." not in previous and "e" not in previous.lower()
    return True


def _round_tokens(data: str, precision: int) -> str:
    out = []
    pos = 0
    previous = None
    for match in _NUMBER_RE.finditer(data):
        start, end = match.span()
        token = match.group()
        if _PACKED_FLAGS_RE.match(token):
            rounded = token
        else:
            rounded = round_fixed(token, precision)
        if start > pos:
            out.append(data[pos:start])
        elif previous is not None and _fuses(previous, rounded):
            out.append(" ")
        out.append(rounded)
        previous = rounded
        pos = end
    out.append(data[pos:])
    return "".join(out)


def round_numeric_list(value: str, precision: int) -> str:
    return _round_tokens(value, precision)


def round_path_data(d: str, precision: int) -> str:
    """Round every number in path data d.

    Numbers that were only separated by a decimal point, as in l-69.3.3,
    are separated by a space when rounding drops that point.
    """
    return _round_tokens(d, precision)
