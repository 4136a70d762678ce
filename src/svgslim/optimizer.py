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

"""Runs the optimization passes over svg text, in a fixed order.

Callers get either the fully optimized document or, if any pass fails, the
source exactly as given plus a diagnostic.
"""
import dataclasses
from absl import logging
import math
import re
from scour import scour
from typing import Callable, Optional
from svgslim.svg import SVG
from svgslim.svg_grouping import MarkupSize, markup_size
from svgslim.svg_preserve import (
    inject_preserve_markers,
    restore_preserved_attributes,
)


EMPTY_SVG = '<svg xmlns="http://www.w3.org/2000/svg"/>'

GROUPING_MODES = ("none", "group", "remove")

MAX_PRECISION = 5

_SVG_TAG_RE = re.compile(r"<svg\b", re.IGNORECASE)

# svg text in, svg text out
ExternalOptimizer = Callable[[str], str]

# Editor data is kept so sodipodi arcs survive until they are converted.
# Numbers keep enough digits for our own rounding to decide.
_SCOUR_ARGS = (
    "--remove-metadata",
    "--remove-descriptive-elements",
    "--enable-comment-stripping",
    "--strip-xml-prolog",
    "--indent=none",
    "--no-line-breaks",
    "--keep-editor-data",
    "--disable-embed-rasters",
    "--set-precision=8",
)


def scour_stage(svg: str) -> str:
    """General purpose cleanup by scour, ahead of our own passes."""
    options = scour.parse_args(list(_SCOUR_ARGS))
    return scour.scourString(svg, options)


def identity_stage(svg: str) -> str:
    return svg


@dataclasses.dataclass
class OptimizeOptions:
    precision: int = 1
    path_precision: int = 2
    remove_tspan: bool = True
    remove_styling: bool = True
    grouping_mode: str = "group"
    remove_default_values: bool = True
    remove_font_family: bool = False
    remove_font_size: bool = False
    convert_legacy_arcs: bool = True
    use_custom_dimensions: bool = False
    custom_width: float = 100
    custom_height: float = 100

    def __post_init__(self):
        for name in ("precision", "path_precision"):
            value = getattr(self, name)
            if not isinstance(value, int) or not 0 <= value <= MAX_PRECISION:
                raise ValueError(
                    f"{name} must be an integer in [0, {MAX_PRECISION}], not {value!r}"
                )
        if self.grouping_mode not in GROUPING_MODES:
            raise ValueError(
                f"grouping_mode must be one of {GROUPING_MODES}, not {self.grouping_mode!r}"
            )
        if self.use_custom_dimensions:
            for name in ("custom_width", "custom_height"):
                value = getattr(self, name)
                if not math.isfinite(value) or value <= 0:
                    raise ValueError(f"{name} must be a positive number, not {value!r}")

    def optimization_enabled(self) -> bool:
        """Whether any pass would run at all."""
        has_rounding = self.precision > 0 or self.path_precision > 0
        has_toggles = (
            self.remove_default_values
            or self.remove_font_family
            or self.remove_font_size
            or self.remove_tspan
            or self.remove_styling
            or self.convert_legacy_arcs
            or self.use_custom_dimensions
        )
        return has_rounding or has_toggles or self.grouping_mode != "none"


@dataclasses.dataclass(frozen=True)
class Stats:
    original_size: int
    optimized_size: int
    reduction_bytes: int
    reduction_percent: float

    @classmethod
    def compute(cls, original: str, optimized: str) -> "Stats":
        original_size = len(original.encode("utf-8"))
        optimized_size = len(optimized.encode("utf-8"))
        reduction = original_size - optimized_size
        percent = reduction / original_size * 100 if original_size > 0 else 0.0
        return cls(original_size, optimized_size, reduction, percent)


def format_bytes(num_bytes: int) -> str:
    if num_bytes == 0:
        return "0 B"
    units = ("B", "KB", "MB")
    i = min(int(math.log(abs(num_bytes), 1024)), len(units) - 1)
    return f"{num_bytes / 1024 ** i:.1f}".rstrip("0").rstrip(".") + f" {units[i]}"


@dataclasses.dataclass(frozen=True)
class OptimizeResult:
    svg: str
    stats: Stats
    error: Optional[str] = None


class SVGOptimizer:
    """Holds options; every optimize call works on its own tree."""

    def __init__(
        self,
        options: Optional[OptimizeOptions] = None,
        external: ExternalOptimizer = scour_stage,
        size: MarkupSize = markup_size,
    ):
        self.options = options or OptimizeOptions()
        self.external = external
        self.size = size

    def _optimize(self, source: str) -> str:
        opts = self.options
        svg = SVG.fromstring(source)
        preserved = inject_preserve_markers(svg.svg_root)

        svg = SVG.fromstring(self.external(svg.tostring()))

        if opts.convert_legacy_arcs:
            svg.convert_sodipodi_arcs(inplace=True)
        svg.remove_editor_data(inplace=True)
        svg.collapse_transforms(inplace=True)
        svg.round_numbers(opts.precision, opts.path_precision, inplace=True)

        if opts.remove_default_values:
            svg.remove_default_values(inplace=True)
        if opts.remove_font_family or opts.remove_font_size:
            svg.remove_font_attributes(
                opts.remove_font_family, opts.remove_font_size, inplace=True
            )
        if opts.remove_tspan:
            svg.remove_tspan(inplace=True)
        if opts.remove_styling:
            svg.remove_styling(inplace=True)

        if opts.grouping_mode == "remove":
            svg.remove_groups(inplace=True)
        elif opts.grouping_mode == "group":
            svg.group_elements(inplace=True)

        svg.remove_duplicate_defs(inplace=True)
        svg.remove_stroke_from_text(inplace=True)
        if opts.grouping_mode == "group":
            svg.group_text(inplace=True)
        svg.merge_paths_and_collapse_groups(self.size, inplace=True)
        svg.remove_unused_xlink_namespace(inplace=True)
        svg.remove_root_defaults(inplace=True)

        if opts.use_custom_dimensions:
            svg.resize(opts.custom_width, opts.custom_height, inplace=True)

        restore_preserved_attributes(svg.svg_root, preserved)
        svg.remove_dangling_namespaced_attributes(inplace=True)
        return svg.tostring()

    def optimize(self, source: str) -> OptimizeResult:
        if not source or not source.strip() or not _SVG_TAG_RE.search(source):
            return OptimizeResult(EMPTY_SVG, Stats.compute(source or "", EMPTY_SVG))

        if not self.options.optimization_enabled():
            return OptimizeResult(source, Stats.compute(source, source))

        try:
            optimized = self._optimize(source)
        except Exception as e:
            logging.exception("Unable to optimize svg, returning it unchanged")
            return OptimizeResult(
                source, Stats.compute(source, source), error=f"{type(e).__name__}: {e}"
            )
        return OptimizeResult(optimized, Stats.compute(source, optimized))
