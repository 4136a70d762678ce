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

"""Shrink svg.

Usage:
svgslim.py --precision=2 --grouping_mode=remove icon.svg
<optimized svg dumped to stdout>
"""
from absl import app
from absl import flags
from absl import logging
import sys
from svgslim.optimizer import (
    GROUPING_MODES,
    MAX_PRECISION,
    OptimizeOptions,
    SVGOptimizer,
    format_bytes,
)
from svgslim.svg import SVG


FLAGS = flags.FLAGS


flags.DEFINE_integer(
    "precision",
    1,
    "Decimal places kept in numeric attributes",
    lower_bound=0,
    upper_bound=MAX_PRECISION,
)
flags.DEFINE_integer(
    "path_precision",
    2,
    "Decimal places kept in path data",
    lower_bound=0,
    upper_bound=MAX_PRECISION,
)
flags.DEFINE_bool("remove_tspan", True, "Replace <tspan> elements by their text")
flags.DEFINE_bool(
    "remove_styling", True, "Drop <style> elements, style and class attributes"
)
flags.DEFINE_enum(
    "grouping_mode",
    "group",
    GROUPING_MODES,
    "group hoists shared attributes into groups, remove flattens groups",
)
flags.DEFINE_bool(
    "remove_default_values", True, "Drop attributes set to their default value"
)
flags.DEFINE_bool("remove_font_family", False, "Drop font-family attributes")
flags.DEFINE_bool("remove_font_size", False, "Drop font-size attributes")
flags.DEFINE_bool(
    "convert_legacy_arcs", True, "Convert Inkscape sodipodi arcs to plain svg"
)
flags.DEFINE_bool(
    "use_custom_dimensions",
    False,
    "Fit the viewBox to the content and set width/height",
)
flags.DEFINE_float("custom_width", 100, "width when --use_custom_dimensions")
flags.DEFINE_float("custom_height", 100, "height when --use_custom_dimensions")
flags.DEFINE_bool(
    "autocrop", False, "Crop the viewBox of the result to its content"
)
flags.DEFINE_float("autocrop_margin", 3, "Margin kept around content by --autocrop")
flags.DEFINE_bool("stats", False, "Log sizes before and after")
flags.DEFINE_string("output_file", "-", "Output SVG file ('-' means stdout)")


def _options() -> OptimizeOptions:
    try:
        return OptimizeOptions(
            precision=FLAGS.precision,
            path_precision=FLAGS.path_precision,
            remove_tspan=FLAGS.remove_tspan,
            remove_styling=FLAGS.remove_styling,
            grouping_mode=FLAGS.grouping_mode,
            remove_default_values=FLAGS.remove_default_values,
            remove_font_family=FLAGS.remove_font_family,
            remove_font_size=FLAGS.remove_font_size,
            convert_legacy_arcs=FLAGS.convert_legacy_arcs,
            use_custom_dimensions=FLAGS.use_custom_dimensions,
            custom_width=FLAGS.custom_width,
            custom_height=FLAGS.custom_height,
        )
    except ValueError as e:
        raise app.UsageError(str(e))


def _run(argv):
    try:
        input_file = argv[1]
    except IndexError:
        input_file = None

    if input_file:
        with open(input_file) as f:
            source = f.read()
    else:
        source = sys.stdin.read()

    result = SVGOptimizer(_options()).optimize(source)
    if result.error:
        logging.error("%s left unchanged: %s", input_file or "stdin", result.error)
    output = result.svg

    if FLAGS.autocrop and not result.error:
        output = SVG.fromstring(output).autocrop(FLAGS.autocrop_margin).tostring()

    if FLAGS.stats:
        stats = result.stats
        logging.info(
            "%s => %s, saved %s (%.1f%%)",
            format_bytes(stats.original_size),
            format_bytes(stats.optimized_size),
            format_bytes(stats.reduction_bytes),
            stats.reduction_percent,
        )

    if FLAGS.output_file == "-":
        print(output)
    else:
        with open(FLAGS.output_file, "w") as f:
            f.write(output)


def main(argv=None):
    # We don't seem to be __main__ when run as cli tool installed by setuptools
    app.run(_run, argv=argv)


if __name__ == "__main__":
    main()
