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
import re
from svgslim.optimizer import (
    EMPTY_SVG,
    OptimizeOptions,
    SVGOptimizer,
    Stats,
    format_bytes,
    identity_stage,
)
from svgslim.svg import SVG
from svg_test_helpers import load_test_svg, pretty_print, read_test_file


def _no_passes():
    return OptimizeOptions(
        precision=0,
        path_precision=0,
        remove_tspan=False,
        remove_styling=False,
        grouping_mode="none",
        remove_default_values=False,
        convert_legacy_arcs=False,
    )


@pytest.mark.parametrize(
    "actual, expected_result",
    [
        ("editor-data-before.svg", "editor-data-after.svg"),
        ("grouping-before.svg", "grouping-after.svg"),
        ("duplicate-defs-before.svg", "duplicate-defs-after.svg"),
    ],
)
def test_optimize(actual, expected_result):
    optimizer = SVGOptimizer(external=identity_stage)
    result = optimizer.optimize(read_test_file(actual))
    expected_result = load_test_svg(expected_result)
    print(f"A: {pretty_print(SVG.fromstring(result.svg).toetree())}")
    print(f"E: {pretty_print(expected_result.toetree())}")

    assert result.error is None
    assert result.svg == expected_result.tostring()


def test_optimize_is_idempotent():
    optimizer = SVGOptimizer(external=identity_stage)
    once = optimizer.optimize(read_test_file("grouping-before.svg")).svg

    assert optimizer.optimize(once).svg == once


def test_optimize_collapses_translation():
    source = (
        '<svg xmlns="http://www.w3.org/2000/svg" version="1.1" viewBox="0 0 24 24">'
        '<g transform="translate(2 2)"><path fill="red" d="M0.123 0h10v10z"/></g>'
        "</svg>"
    )
    result = SVGOptimizer(external=identity_stage).optimize(source)

    assert result.svg == (
        '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">'
        '<path fill="red" d="M2.12 2h10v10z"/>'
        "</svg>"
    )
    assert result.stats.optimized_size < result.stats.original_size


@pytest.mark.parametrize("source", ["", "   \n", "not an svg at all"])
def test_optimize_empty_input(source):
    result = SVGOptimizer(external=identity_stage).optimize(source)

    assert result.svg == EMPTY_SVG
    assert result.error is None


def test_optimize_nothing_enabled():
    source = '<svg xmlns="http://www.w3.org/2000/svg" version="1.1"><g><path d="M0.123 0h1"/></g></svg>'

    def fail(svg):
        raise AssertionError("Nothing should run")

    result = SVGOptimizer(_no_passes(), external=fail).optimize(source)

    assert result.svg == source
    assert result.error is None
    assert result.stats.reduction_bytes == 0


def test_optimize_failure_returns_source():
    source = '<svg xmlns="http://www.w3.org/2000/svg"><path d="M0 0h1"/></svg>'

    def boom(svg):
        raise RuntimeError("boom")

    result = SVGOptimizer(external=boom).optimize(source)

    assert result.svg == source
    assert result.error == "RuntimeError: boom"
    assert result.stats.reduction_bytes == 0


def test_optimize_malformed_returns_source():
    source = "<svg><path></svg>"

    result = SVGOptimizer(external=identity_stage).optimize(source)

    assert result.svg == source
    assert result.error.startswith("XMLSyntaxError")


def test_custom_attributes_survive_external_stage():
    source = (
        '<svg xmlns="http://www.w3.org/2000/svg">'
        '<path data-name="x" aria-hidden="true" fill="red" d="M0 0h1"/>'
        "</svg>"
    )

    def strip_data(svg):
        return re.sub(r' (data-name|aria-hidden)="[^"]*"', "", svg)

    result = SVGOptimizer(external=strip_data).optimize(source)
    path = SVG.fromstring(result.svg).svg_root[0]

    assert path.get("data-name") == "x"
    assert path.get("aria-hidden") == "true"
    assert "data-slim-id" not in result.svg


def test_merge_rejected_by_size():
    source = (
        '<svg xmlns="http://www.w3.org/2000/svg">'
        '<g fill="red"><path d="M0 0h1"/><path d="M2 2h1"/></g>'
        "</svg>"
    )

    def size(el):
        return len(el.get("d", "")) ** 2

    rejected = SVGOptimizer(external=identity_stage, size=size).optimize(source)
    merged = SVGOptimizer(external=identity_stage).optimize(source)

    assert rejected.svg == source
    assert merged.svg == (
        '<svg xmlns="http://www.w3.org/2000/svg">'
        '<path d="M0 0h1 M2 2h1" fill="red"/>'
        "</svg>"
    )


def test_grouping_mode_remove():
    source = (
        '<svg xmlns="http://www.w3.org/2000/svg">'
        '<g id="layer" fill="red"><path d="M0 0h1"/></g>'
        '<g stroke="blue"><path d="M1 1h1"/><rect width="1" height="1"/></g>'
        "</svg>"
    )
    options = OptimizeOptions(grouping_mode="remove")

    result = SVGOptimizer(options, external=identity_stage).optimize(source)

    assert result.svg == (
        '<svg xmlns="http://www.w3.org/2000/svg">'
        '<g id="layer" fill="red"><path d="M0 0h1"/></g>'
        '<path d="M1 1h1" stroke="blue"/><rect width="1" height="1" stroke="blue"/>'
        "</svg>"
    )


def test_custom_dimensions():
    source = (
        '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">'
        '<rect x="10" y="10" width="20" height="20"/>'
        "</svg>"
    )
    options = OptimizeOptions(
        use_custom_dimensions=True, custom_width=64, custom_height=48
    )

    result = SVGOptimizer(options, external=identity_stage).optimize(source)
    root = SVG.fromstring(result.svg).svg_root

    assert root.get("viewBox") == "10 10 20 20"
    assert root.get("width") == "64"
    assert root.get("height") == "48"


def test_default_external_stage():
    source = (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10 10">'
        "<!-- made by hand -->"
        "<title>square</title>"
        '<path fill="red" d="M0 0h10v10H0z"/>'
        "</svg>"
    )

    result = SVGOptimizer().optimize(source)

    assert result.error is None
    assert "<!--" not in result.svg
    assert "<title>" not in result.svg
    assert "<path" in result.svg


@pytest.mark.parametrize(
    "kwargs",
    [
        {"precision": -1},
        {"precision": 6},
        {"path_precision": 1.5},
        {"grouping_mode": "sometimes"},
        {"use_custom_dimensions": True, "custom_width": 0},
        {"use_custom_dimensions": True, "custom_height": float("nan")},
    ],
)
def test_invalid_options(kwargs):
    with pytest.raises(ValueError):
        OptimizeOptions(**kwargs)


def test_custom_dimensions_only_checked_when_used():
    assert OptimizeOptions(custom_width=0).custom_width == 0


def test_optimization_enabled():
    assert OptimizeOptions().optimization_enabled()
    assert not _no_passes().optimization_enabled()
    assert OptimizeOptions(
        precision=0,
        path_precision=0,
        remove_tspan=False,
        remove_styling=False,
        grouping_mode="remove",
        remove_default_values=False,
        convert_legacy_arcs=False,
    ).optimization_enabled()


def test_stats():
    assert Stats.compute("aaaa", "aa") == Stats(4, 2, 2, 50.0)
    assert Stats.compute("", "") == Stats(0, 0, 0, 0.0)
    # sizes are in utf-8 bytes
    assert Stats.compute("é", "") == Stats(2, 0, 2, 100.0)


@pytest.mark.parametrize(
    "num_bytes, expected",
    [
        (0, "0 B"),
        (512, "512 B"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (10240, "10 KB"),
    ],
)
def test_format_bytes(num_bytes, expected):
    assert format_bytes(num_bytes) == expected
