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

import copy
from absl import logging
from lxml import etree  # pytype: disable=import-error
import re
from typing import Iterable, List, Mapping, Optional, Sequence
from svgslim import svg_meta
from svgslim.geometric_types import Rect
from svgslim.svg_arcs import convert_sodipodi_arcs
from svgslim.svg_bounds import autocrop, resize
from svgslim import svg_grouping
from svgslim.svg_meta import (
    parse_view_box,
    splitns,
    strip_ns,
    svgns,
    xlinkns,
)
from svgslim.svg_numbers import round_fixed, round_numeric_list, round_path_data
from svgslim.svg_transform import collapse_transforms


_XLINK_TEMP = "xlink_"

# Attributes whose prefix was never declared are parked under
# prefix + _UNDECLARED_SEP + local so the document still parses
_UNDECLARED_SEP = "__undeclared__"

_DECLARED_PREFIX_RE = re.compile(r"xmlns:([A-Za-z_][\w.-]*)\s*=")
_PREFIXED_ATTR_RE = re.compile(
    r"(?<=[\s\"'])([A-Za-z_][\w.-]*):([A-Za-z_][\w.-]*)(?=\s*=\s*[\"'])"
)

_URL_REF_RE = re.compile(r"url\(\s*(['\"]?)#([^)'\"\s]+)\1\s*\)")

_TEXT_STROKE_ATTRS = (
    "stroke",
    "stroke-width",
    "stroke-opacity",
    "stroke-dasharray",
    "stroke-dashoffset",
    "stroke-linecap",
    "stroke-linejoin",
    "stroke-miterlimit",
)


def _xlink_href_attr_name() -> str:
    return f"{{{xlinkns()}}}href"


def _copy_new_nsmap(tree, nsm):
    new_tree = etree.Element(tree.tag, nsmap=nsm)
    new_tree.attrib.update(tree.attrib)
    new_tree.text = tree.text
    new_tree[:] = tree[:]
    return new_tree


def _fix_xlink_ns(tree):
    """Fix xlink namespace problems.

    If there are xlink temps, add namespace and fix temps.
    If we declare xlink but don't use it then remove it.
    """
    xlink_nsmap = {"xlink": xlinkns()}
    if "xlink" in tree.nsmap and not len(
        tree.xpath("//*[@xlink:href]", namespaces=xlink_nsmap)
    ):
        # no reason to keep xlink
        nsm = copy.copy(tree.nsmap)
        del nsm["xlink"]
        tree = _copy_new_nsmap(tree, nsm)

    elif "xlink" not in tree.nsmap and len(tree.xpath(f"//*[@{_XLINK_TEMP}]")):
        # declare xlink and fix temps
        nsm = copy.copy(tree.nsmap)
        nsm["xlink"] = xlinkns()
        tree = _copy_new_nsmap(tree, nsm)
        for el in tree.xpath(f"//*[@{_XLINK_TEMP}]"):
            # try to retain attrib order, unexpected when they shuffle
            attrs = [(k, v) for k, v in el.attrib.items()]
            el.attrib.clear()
            for name, value in attrs:
                if name == _XLINK_TEMP:
                    name = _xlink_href_attr_name()
                el.attrib[name] = value

    return tree


def _park_undeclared_prefixes(string: str) -> str:
    declared = set(_DECLARED_PREFIX_RE.findall(string)) | {"xml", "xmlns"}

    def _park(match):
        prefix, local = match.groups()
        if prefix in declared:
            return match.group()
        if prefix == "xlink" and local == "href":
            return _XLINK_TEMP
        return f"{prefix}{_UNDECLARED_SEP}{local}"

    return _PREFIXED_ATTR_RE.sub(_park, string)


def _del_attrs(el, *attr_names):
    for name in attr_names:
        if name in el.attrib:
            del el.attrib[name]


def _safe_remove(el: etree.Element):
    parent = el.getparent()
    if parent is not None:
        parent.remove(el)


def _definition_signature(el) -> bytes:
    el = copy.deepcopy(el)
    _del_attrs(el, "id")
    el.tail = None
    return etree.tostring(el)


def _rename_urls(text: str, renames: Mapping[str, str]) -> str:
    def _rename(match):
        quote, ref = match.groups()
        if ref not in renames:
            return match.group()
        return f"url({quote}#{renames[ref]}{quote})"

    return _URL_REF_RE.sub(_rename, text)


class SVG:

    svg_root: etree.Element

    def __init__(self, svg_root):
        self.svg_root = svg_root

    def _elements_named(self, *tags) -> List[etree.Element]:
        return [el for el in self.svg_root.iter(etree.Element) if strip_ns(el.tag) in tags]

    def xpath(self, xpath: str, el: etree.Element = None, expected_result_range=None):
        if el is None:
            el = self.svg_root
        results = el.xpath(xpath, namespaces={"svg": svgns()})
        if expected_result_range and len(results) not in expected_result_range:
            raise ValueError(
                f"Expected {xpath} matches in {expected_result_range}, {len(results)} results"
            )
        return results

    def xpath_one(self, xpath):
        return self.xpath(xpath, expected_result_range=range(1, 2))[0]

    def view_box(self) -> Optional[Rect]:
        raw_box = self.svg_root.attrib.get("viewBox", None)
        if not raw_box:
            return None
        return parse_view_box(raw_box)

    def remove_default_values(self, inplace=False):
        """Drop attributes set to the value renderers assume anyway."""
        if not inplace:
            svg = SVG(copy.deepcopy(self.svg_root))
            svg.remove_default_values(inplace=True)
            return svg

        for el in self.svg_root.iter(etree.Element):
            defaults = [
                name
                for name, value in el.attrib.items()
                if svg_meta.is_default_value(name, value)
            ]
            _del_attrs(el, *defaults)
        return self

    def remove_font_attributes(
        self, remove_family: bool = False, remove_size: bool = False, inplace=False
    ):
        if not inplace:
            svg = SVG(copy.deepcopy(self.svg_root))
            svg.remove_font_attributes(remove_family, remove_size, inplace=True)
            return svg

        attr_names = []
        if remove_family:
            attr_names.append("font-family")
        if remove_size:
            attr_names.append("font-size")
        for el in self.svg_root.iter(etree.Element):
            _del_attrs(el, *attr_names)
        return self

    def remove_tspan(self, inplace=False):
        """Replace every <tspan> with its text content, in place."""
        if not inplace:
            svg = SVG(copy.deepcopy(self.svg_root))
            svg.remove_tspan(inplace=True)
            return svg

        # innermost first, so outer tspans see flattened text
        for tspan in reversed(self._elements_named("tspan")):
            parent = tspan.getparent()
            if parent is None:
                continue
            text = "".join(tspan.itertext()) + (tspan.tail or "")
            previous = tspan.getprevious()
            parent.remove(tspan)
            svg_grouping.append_text(previous, parent, text)
        return self

    def remove_styling(self, inplace=False):
        """Drop <style> elements along with style and class attributes."""
        if not inplace:
            svg = SVG(copy.deepcopy(self.svg_root))
            svg.remove_styling(inplace=True)
            return svg

        for style in self._elements_named("style"):
            _safe_remove(style)
        for el in self.svg_root.iter(etree.Element):
            _del_attrs(el, "style", "class")
        return self

    def remove_stroke_from_text(self, inplace=False):
        if not inplace:
            svg = SVG(copy.deepcopy(self.svg_root))
            svg.remove_stroke_from_text(inplace=True)
            return svg

        for el in self._elements_named(*svg_meta.TEXT_TAGS):
            _del_attrs(el, *_TEXT_STROKE_ATTRS)
        return self

    def remove_groups(self, inplace=False):
        if not inplace:
            svg = SVG(copy.deepcopy(self.svg_root))
            svg.remove_groups(inplace=True)
            return svg

        removed = svg_grouping.remove_groups(self.svg_root)
        logging.debug("Flattened %d groups", removed)
        return self

    def remove_editor_data(self, inplace=False):
        """Drop Inkscape and Sodipodi elements, attributes and declarations."""
        if not inplace:
            svg = SVG(copy.deepcopy(self.svg_root))
            svg.remove_editor_data(inplace=True)
            return svg

        for el in list(self.svg_root.iter(etree.Element)):
            if splitns(el.tag)[0] in svg_meta.EDITOR_NAMESPACES:
                _safe_remove(el)
                continue
            _del_attrs(
                el,
                *(
                    name
                    for name in el.attrib
                    if splitns(name)[0] in svg_meta.EDITOR_NAMESPACES
                ),
            )

        # other unused declarations may be wanted by preserved attributes
        keep_prefixes = [
            prefix
            for prefix, ns in self.svg_root.nsmap.items()
            if prefix and ns not in svg_meta.EDITOR_NAMESPACES
        ]
        etree.cleanup_namespaces(self.svg_root, keep_ns_prefixes=keep_prefixes)
        return self

    def remove_unused_xlink_namespace(self, inplace=False):
        if not inplace:
            svg = SVG(copy.deepcopy(self.svg_root))
            svg.remove_unused_xlink_namespace(inplace=True)
            return svg

        self.svg_root = _fix_xlink_ns(self.svg_root)
        return self

    def remove_dangling_namespaced_attributes(self, inplace=False):
        """Drop attributes whose prefix was never declared in the source."""
        if not inplace:
            svg = SVG(copy.deepcopy(self.svg_root))
            svg.remove_dangling_namespaced_attributes(inplace=True)
            return svg

        for el in self.svg_root.iter(etree.Element):
            dangling = [n for n in el.attrib if _UNDECLARED_SEP in n]
            if dangling:
                logging.debug("Dropping undeclared attributes %s", dangling)
            _del_attrs(el, *dangling)
        return self

    def remove_root_defaults(self, inplace=False):
        if not inplace:
            svg = SVG(copy.deepcopy(self.svg_root))
            svg.remove_root_defaults(inplace=True)
            return svg

        for name, default in svg_meta.ROOT_DEFAULTS.items():
            value = self.svg_root.get(name)
            if value is not None and value.strip() == default:
                del self.svg_root.attrib[name]
        return self

    def _rename_references(self, renames: Mapping[str, str]):
        href_attrs = ("href", _xlink_href_attr_name())
        for el in self.svg_root.iter(etree.Element):
            for name, value in el.attrib.items():
                new_value = _rename_urls(value, renames)
                if name in href_attrs and new_value.startswith("#"):
                    new_value = "#" + renames.get(new_value[1:], new_value[1:])
                if new_value != value:
                    el.attrib[name] = new_value
        for style in self._elements_named("style"):
            if style.text:
                style.text = _rename_urls(style.text, renames)

    def remove_duplicate_defs(self, inplace=False):
        """Keep the first of identical <defs> children, point references at it.

        Elements are identical when they serialize the same, ids aside.
        """
        if not inplace:
            svg = SVG(copy.deepcopy(self.svg_root))
            svg.remove_duplicate_defs(inplace=True)
            return svg

        # renames can make more definitions identical, go until nothing changes
        while self._remove_duplicate_defs_once():
            pass
        return self

    def _remove_duplicate_defs_once(self) -> int:
        kept_by_signature = {}
        renames = {}
        removed = 0
        for defs in self._elements_named("defs"):
            for child in list(defs.iterchildren(etree.Element)):
                signature = _definition_signature(child)
                kept = kept_by_signature.get(signature)
                if kept is None:
                    kept_by_signature[signature] = child
                    continue
                dup_id = child.get("id")
                _safe_remove(child)
                removed += 1
                if dup_id is None:
                    continue
                if kept.get("id") is None:
                    kept.attrib["id"] = dup_id
                else:
                    renames[dup_id] = kept.get("id")

        if renames:
            logging.debug("Duplicate definitions renamed: %s", renames)
            self._rename_references(renames)
        return removed

    def round_numbers(self, precision: int = 1, path_precision: int = 2, inplace=False):
        """Round path data to path_precision, numeric attributes to precision."""
        if not inplace:
            svg = SVG(copy.deepcopy(self.svg_root))
            svg.round_numbers(precision, path_precision, inplace=True)
            return svg

        for el in self.svg_root.iter(etree.Element):
            for name, value in el.attrib.items():
                if splitns(name)[0] is not None:
                    continue
                lower_name = name.lower()
                if lower_name == "d":
                    new_value = round_path_data(value, path_precision)
                elif lower_name in svg_meta.NUMERIC_ATTRS:
                    new_value = round_fixed(value, precision)
                elif lower_name in svg_meta.NUMERIC_LIST_ATTRS:
                    new_value = round_numeric_list(value, precision)
                else:
                    continue
                if new_value != value:
                    el.attrib[name] = new_value
        return self

    def collapse_transforms(self, inplace=False):
        if not inplace:
            svg = SVG(copy.deepcopy(self.svg_root))
            svg.collapse_transforms(inplace=True)
            return svg

        collapsed = collapse_transforms(self.svg_root)
        logging.debug("Collapsed %d transforms", collapsed)
        return self

    def convert_sodipodi_arcs(self, inplace=False):
        if not inplace:
            svg = SVG(copy.deepcopy(self.svg_root))
            svg.convert_sodipodi_arcs(inplace=True)
            return svg

        converted = convert_sodipodi_arcs(self.svg_root)
        logging.debug("Converted %d sodipodi arcs", converted)
        return self

    def group_elements(
        self,
        tags: Iterable[str] = svg_meta.SHAPE_TAGS,
        groupable_attrs: Sequence[str] = svg_meta.SHAPE_GROUPABLE_ATTRS,
        inplace=False,
    ):
        """Hoist attributes shared by adjacent same-tag siblings into groups."""
        if not inplace:
            svg = SVG(copy.deepcopy(self.svg_root))
            svg.group_elements(tags, groupable_attrs, inplace=True)
            return svg

        svg_grouping.group_similar_elements(self.svg_root, tags, groupable_attrs)
        return self

    def group_text(self, inplace=False):
        return self.group_elements(
            svg_meta.TEXT_TAGS, svg_meta.TEXT_GROUPABLE_ATTRS, inplace=inplace
        )

    def merge_paths_and_collapse_groups(
        self, size: svg_grouping.MarkupSize = svg_grouping.markup_size, inplace=False
    ):
        if not inplace:
            svg = SVG(copy.deepcopy(self.svg_root))
            svg.merge_paths_and_collapse_groups(size, inplace=True)
            return svg

        svg_grouping.merge_paths_and_collapse_groups(self.svg_root, size)
        return self

    def resize(self, width: float, height: float, inplace=False):
        """Fit the viewBox to the content, then set width and height."""
        if not inplace:
            svg = SVG(copy.deepcopy(self.svg_root))
            svg.resize(width, height, inplace=True)
            return svg

        resize(self.svg_root, width, height)
        return self

    def autocrop(self, margin: float = 3, inplace=False):
        if not inplace:
            svg = SVG(copy.deepcopy(self.svg_root))
            svg.autocrop(margin, inplace=True)
            return svg

        autocrop(self.svg_root, margin)
        return self

    def toetree(self):
        return copy.deepcopy(self.svg_root)

    def tostring(self, pretty_print=False):
        return etree.tostring(self.toetree(), pretty_print=pretty_print).decode("utf-8")

    @classmethod
    def fromstring(cls, string):
        if isinstance(string, bytes):
            string = string.decode("utf-8")

        # svgs are fond of not declaring xlink, or any other prefix
        # based on https://mailman-mail5.webfaction.com/pipermail/lxml/20100323/021184.html
        string = _park_undeclared_prefixes(string)

        # encode because fromstring dislikes xml encoding decl if input is str
        parser = etree.XMLParser(remove_blank_text=True)
        tree = etree.fromstring(string.encode("utf-8"), parser)
        tree = _fix_xlink_ns(tree)
        return cls(tree)

    @classmethod
    def parse(cls, file_or_path):
        if hasattr(file_or_path, "read"):
            raw_svg = file_or_path.read()
        else:
            with open(file_or_path) as f:
                raw_svg = f.read()
        return cls.fromstring(raw_svg)
