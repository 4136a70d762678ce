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

"""Keep custom attributes alive across a step that doesn't know about them.

Elements with attributes worth keeping get a marker attribute with a unique
id and their attributes are recorded under that id. After the step, any
recorded attribute the element lost is put back and the markers removed.
"""
from absl import logging
from lxml import etree  # pytype: disable=import-error
from typing import Dict, Mapping
from svgslim import svg_meta


MARKER_ATTR = "data-slim-id"

PRESERVE_ATTR_NAMES = frozenset(("role", "tabindex"))
PRESERVE_ATTR_PREFIXES = ("data-", "aria-")

# marker id => {attribute name: value}
PreservedAttributes = Dict[str, Dict[str, str]]


def should_preserve_attribute(name: str) -> bool:
    if name == MARKER_ATTR:
        return False
    ns, local = svg_meta.splitns(name)
    if ns is not None:
        if ns in (svg_meta.xmlns(), svg_meta.xlinkns()):
            return False
        return ns not in svg_meta.EDITOR_NAMESPACES
    local = local.lower()
    if local in PRESERVE_ATTR_NAMES or local.startswith(PRESERVE_ATTR_PREFIXES):
        return True
    return local not in svg_meta.KNOWN_SVG_ATTRS


def inject_preserve_markers(root: etree.Element) -> PreservedAttributes:
    """Mark elements carrying custom attributes, return what was recorded."""
    preserved = {}
    for el in root.iter(etree.Element):
        attrs = {
            name: value
            for name, value in el.attrib.items()
            if should_preserve_attribute(name)
        }
        if not attrs:
            continue
        marker = f"p{len(preserved)}"
        el.attrib[MARKER_ATTR] = marker
        preserved[marker] = attrs
    return preserved


def restore_preserved_attributes(
    root: etree.Element, preserved: Mapping[str, Mapping[str, str]]
):
    """Put back recorded attributes the element no longer has; drop markers.

    Values already on the element win. Recorded elements that no longer exist
    lose their attributes.
    """
    marked = {}
    for el in root.iter(etree.Element):
        marker = el.attrib.pop(MARKER_ATTR, None)
        if marker is not None:
            marked.setdefault(marker, el)

    for marker, attrs in preserved.items():
        el = marked.get(marker)
        if el is None:
            logging.debug("Element %s is gone, dropping %s", marker, sorted(attrs))
            continue
        in_scope = set(el.nsmap.values())
        for name, value in attrs.items():
            if name in el.attrib:
                continue
            ns, _ = svg_meta.splitns(name)
            if ns is not None and ns not in in_scope:
                logging.debug("Namespace of %s is no longer declared", name)
                continue
            el.attrib[name] = value
