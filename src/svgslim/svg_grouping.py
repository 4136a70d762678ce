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

"""Hoist shared attributes into groups, merge paths and undo groups.

Grouping wraps runs of adjacent same-tag siblings in a group carrying the
attributes they share, when the bytes saved outweigh the wrapper. Merging
goes the other way inside existing groups: paths that draw with identical
attributes become one path if that is smaller.
"""
from absl import logging
from lxml import etree  # pytype: disable=import-error
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple
from svgslim import svg_meta
from svgslim.svg_path import normalize_start


# len("<g></g>"), len("<tspan></tspan>")
GROUP_OVERHEAD = 7
TSPAN_OVERHEAD = 15

_MARKER_ATTRS = ("marker-start", "marker-mid", "marker-end")

# Attribute sets of a clip, mask or filter depend on the user space they're in
_USER_SPACE_ATTRS = ("clip-path", "mask", "filter")

# Not inherited: a value on the group and one on a child both apply
_STACKING_ATTRS = ("opacity",) + _USER_SPACE_ATTRS

# A wrapper would change what these render, or which child renders
_NO_WRAPPER_PARENTS = frozenset(("clipPath", "switch"))

MarkupSize = Callable[[etree.Element], int]


def _has_text(text: Optional[str]) -> bool:
    return bool(text and text.strip())


def _local_tag(el) -> str:
    return svg_meta.strip_ns(el.tag)


def estimate_group_savings(
    common_attrs: Dict[str, str], element_count: int, overhead: int = GROUP_OVERHEAD
) -> int:
    """Bytes saved by writing common_attrs once on a wrapper.

    Each attribute costs len(' name="value"') per element carrying it.
    """
    if element_count < 2:
        return 0
    attr_size = sum(len(f' {name}="{value}"') for name, value in common_attrs.items())
    return (element_count - 1) * attr_size - overhead


def _groupable_attrs(el, groupable_attrs: Sequence[str]) -> Dict[str, str]:
    return {n: el.get(n) for n in groupable_attrs if el.get(n) is not None}


def _intersect(base: Dict[str, str], other: Dict[str, str]) -> Dict[str, str]:
    return {n: v for n, v in base.items() if other.get(n) == v}


def _best_extension(run, start, groupable_attrs, overhead):
    """Returns (end, common attributes) of the best group starting at start."""
    common = _groupable_attrs(run[start], groupable_attrs)
    best = None
    best_savings = 0
    for end in range(start + 1, len(run)):
        common = _intersect(common, _groupable_attrs(run[end], groupable_attrs))
        if not common:
            break
        savings = estimate_group_savings(common, end - start + 1, overhead)
        if savings > best_savings:
            best = (end, dict(common))
            best_savings = savings
    return best


def _wrap(members: List[etree.Element], attrs: Dict[str, str], wrapper_tag: str):
    first = members[0]
    ns = etree.QName(first).namespace
    wrapper = etree.Element(etree.QName(ns, wrapper_tag), nsmap=first.nsmap)
    wrapper.attrib.update(attrs)
    first.addprevious(wrapper)
    # text after the run belongs after the wrapper, not inside it
    wrapper.tail = members[-1].tail
    members[-1].tail = None
    for el in members:
        for name in attrs:
            del el.attrib[name]
        wrapper.append(el)
    return wrapper


def _group_run(run, groupable_attrs, wrapper_tag, overhead) -> int:
    created = 0
    i = 0
    while i < len(run):
        best = _best_extension(run, i, groupable_attrs, overhead)
        if best is None:
            i += 1
            continue
        end, attrs = best
        _wrap(run[i : end + 1], attrs, wrapper_tag)
        created += 1
        i = end + 1
    return created


def _runs(parent, tags) -> Iterable[List[etree.Element]]:
    """Maximal runs of adjacent same-tag children of parent whose tag is in tags.

    Text between siblings breaks a run.
    """
    run = []
    for child in parent.iterchildren(etree.Element):
        if _local_tag(child) in tags and (
            run and child.tag == run[-1].tag and not _has_text(run[-1].tail)
        ):
            run.append(child)
            continue
        if len(run) > 1:
            yield run
        run = [child] if _local_tag(child) in tags else []
    if len(run) > 1:
        yield run


def group_similar_elements(
    root: etree.Element, tags: Iterable[str], groupable_attrs: Sequence[str]
) -> int:
    """Wrap runs of same-tag siblings sharing groupable attributes.

    Inside text content the wrapper is a tspan so the content still renders.
    Returns the number of wrappers created.
    """
    tags = frozenset(tags)
    parents = []
    for el in root.iter(etree.Element):
        parent = el.getparent()
        if _local_tag(el) in tags and parent is not None and parent not in parents:
            parents.append(parent)

    created = 0
    for parent in parents:
        if _local_tag(parent) in _NO_WRAPPER_PARENTS:
            continue
        if _local_tag(parent) in svg_meta.TEXT_TAGS:
            wrapper_tag, overhead = "tspan", TSPAN_OVERHEAD
        else:
            wrapper_tag, overhead = "g", GROUP_OVERHEAD
        for run in list(_runs(parent, tags)):
            created += _group_run(run, groupable_attrs, wrapper_tag, overhead)
    if created:
        logging.debug("Created %d groups of shared attributes", created)
    return created


def markup_size(el: etree.Element) -> int:
    """Length of el written as an empty tag, namespaces ignored."""
    attrs = "".join(
        f' {svg_meta.strip_ns(n)}="{v}"' for n, v in el.attrib.items()
    )
    return len(f"<{_local_tag(el)}{attrs}/>")


def _has_markers(el) -> bool:
    return any(n in el.attrib for n in _MARKER_ATTRS)


def _only_presentation_attrs(el) -> bool:
    return all(n in svg_meta.PRESENTATION_ATTRS for n in el.attrib)


def _can_merge_group(group, children) -> bool:
    if len(children) < 2:
        return False
    if not all(_local_tag(c) == "path" for c in children):
        return False
    if not _only_presentation_attrs(group) or _has_markers(group):
        return False
    return not any(_has_markers(c) for c in children)


def _merge_key(path, group_attrs) -> Optional[Tuple[Tuple, Dict[str, str], str]]:
    normalized = normalize_start(path.get("d", ""))
    if normalized is None:
        return None
    effective = {n: v for n, v in group_attrs.items() if n not in _STACKING_ATTRS}
    for name, value in path.attrib.items():
        if name == "d":
            continue
        if name not in svg_meta.PRESENTATION_ATTRS:
            return None
        effective[name] = value
    return tuple(sorted(effective.items())), effective, normalized


def _merged_path(run, group_attrs, effective, ds):
    merged = etree.Element(run[0].tag, nsmap=run[0].nsmap)
    merged.attrib["d"] = " ".join(ds)
    for name, value in effective.items():
        if name in _STACKING_ATTRS or group_attrs.get(name) != value:
            merged.attrib[name] = value
    return merged


def _merge_paths(group, children, size: MarkupSize) -> int:
    group_attrs = dict(group.attrib)
    merged_count = 0
    i = 0
    while i < len(children):
        info = _merge_key(children[i], group_attrs)
        if info is None:
            i += 1
            continue
        key, effective, normalized = info
        run, ds = [children[i]], [normalized]
        j = i + 1
        while j < len(children):
            next_info = _merge_key(children[j], group_attrs)
            if next_info is None or next_info[0] != key:
                break
            run.append(children[j])
            ds.append(next_info[2])
            j += 1

        if len(run) > 1:
            merged = _merged_path(run, group_attrs, effective, ds)
            if size(merged) < sum(size(p) for p in run):
                run[0].addprevious(merged)
                merged.tail = run[-1].tail
                for path in run:
                    group.remove(path)
                merged_count += 1
            else:
                logging.debug("Merging %d paths would not save bytes", len(run))
        i = j
    return merged_count


def _collapse_group(group) -> bool:
    parent = group.getparent()
    if parent is None:
        return False
    if "transform" in group.attrib or not _only_presentation_attrs(group):
        return False
    children = list(group.iterchildren(etree.Element))
    if len(children) != 1:
        return False
    (child,) = children
    if _has_text(group.text) or any(_has_text(c.tail) for c in group):
        return False
    if "transform" in child.attrib and any(
        n in group.attrib for n in _USER_SPACE_ATTRS
    ):
        return False
    if any(n in group.attrib and n in child.attrib for n in _STACKING_ATTRS):
        return False

    for name, value in group.attrib.items():
        if name not in child.attrib:
            child.attrib[name] = value
    child.tail = group.tail
    group.addprevious(child)
    parent.remove(group)
    return True


def merge_paths_and_collapse_groups(
    root: etree.Element, size: MarkupSize = markup_size
) -> Tuple[int, int]:
    """Merge same-looking paths in groups, then drop single-child groups.

    A merge is only kept if size says the merged path is strictly smaller
    than the paths it replaces. Returns (paths merged, groups collapsed).
    """
    groups = [el for el in root.iter(etree.Element) if _local_tag(el) == "g"]
    merged = 0
    for group in groups:
        children = list(group.iterchildren(etree.Element))
        if _can_merge_group(group, children):
            merged += _merge_paths(group, children, size)

    collapsed = 0
    for group in [el for el in root.iter(etree.Element) if _local_tag(el) == "g"]:
        if _collapse_group(group):
            collapsed += 1
    logging.debug("Merged %d path runs, collapsed %d groups", merged, collapsed)
    return merged, collapsed


def append_text(anchor, parent, text):
    """Append text where it reads right after anchor, or first in parent."""
    if not text:
        return
    if anchor is not None:
        anchor.tail = (anchor.tail or "") + text
    else:
        parent.text = (parent.text or "") + text


def _flatten_group(group) -> bool:
    parent = group.getparent()
    if parent is None:
        return False
    if not all(
        n in svg_meta.PRESENTATION_ATTRS or n == "transform" for n in group.attrib
    ):
        return False
    children = list(group)
    if any("transform" in c.attrib for c in children if isinstance(c.tag, str)) and any(
        n in group.attrib for n in _USER_SPACE_ATTRS
    ):
        return False
    if any(
        n in group.attrib and n in c.attrib
        for c in children
        if isinstance(c.tag, str)
        for n in _STACKING_ATTRS
    ):
        return False

    transform = group.get("transform")
    for child in children:
        if not isinstance(child.tag, str):
            continue
        for name, value in group.attrib.items():
            if name == "transform":
                continue
            if name not in child.attrib:
                child.attrib[name] = value
        if transform:
            child_transform = child.get("transform")
            child.attrib["transform"] = (
                f"{transform} {child_transform}" if child_transform else transform
            )

    append_text(group.getprevious(), parent, group.text)
    for child in children:
        group.addprevious(child)
    append_text(group.getprevious(), parent, group.tail)
    group.tail = None
    parent.remove(group)
    return True


def remove_groups(root: etree.Element) -> int:
    """Move the content of every plain <g> up into its parent.

    Presentation attributes and transforms of the group are pushed onto its
    children. Groups carrying anything else (ids, classes, custom data) stay,
    as do groups whose clip, mask or filter would land on transformed
    children. Returns the number of groups removed.
    """
    groups = [el for el in root.iter(etree.Element) if _local_tag(el) == "g"]
    removed = 0
    # innermost first, so pushed attributes keep their precedence
    for group in reversed(groups):
        if _flatten_group(group):
            removed += 1
    return removed
