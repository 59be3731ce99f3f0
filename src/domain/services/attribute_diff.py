"""Attribute list operations used when web services are registered or updated."""

from copy import copy
from typing import List, Optional

from src.domain.entities.web_service import ServiceAttribute


def attribute_difference(
    old: Optional[List[ServiceAttribute]],
    new: Optional[List[ServiceAttribute]],
) -> List[ServiceAttribute]:
    """Return the attributes of ``new`` whose name does not appear in ``old``.

    Attributes present in both lists are left out even when their value
    changed. A missing ``old`` list yields the whole ``new`` list and a
    missing ``new`` list yields nothing.
    """
    if new is None:
        return []
    if old is None:
        return list(new)

    old_names = {attribute.name for attribute in old}
    return [attribute for attribute in new if attribute.name not in old_names]


def merge_attributes(
    base: List[ServiceAttribute],
    extra: List[ServiceAttribute],
) -> List[ServiceAttribute]:
    """Merge ``extra`` into ``base`` keeping names unique.

    An attribute of ``extra`` whose name is already present replaces the
    value of the earlier one; the others are appended in order. Inputs are
    not modified.
    """
    merged: List[ServiceAttribute] = [copy(attribute) for attribute in base]
    positions = {attribute.name: index for index, attribute in enumerate(merged)}

    for attribute in extra:
        index = positions.get(attribute.name)
        if index is None:
            positions[attribute.name] = len(merged)
            merged.append(copy(attribute))
        else:
            merged[index].value = attribute.value

    return merged


def unique_attributes(attributes: List[ServiceAttribute]) -> List[ServiceAttribute]:
    """Collapse repeated names, the last occurrence providing the value."""
    return merge_attributes([], attributes)
