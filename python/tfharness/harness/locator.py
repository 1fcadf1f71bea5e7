"""
tfharness/harness/locator.py

Finds resource instances in a TerraformState by caller-supplied predicate.

Lookups iterate resources in state order, then each resource's instances in
order, and return the first match. Nothing found is None, never an exception,
so tests can assert on absence directly. When two resources share a type and
name, the first one listed in the state wins.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional

from tfharness.models.attribute_value import AttributeValue, freeze_value
from tfharness.models.terraform_state import Instance, Resource, TerraformState

InstancePredicate = Callable[[Resource, Instance], bool]


def match(
    type: Optional[str] = None,
    name: Optional[str] = None,
    **attributes: Any,
) -> InstancePredicate:
    """Build a predicate from equality checks.

    Args:
        type (Optional[str]): Required resource type, if given.
        name (Optional[str]): Required resource name, if given.
        **attributes: Top-level attribute values the instance must hold,
            compared with == after freezing (lists compare as tuples). A missing attribute never matches.

    Returns:
        InstancePredicate: A predicate usable with find_instance.

    Example:
        match(type="coder_script", name="windows-rdp", display_name="windows-rdp")
    """

    def predicate(resource: Resource, instance: Instance) -> bool:
        if type is not None and resource.type != type:
            return False
        if name is not None and resource.name != name:
            return False
        return all(
            key in instance.attributes
            and instance.attributes[key] == freeze_value(expected)
            for key, expected in attributes.items()
        )

    return predicate


def find_all_instances(
    state: TerraformState, predicate: InstancePredicate
) -> List[Instance]:
    """Return every matching instance, in resource then instance order."""
    return [
        instance
        for resource in state.resources
        for instance in resource.instances
        if predicate(resource, instance)
    ]


def find_instance(
    state: TerraformState, predicate: InstancePredicate
) -> Optional[Instance]:
    """Return the first matching instance, or None if nothing matches.

    Args:
        state (TerraformState): The decoded state to search.
        predicate (InstancePredicate): Called with (resource, instance).

    Returns:
        Optional[Instance]: The first match in state order, or None.
    """
    for resource in state.resources:
        for instance in resource.instances:
            if predicate(resource, instance):
                return instance
    return None


def find_resource_instance(
    state: TerraformState, resource_type: str, name: Optional[str] = None
) -> Optional[Instance]:
    """Return the first instance of the first resource with this type (and name)."""
    return find_instance(state, match(type=resource_type, name=name))


def find_attribute(
    state: TerraformState, predicate: InstancePredicate, attribute: str
) -> Optional[AttributeValue]:
    """Locate an instance and read one attribute from it.

    Returns:
        Optional[AttributeValue]: None if no instance matches or the matched
            instance has no such attribute.
    """
    instance = find_instance(state, predicate)
    if instance is None:
        return None
    return instance.get(attribute)


def normalized_lines(text: str) -> List[str]:
    """Split a script into non-blank lines with leading whitespace removed.

    Comparison helper only; the script attribute itself is left untouched.
    """
    return [line.lstrip() for line in text.split("\n") if line.strip()]
