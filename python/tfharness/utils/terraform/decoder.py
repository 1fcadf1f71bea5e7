"""
tfharness/utils/terraform/decoder.py

Decodes the JSON text of a Terraform state file into a TerraformState.

The shape is checked structurally before pydantic validation so that the most
common problems (no resources list, a resource without instances, an instance
without attributes) produce a MalformedState naming the offending resource.
Attribute values keep their JSON-decoded content, deep-frozen: objects become
read-only mappings and arrays become tuples.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Union

from pydantic import ValidationError

from tfharness.errors import MalformedState
from tfharness.models.terraform_state import TerraformState


def _describe(resource: Any, position: int) -> str:
    if isinstance(resource, dict) and "type" in resource and "name" in resource:
        return f"{resource['type']}.{resource['name']}"
    return f"resources[{position}]"


def _check_shape(data: Mapping[str, Any]) -> None:
    """Raise MalformedState for structural problems pydantic would report poorly."""
    if "resources" not in data:
        raise MalformedState("State is missing the top-level 'resources' field.")
    resources = data["resources"]
    if not isinstance(resources, list):
        raise MalformedState("State field 'resources' must be a list.")

    for position, resource in enumerate(resources):
        label = _describe(resource, position)
        if not isinstance(resource, dict):
            raise MalformedState(f"Resource {label} is not an object.")
        for field in ("type", "name"):
            if not isinstance(resource.get(field), str):
                raise MalformedState(f"Resource {label} has no string '{field}'.")
        instances = resource.get("instances")
        if not isinstance(instances, list) or not instances:
            raise MalformedState(f"Resource {label} has no instances.")
        for index, instance in enumerate(instances):
            if not isinstance(instance, dict) or not isinstance(
                instance.get("attributes"), dict
            ):
                raise MalformedState(
                    f"Instance {index} of resource {label} has no attributes mapping."
                )


def decode_state_dict(data: Any) -> TerraformState:
    """Validate an already-parsed state document.

    Args:
        data (Any): The result of JSON-decoding a state file.

    Returns:
        TerraformState: The decoded, frozen state.

    Raises:
        MalformedState: If the document does not have the state file shape.
    """
    if not isinstance(data, dict):
        raise MalformedState(
            f"State must be a JSON object, got {type(data).__name__}."
        )
    _check_shape(data)
    try:
        return TerraformState.model_validate(data)
    except ValidationError as e:
        raise MalformedState(f"State failed validation: {e}") from e


def decode_state(raw: Union[str, bytes]) -> TerraformState:
    """Parse raw state file text into a TerraformState.

    Args:
        raw (Union[str, bytes]): The JSON text Terraform wrote.

    Returns:
        TerraformState: The decoded, frozen state.

    Raises:
        MalformedState: If the text is empty, not UTF-8, not JSON, or not
            state-shaped.
    """
    if not raw or not raw.strip():
        raise MalformedState("State output is empty.")
    try:
        data: Dict[str, Any] = json.loads(raw)
    except ValueError as e:
        # JSONDecodeError, or UnicodeDecodeError for bytes that are not UTF-8
        raise MalformedState(f"State output is not valid JSON: {e}") from e
    return decode_state_dict(data)
