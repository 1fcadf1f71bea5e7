"""
tfharness/models/terraform_state.py

Holds the pydantic models for a decoded Terraform state file:

  - TerraformState: the root artifact of one apply run.
  - Resource: one declared infrastructure unit (type + name).
  - Instance: one concrete realization of a Resource, carrying attributes.
  - OutputValue: one root module output.

All models are frozen. Resource and instance order is the order in which the
state file lists them, which is what the locator iterates over.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Tuple, Type, TypeVar, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_serializer,
    field_validator,
)

from tfharness.models.attribute_value import AttributeValue, freeze_value, thaw_value

T = TypeVar("T")


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class OutputValue(_Frozen):
    """Represents a root module output as stored in the state file.

    Attributes:
        value: The output data, can be any JSON type.
        type: Optional Terraform type hint (string, list, etc.).
        sensitive: True if the output is marked sensitive.
    """

    value: Any
    type: Union[str, List[Any], None] = None
    sensitive: bool = False

    @field_validator("value", "type")
    @classmethod
    def freeze_output(cls, value: Any) -> Any:
        """Deep-freeze the output data."""
        return freeze_value(value)

    @field_serializer("value", "type")
    def thaw_output(self, value: Any) -> Any:
        return thaw_value(value)


class Instance(_Frozen):
    """One concrete realization of a resource.

    Attributes:
        index_key: The count index or for_each key, None for single instances.
        schema_version: Provider schema version the attributes were written with.
        attributes: Attribute name -> decoded value, deep-frozen (read-only
            mappings, tuples for lists).
        sensitive_attributes: Paths Terraform marked as sensitive, deep-frozen.
    """

    index_key: Union[int, str, None] = None
    schema_version: Optional[int] = None
    attributes: Mapping[str, Any]
    sensitive_attributes: Tuple[Any, ...] = ()

    @field_validator("attributes", "sensitive_attributes")
    @classmethod
    def freeze_attributes(cls, value: Any) -> Any:
        """Deep-freeze so a decoded script body cannot be changed in place."""
        return freeze_value(value)

    @field_serializer("attributes", "sensitive_attributes")
    def thaw_attributes(self, value: Any) -> Any:
        return thaw_value(value)

    def attribute(self, name: str) -> AttributeValue:
        """Return an attribute as a typed AttributeValue.

        Raises:
            KeyError: If the instance has no such attribute.
        """
        return AttributeValue(self.attributes[name])

    def get(self, name: str) -> Optional[AttributeValue]:
        """Return an attribute as an AttributeValue, or None if it is absent."""
        if name not in self.attributes:
            return None
        return AttributeValue(self.attributes[name])


class Resource(_Frozen):
    """One declared infrastructure unit.

    Attributes:
        mode: "managed" for resources, "data" for data sources.
        type: The resource kind, e.g. "coder_script".
        name: The logical name within the module.
        provider: The provider address string, if recorded.
        module: The child module address, None for the root module.
        instances: One or more instances, in state file order.
    """

    mode: str = "managed"
    type: str
    name: str
    provider: Optional[str] = None
    module: Optional[str] = None
    instances: Tuple[Instance, ...] = Field(min_length=1)

    @property
    def address(self) -> str:
        """The Terraform address, e.g. 'module.x.data.foo.bar'."""
        local = f"{self.type}.{self.name}"
        if self.mode == "data":
            local = f"data.{local}"
        return f"{self.module}.{local}" if self.module else local


class TerraformState(_Frozen):
    """The decoded result of one apply run.

    Attributes:
        version: The state file format version.
        terraform_version: The version of Terraform that wrote the state.
        serial: The state serial number.
        lineage: The state lineage identifier.
        outputs: Root module outputs by name.
        resources: Every resource, in state file order.
    """

    version: Optional[int] = None
    terraform_version: Optional[str] = None
    serial: Optional[int] = None
    lineage: Optional[str] = None
    outputs: Mapping[str, OutputValue] = Field(
        default_factory=dict, validate_default=True
    )
    resources: Tuple[Resource, ...]

    @field_validator("outputs")
    @classmethod
    def freeze_outputs(
        cls, value: Mapping[str, OutputValue]
    ) -> Mapping[str, OutputValue]:
        return freeze_value(value)

    @field_serializer("outputs")
    def thaw_outputs(self, value: Mapping[str, OutputValue]) -> Any:
        return thaw_value(value)

    def is_empty(self) -> bool:
        """Check if this state contains zero resources."""
        return len(self.resources) == 0

    def resources_of_type(self, resource_type: str) -> List[Resource]:
        """Return every resource of a given type, in state order."""
        return [res for res in self.resources if res.type == resource_type]

    def get_output(self, output_name: str, output_type: Type[T]) -> T:
        """Retrieve a typed output value.

        Args:
            output_name (str): Which output to retrieve by name.
            output_type (Type[T]): The Python type to validate the value against.

        Returns:
            The validated output value.

        Raises:
            KeyError: If the output is missing.
            ValueError: If validation to output_type fails.
        """
        output_val = self.outputs.get(output_name)
        if output_val is None:
            raise KeyError(f"Output '{output_name}' not found in Terraform state.")
        try:
            return TypeAdapter(output_type).validate_python(thaw_value(output_val.value))
        except ValidationError as e:
            raise ValueError(
                f"Output '{output_name}' is not a valid {output_type}: {e}"
            ) from e
