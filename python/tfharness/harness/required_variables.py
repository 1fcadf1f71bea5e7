"""
tfharness/harness/required_variables.py

Checks that a module really requires the variables it declares as required.

For each required variable, apply is run with that one variable removed from an
otherwise valid set and must fail with MissingVariable naming exactly that
variable. Finally apply is run with the full set and must succeed. Only
one-at-a-time removal is checked, never combinations.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from pydantic import BaseModel, field_validator

from tfharness.errors import MissingVariable
from tfharness.models.harness_settings import HarnessSettings
from tfharness.models.terraform_state import TerraformState
from tfharness.utils.terraform.commands import TerraformRunner

logger = logging.getLogger(__name__)


class RequiredVariablesError(AssertionError):
    """A module's required-variable behaviour did not match its schema."""


class VariableDeclaration(BaseModel):
    """One declared module variable.

    Attributes:
        name (str): The variable name.
        required (bool): True when the variable has no default value.
    """

    name: str
    required: bool = True


class VariableSchema(BaseModel):
    """The variables a module declares, in declaration order."""

    variables: List[VariableDeclaration]

    @field_validator("variables")
    @classmethod
    def validate_unique(cls, value: List[VariableDeclaration]) -> List[VariableDeclaration]:
        """Check that no variable is declared twice."""
        names = [decl.name for decl in value]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate variable declarations: {duplicates}")
        return value

    @classmethod
    def from_variables(cls, valid: Mapping[str, Any]) -> VariableSchema:
        """Treat every variable of a known-good set as required."""
        return cls(variables=[VariableDeclaration(name=name) for name in valid])

    def required_names(self) -> List[str]:
        return [decl.name for decl in self.variables if decl.required]


def required_variable_cases(
    schema: VariableSchema, valid: Mapping[str, Any]
) -> Iterator[Tuple[str, Dict[str, Any]]]:
    """Yield (name, valid set without name) for each required variable.

    Handy for pytest parametrisation, one test case per variable.

    Raises:
        ValueError: If `valid` does not set every required variable.
    """
    absent = [name for name in schema.required_names() if name not in valid]
    if absent:
        raise ValueError(f"Valid variable set is missing required variables: {absent}")

    for name in schema.required_names():
        yield name, {key: val for key, val in valid.items() if key != name}


async def check_missing_variable(
    runner: TerraformRunner, name: str, variables: Mapping[str, Any]
) -> None:
    """Apply without `name` and require a MissingVariable for exactly that variable.

    Raises:
        RequiredVariablesError: If apply succeeds or reports other variables.
    """
    try:
        await runner.apply(variables)
    except MissingVariable as exc:
        if exc.names != [name]:
            raise RequiredVariablesError(
                f"Omitting {name!r} reported missing variables {exc.names}"
            ) from exc
        logger.debug("Apply without %r failed as expected", name)
        return
    raise RequiredVariablesError(
        f"{name!r} is not a required variable but it is declared as required"
    )


async def assert_required_variables(
    module_dir: str,
    schema: VariableSchema,
    valid: Mapping[str, Any],
    settings: Optional[HarnessSettings] = None,
) -> TerraformState:
    """Run the one-at-a-time removal sweep, then a full apply.

    Args:
        module_dir (str): The (already initialized) module directory.
        schema (VariableSchema): The module's declared variables.
        valid (Mapping[str, Any]): A variable set that applies successfully.
        settings (Optional[HarnessSettings]): Runner settings.

    Returns:
        TerraformState: The state from the final full apply.

    Raises:
        RequiredVariablesError: If any check fails.
        ApplyFailed: If any apply fails for a reason other than a missing variable.
    """
    runner = TerraformRunner(module_dir, settings)
    for name, variables in required_variable_cases(schema, valid):
        await check_missing_variable(runner, name, variables)

    try:
        return await runner.apply(valid)
    except MissingVariable as exc:
        raise RequiredVariablesError(
            f"Apply with the full variable set still reported missing {exc.names}"
        ) from exc
