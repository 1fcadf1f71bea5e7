"""
tfharness/harness/__init__.py

Assertion-side helpers built on top of a decoded TerraformState.
"""

from tfharness.harness.locator import (
    InstancePredicate,
    match,
    find_instance,
    find_all_instances,
    find_resource_instance,
    find_attribute,
    normalized_lines,
)
from tfharness.harness.script_facts import FactPattern, extract_facts, find_line
from tfharness.harness.required_variables import (
    RequiredVariablesError,
    VariableDeclaration,
    VariableSchema,
    assert_required_variables,
    check_missing_variable,
    required_variable_cases,
)

__all__ = [
    "InstancePredicate",
    "match",
    "find_instance",
    "find_all_instances",
    "find_resource_instance",
    "find_attribute",
    "normalized_lines",
    "FactPattern",
    "extract_facts",
    "find_line",
    "RequiredVariablesError",
    "VariableDeclaration",
    "VariableSchema",
    "assert_required_variables",
    "check_missing_variable",
    "required_variable_cases",
]
