import pytest
from pydantic import ValidationError

from tfharness.harness.required_variables import (
    RequiredVariablesError,
    VariableDeclaration,
    VariableSchema,
    assert_required_variables,
    required_variable_cases,
)
from tfharness.utils.terraform.commands import run_terraform_init

VALID = {"agent_id": "foo", "resource_id": "bar"}

WINDOWS_RDP_SCHEMA = VariableSchema(
    variables=[
        VariableDeclaration(name="agent_id"),
        VariableDeclaration(name="resource_id"),
        VariableDeclaration(name="admin_username", required=False),
        VariableDeclaration(name="admin_password", required=False),
    ]
)


def test_required_names_keep_declaration_order():
    assert WINDOWS_RDP_SCHEMA.required_names() == ["agent_id", "resource_id"]


def test_from_variables_marks_everything_required():
    schema = VariableSchema.from_variables({"b": 1, "a": 2})
    assert schema.required_names() == ["b", "a"]


def test_duplicate_declarations_rejected():
    with pytest.raises(ValidationError, match="Duplicate"):
        VariableSchema(
            variables=[VariableDeclaration(name="a"), VariableDeclaration(name="a")]
        )


def test_required_variable_cases_remove_one_at_a_time():
    valid = {**VALID, "admin_username": "crouton"}
    assert list(required_variable_cases(WINDOWS_RDP_SCHEMA, valid)) == [
        ("agent_id", {"resource_id": "bar", "admin_username": "crouton"}),
        ("resource_id", {"agent_id": "foo", "admin_username": "crouton"}),
    ]


def test_required_variable_cases_need_a_valid_set():
    with pytest.raises(ValueError, match="resource_id"):
        list(required_variable_cases(WINDOWS_RDP_SCHEMA, {"agent_id": "foo"}))


@pytest.mark.asyncio
async def test_assert_required_variables_passes(windows_rdp_dir, settings):
    await run_terraform_init(windows_rdp_dir, settings)
    state = await assert_required_variables(
        windows_rdp_dir, WINDOWS_RDP_SCHEMA, VALID, settings
    )
    assert len(state.resources) == 2


@pytest.mark.asyncio
async def test_assert_required_variables_with_derived_schema(windows_rdp_dir, settings):
    await run_terraform_init(windows_rdp_dir, settings)
    await assert_required_variables(
        windows_rdp_dir, VariableSchema.from_variables(VALID), VALID, settings
    )


@pytest.mark.asyncio
async def test_variable_with_default_declared_required_fails(windows_rdp_dir, settings):
    await run_terraform_init(windows_rdp_dir, settings)
    schema = VariableSchema.from_variables({**VALID, "admin_username": "crouton"})
    with pytest.raises(RequiredVariablesError, match="'admin_username' is not a required"):
        await assert_required_variables(
            windows_rdp_dir, schema, {**VALID, "admin_username": "crouton"}, settings
        )


@pytest.mark.asyncio
async def test_undeclared_required_variable_fails_final_apply(windows_rdp_dir, settings):
    await run_terraform_init(windows_rdp_dir, settings)
    partial = VariableSchema(variables=[VariableDeclaration(name="agent_id")])
    with pytest.raises(RequiredVariablesError, match="reported missing"):
        await assert_required_variables(
            windows_rdp_dir, partial, {"agent_id": "foo"}, settings
        )
