"""
tfharness/utils/terraform/commands.py

Implements the Terraform commands the harness drives (init, apply), plus helpers
for building command arrays. Every apply writes to a fresh ephemeral state file
(see ephemeral.py), so repeated applies with different variable sets never see
each other's state.

Failures are translated into the harness error taxonomy:
    - MissingVariable when Terraform reports an unset required variable,
      detected by passing an `error_parser` to `run_command`.
    - ApplyFailed for any other non-zero exit, carrying the raw diagnostics.
    - MalformedState when apply succeeds but the state cannot be decoded.

Exports the following primary names:
    - TerraformRunner
    - run_terraform_init
    - run_terraform_apply
"""

from __future__ import annotations

import logging
import os
import re
from typing import Any, Dict, List, Mapping, Optional

import aiofiles

from tfharness.errors import ApplyFailed, MalformedState, MissingVariable
from tfharness.models.harness_settings import HarnessSettings
from tfharness.models.terraform_state import TerraformState
from tfharness.utils.async_command_runner import CommandError, run_command
from tfharness.utils.terraform.decoder import decode_state
from tfharness.utils.terraform.ephemeral import ephemeral_tfstate, maybe_tfvars

logger = logging.getLogger(__name__)

# Terraform word-wraps diagnostics inside a box drawn with "│", so words may be
# separated by a line break plus the box edge.
_SEP = r"(?:\s|│)+"
_MISSING_VARIABLE_RE = re.compile(
    _SEP.join(["input", "variable", r'"(?P<name>[^"]+)"', "is", "not", "set"])
)


def _missing_variable_parser(stderr: str) -> Optional[MissingVariable]:
    """Parse stderr for unset required variables, returning a MissingVariable if found.

    Args:
        stderr (str): The standard error output from Terraform.

    Returns:
        Optional[MissingVariable]: The error to raise, listing each missing
            variable once in the order Terraform reported them, or None.
    """
    names: List[str] = []
    for found in _MISSING_VARIABLE_RE.finditer(stderr):
        if found.group("name") not in names:
            names.append(found.group("name"))
    if not names:
        return None
    return MissingVariable(names, diagnostics=stderr)


def _make_base_command(
    binary: str,
    action: str,
    init_upgrade: bool = False,
    state_path: Optional[str] = None,
) -> List[str]:
    """Builds the Terraform command for an action, with the harness's fixed flags.

    Args:
        binary: The terraform executable.
        action: "init" or "apply".
        init_upgrade: If True, add '-upgrade' for init.
        state_path: For apply, the state file to write.

    Returns:
        A list of command tokens, e.g. ["terraform","apply","-no-color",...].
    """
    base = [binary, action, "-no-color", "-input=false"]

    init_flags = ["-upgrade"] if (action == "init" and init_upgrade) else []
    apply_flags = (
        ["-auto-approve", "-compact-warnings"]
        + ([f"-state={state_path}"] if state_path else [])
        if action == "apply"
        else []
    )

    return base + init_flags + apply_flags


class TerraformRunner:
    """Runs init/apply for one module directory.

    A runner holds no state between calls besides its module directory and
    settings. Give each concurrently running scenario its own module directory:
    init writes lock files and provider caches into it.
    """

    def __init__(
        self, module_dir: str, settings: Optional[HarnessSettings] = None
    ) -> None:
        """
        Initialize a TerraformRunner.

        Args:
            module_dir (str): Path to a self-contained Terraform module.
            settings (Optional[HarnessSettings]): Runner settings; read from
                the environment when omitted.

        Raises:
            ValueError: If module_dir is not a directory.
        """
        if not os.path.isdir(module_dir):
            raise ValueError(f"Terraform directory not found: {module_dir}")
        self.module_dir = os.path.abspath(module_dir)
        self.settings = settings or HarnessSettings()

    def _env(self) -> Dict[str, str]:
        return {"TF_IN_AUTOMATION": "1", **self.settings.extra_env}

    async def _run(self, command: List[str]) -> str:
        logger.debug("Running %s in %s", " ".join(command[:2]), self.module_dir)
        try:
            return await run_command(
                command,
                sensitive=self.settings.sensitive,
                env=self._env(),
                cwd=self.module_dir,
                error_parser=_missing_variable_parser,
                timeout=self.settings.apply_timeout,
            )
        except CommandError as exc:
            diagnostics = exc.stderr.strip() or exc.stdout.strip() or str(exc)
            raise ApplyFailed(diagnostics, exc.return_code) from exc

    async def init(self) -> None:
        """Run 'terraform init' in the module directory.

        Safe to repeat; re-initializing does not change apply results.

        Raises:
            ApplyFailed: If init exits non-zero.
        """
        command = _make_base_command(
            self.settings.terraform_binary,
            "init",
            init_upgrade=self.settings.init_upgrade,
        )
        await self._run(command)
        logger.info("Initialized Terraform module %s", self.module_dir)

    async def apply(
        self, variables: Optional[Mapping[str, Any]] = None
    ) -> TerraformState:
        """Run 'terraform apply' against a fresh state and return the decoded state.

        Args:
            variables (Optional[Mapping[str, Any]]):
                Variable name -> value. None values are omitted so the module
                default applies.

        Returns:
            TerraformState: The state Terraform wrote for this apply.

        Raises:
            MissingVariable: If a required variable without default was not set.
            ApplyFailed: If apply exits non-zero for any other reason.
            MalformedState: If the written state cannot be decoded.
        """
        parent_dir = self.settings.ephemeral_parent_dir
        async with ephemeral_tfstate(parent_dir) as tfstate_path:
            async with maybe_tfvars(variables, parent_dir) as tfvars_args:
                command = (
                    _make_base_command(
                        self.settings.terraform_binary,
                        "apply",
                        state_path=tfstate_path,
                    )
                    + tfvars_args
                )
                await self._run(command)

            if not os.path.exists(tfstate_path):
                raise MalformedState(
                    f"Terraform apply in {self.module_dir} wrote no state file."
                )
            async with aiofiles.open(tfstate_path, "r") as f:
                raw = await f.read()

        state = decode_state(raw)
        logger.info(
            "Applied Terraform module %s (%d resources)",
            self.module_dir,
            len(state.resources),
        )
        return state


async def run_terraform_init(
    module_dir: str, settings: Optional[HarnessSettings] = None
) -> None:
    """Run 'terraform init' for module_dir. See TerraformRunner.init."""
    await TerraformRunner(module_dir, settings).init()


async def run_terraform_apply(
    module_dir: str,
    variables: Optional[Mapping[str, Any]] = None,
    settings: Optional[HarnessSettings] = None,
) -> TerraformState:
    """Run 'terraform apply' for module_dir. See TerraformRunner.apply."""
    return await TerraformRunner(module_dir, settings).apply(variables)
