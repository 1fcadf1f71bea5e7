"""
tfharness/utils/terraform/ephemeral.py

Ephemeral files for a single Terraform apply:

  - ephemeral_tfstate: a fresh, not-yet-existing state file path, so each apply
    evaluates the module from scratch instead of updating a previous state.
  - maybe_tfvars: a JSON var file holding the variable set, yielded as
    ['-var-file', path] arguments.

Both are removed on exit. Variable files may contain passwords, so
`parent_dir` can point at /dev/shm to keep them in memory.
"""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Mapping, Optional

import aiofiles

from tfharness.utils.ephemeral_file import ephemeral_manager


def prune_variables(variables: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Drop variables whose value is None so the module default applies."""
    return {name: val for name, val in (variables or {}).items() if val is not None}


@asynccontextmanager
async def ephemeral_tfstate(
    parent_dir: Optional[str] = None,
) -> AsyncGenerator[str, None]:
    """
    Yield a path for 'terraform apply -state=<path>' inside a private directory.

    Args:
        parent_dir (Optional[str]):
            Where to create the private directory. None uses the system temp dir.

    Yields:
        str: The state file path. The file does not exist until Terraform writes it.
    """
    async with ephemeral_manager(
        single_file_name="terraform.tfstate",
        prefix="tfstate-",
        parent_dir=parent_dir,
    ) as tfstate_path:
        yield tfstate_path


@asynccontextmanager
async def maybe_tfvars(
    variables: Optional[Mapping[str, Any]],
    parent_dir: Optional[str] = None,
) -> AsyncGenerator[List[str], None]:
    """
    Creates an ephemeral .tfvars.json file if `variables` are provided, then
    yields the `-var-file` arguments to pass to Terraform.

    Args:
        variables (Optional[Mapping[str, Any]]):
            Key-value pairs to place into the var file. None values are dropped.
            If nothing remains, no file is created.
        parent_dir (Optional[str]):
            Where to create the private directory. None uses the system temp dir.

    Yields:
        List[str]: e.g. ["-var-file", "/tmp/tfvars-xxxx/terraform.tfvars.json"],
        or an empty list when there is nothing to pass.
    """
    pruned = prune_variables(variables)
    if not pruned:
        yield []
        return

    async with ephemeral_manager(
        single_file_name="terraform.tfvars.json",
        prefix="tfvars-",
        parent_dir=parent_dir,
    ) as tfvars_file:
        async with aiofiles.open(tfvars_file, "w") as f:
            await f.write(json.dumps(pruned, indent=2))

        yield ["-var-file", tfvars_file]
