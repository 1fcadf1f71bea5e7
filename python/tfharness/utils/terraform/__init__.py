"""
tfharness/utils/terraform/__init__.py

Provides a convenient import interface for the Terraform submodules:

- commands.py for the TerraformRunner and init/apply helpers
- decoder.py for turning state file text into a TerraformState
- ephemeral.py for per-apply state and tfvars files

Exports:
  - TerraformRunner, run_terraform_init, run_terraform_apply
  - decode_state, decode_state_dict
  - ephemeral_tfstate, maybe_tfvars
"""

from tfharness.utils.terraform.decoder import decode_state, decode_state_dict
from tfharness.utils.terraform.ephemeral import ephemeral_tfstate, maybe_tfvars
from tfharness.utils.terraform.commands import (
    TerraformRunner,
    run_terraform_init,
    run_terraform_apply,
)

__all__ = [
    "TerraformRunner",
    "run_terraform_init",
    "run_terraform_apply",
    "decode_state",
    "decode_state_dict",
    "ephemeral_tfstate",
    "maybe_tfvars",
]
