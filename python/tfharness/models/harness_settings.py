# tfharness/models/harness_settings.py

from typing import Dict, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class HarnessSettings(BaseSettings):
    """
    Pydantic settings for the Terraform runner.
    By default, these fields map to environment variables prefixed with `TFHARNESS_`.
    For example, `TFHARNESS_TERRAFORM_BINARY`, `TFHARNESS_APPLY_TIMEOUT`, etc.
    """

    model_config = SettingsConfigDict(env_prefix="TFHARNESS_")

    terraform_binary: str = "terraform"
    # Where per-apply state/tfvars files go; None => system temp dir.
    # Point this at /dev/shm to keep state (and secrets in it) off disk.
    ephemeral_parent_dir: Optional[str] = None
    init_upgrade: bool = True
    # Seconds; None leaves timeouts to the enclosing test framework.
    apply_timeout: Optional[float] = None
    extra_env: Dict[str, str] = {}
    sensitive: bool = False
