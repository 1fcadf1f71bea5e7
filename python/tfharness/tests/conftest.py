"""Shared fixtures: a fake terraform binary and isolated copies of fixture modules."""

import shutil
import sys
from pathlib import Path
from typing import Any, Dict

import pytest

from tfharness.models.harness_settings import HarnessSettings

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fake_terraform(tmp_path: Path) -> str:
    """An executable 'terraform' that runs fixtures/fake_terraform.py."""
    wrapper = tmp_path / "bin" / "terraform"
    wrapper.parent.mkdir()
    wrapper.write_text(
        "#!/bin/sh\n"
        f'exec "{sys.executable}" "{FIXTURES_DIR / "fake_terraform.py"}" "$@"\n'
    )
    wrapper.chmod(0o755)
    return str(wrapper)


@pytest.fixture
def ephemeral_dir(tmp_path: Path) -> Path:
    path = tmp_path / "ephemeral"
    path.mkdir()
    return path


@pytest.fixture
def settings(fake_terraform: str, ephemeral_dir: Path) -> HarnessSettings:
    return HarnessSettings(
        terraform_binary=fake_terraform,
        ephemeral_parent_dir=str(ephemeral_dir),
        init_upgrade=False,
    )


@pytest.fixture
def windows_rdp_dir(tmp_path: Path) -> str:
    """A private copy of the windows-rdp module, so init/apply side effects stay local."""
    target = tmp_path / "windows-rdp"
    shutil.copytree(FIXTURES_DIR / "windows-rdp", target)
    return str(target)


def state_dict(*resources: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "version": 4,
        "terraform_version": "1.9.5",
        "serial": 3,
        "lineage": "0c5e7a34-5b1c-4f77-a4f1-7f7a3d1f2b9e",
        "outputs": {"message": {"value": "hello, world", "type": "string"}},
        "resources": list(resources),
    }


def resource_dict(
    resource_type: str, name: str, *attribute_sets: Dict[str, Any], **extra: Any
) -> Dict[str, Any]:
    return {
        "mode": "managed",
        "type": resource_type,
        "name": name,
        "provider": 'provider["registry.terraform.io/coder/coder"]',
        "instances": [
            {"schema_version": 1, "attributes": attrs, "sensitive_attributes": []}
            for attrs in attribute_sets
        ],
        **extra,
    }
