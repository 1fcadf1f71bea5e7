"""
Stand-in for the terraform CLI used by the test suite.

Understands just enough of `init` and `apply -state=... -var-file ...` to
evaluate the windows-rdp fixture module: required variables are read from the
`variable` blocks in main.tf, templates are rendered with ${name} substitution,
and a version 4 state file is written to the -state path.

Set FAKE_TERRAFORM_FAIL=1 to make apply fail with a provider error.
"""

import json
import os
import re
import sys
import uuid

LOCK_FILE = ".terraform.lock.hcl"
VARIABLE_BLOCK_RE = re.compile(r'^variable "(\w+)" \{\n(.*?)^\}', re.MULTILINE | re.DOTALL)
DEFAULT_RE = re.compile(r'^\s*default\s*=\s*"(.*)"$', re.MULTILINE)
TEMPLATE_VAR_RE = re.compile(r"\$\{(\w+)\}")


def fail(message):
    sys.stderr.buffer.write(message.encode("utf-8"))
    sys.exit(1)


def declared_variables():
    with open("main.tf") as f:
        source = f.read()
    declared = {}
    for found in VARIABLE_BLOCK_RE.finditer(source):
        default = DEFAULT_RE.search(found.group(2))
        declared[found.group(1)] = default.group(1) if default else None
    return declared, source


def render(path, values):
    with open(path) as f:
        template = f.read()
    return TEMPLATE_VAR_RE.sub(lambda m: str(values[m.group(1)]), template)


def missing_variable_diagnostic(name, source):
    line = source.splitlines().index(f'variable "{name}" {{') + 1
    return (
        "╷\n"
        "│ Error: No value for required variable\n"
        "│ \n"
        f"│   on main.tf line {line}:\n"
        f'│   {line}: variable "{name}" {{\n'
        "│ \n"
        f'│ The root module input variable "{name}" is not set, and has no default\n'
        "│ value. Use a -var or -var-file command line argument to provide a value for\n"
        "│ this variable.\n"
        "╵\n"
    )


def instance(attributes):
    return {"schema_version": 1, "attributes": attributes, "sensitive_attributes": []}


def build_state(values):
    patch = render(
        "devolutions-patch.js",
        {
            "CODER_USERNAME": values["admin_username"],
            "CODER_PASSWORD": values["admin_password"],
        },
    )
    script = render(
        "powershell-installation-script.tftpl",
        {
            "admin_username": values["admin_username"],
            "admin_password": values["admin_password"],
            "patch_file_contents": patch,
        },
    )
    provider = 'provider["registry.terraform.io/coder/coder"]'
    return {
        "version": 4,
        "terraform_version": "1.9.5",
        "serial": 1,
        "lineage": str(uuid.uuid4()),
        "outputs": {},
        "resources": [
            {
                "mode": "managed",
                "type": "coder_app",
                "name": "windows-rdp",
                "provider": provider,
                "instances": [
                    instance(
                        {
                            "agent_id": values["agent_id"],
                            "display_name": "Web RDP",
                            "slug": "web-rdp",
                            "url": "http://localhost:7171",
                            "subdomain": True,
                            "healthcheck": [
                                {
                                    "interval": 5,
                                    "threshold": 15,
                                    "url": "http://localhost:7171",
                                }
                            ],
                        }
                    )
                ],
            },
            {
                "mode": "managed",
                "type": "coder_script",
                "name": "windows-rdp",
                "provider": provider,
                "instances": [
                    instance(
                        {
                            "agent_id": values["agent_id"],
                            "display_name": "windows-rdp",
                            "icon": "/icon/desktop.svg",
                            "run_on_start": True,
                            "script": script,
                        }
                    )
                ],
            },
        ],
        "check_results": None,
    }


def apply(args):
    if not os.path.exists(LOCK_FILE):
        fail("╷\n│ Error: Required plugins are not installed\n╵\n")
    if os.environ.get("FAKE_TERRAFORM_FAIL"):
        fail(
            "╷\n│ Error: Invalid provider configuration\n│ \n"
            "│ Provider \"registry.terraform.io/coder/coder\" requires explicit configuration.\n╵\n"
        )

    state_path = next(a.split("=", 1)[1] for a in args if a.startswith("-state="))
    supplied = {}
    if "-var-file" in args:
        with open(args[args.index("-var-file") + 1]) as f:
            supplied = json.load(f)

    declared, source = declared_variables()
    missing = [n for n, d in declared.items() if d is None and n not in supplied]
    if missing:
        fail("".join(missing_variable_diagnostic(n, source) for n in missing))

    values = {n: supplied.get(n, d) for n, d in declared.items()}
    with open(state_path, "w") as f:
        json.dump(build_state(values), f, indent=2)
    print("Apply complete! Resources: 2 added, 0 changed, 0 destroyed.")


def main():
    action, args = sys.argv[1], sys.argv[2:]
    if action == "init":
        with open(LOCK_FILE, "w") as f:
            f.write('provider "registry.terraform.io/coder/coder" {}\n')
        print("Terraform has been successfully initialized!")
    elif action == "apply":
        apply(args)
    else:
        fail(f"fake terraform: unsupported action {action}\n")


if __name__ == "__main__":
    main()
