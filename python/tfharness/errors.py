"""
tfharness/errors.py

Error taxonomy shared by the runner, decoder and attribute accessors:

  - MissingVariable: apply failed because a required variable had no value.
  - ApplyFailed: init/apply exited abnormally for any other reason.
  - MalformedState: the state file could not be decoded into a TerraformState.
  - AttributeTypeError: an AttributeValue accessor was used on the wrong kind.

Pattern-not-found in the script fact extractor is deliberately not an error;
it is returned as None.
"""

from __future__ import annotations

from typing import List, Optional, Sequence


class HarnessError(Exception):
    """Base class for all tfharness failures."""


class MissingVariable(HarnessError):
    """Raised when apply fails because required variables were not set.

    Attributes:
        name (str): The first missing variable reported by Terraform.
        names (List[str]): Every missing variable, in the order reported.
        diagnostics (str): The raw Terraform diagnostics.
    """

    def __init__(self, names: Sequence[str], diagnostics: str = "") -> None:
        """
        Initialize a MissingVariable error.

        Args:
            names (Sequence[str]): Missing variable names; must not be empty.
            diagnostics (str): The raw stderr emitted by Terraform.
        """
        if not names:
            raise ValueError("MissingVariable requires at least one name.")
        self.names: List[str] = list(names)
        self.name: str = self.names[0]
        self.diagnostics = diagnostics
        super().__init__(
            "Required variable(s) not set: " + ", ".join(self.names)
        )


class ApplyFailed(HarnessError):
    """Raised when the Terraform workflow exits abnormally.

    Attributes:
        diagnostics (str): The verbatim diagnostic text from Terraform.
        return_code (Optional[int]): The exit code, if the process exited.
    """

    def __init__(self, diagnostics: str, return_code: Optional[int] = None) -> None:
        self.diagnostics = diagnostics
        self.return_code = return_code
        super().__init__(
            f"Terraform failed with return code {return_code}:\n{diagnostics}"
        )


class MalformedState(HarnessError):
    """Raised when raw output does not decode into the expected state shape."""


class AttributeTypeError(HarnessError, TypeError):
    """Raised when an attribute value is read as the wrong kind.

    Attributes:
        expected (str): The kind the caller asked for.
        actual (str): The kind the value actually holds.
    """

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected a {expected} attribute value, got {actual}.")
