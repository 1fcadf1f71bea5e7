"""
tfharness/utils/ephemeral_file.py

Provides an async context manager for ephemeral files. A private directory is
created per use (under `/dev/shm` or the system temp dir), one file path inside
it is yielded, and everything is removed on exit.

Each Terraform apply gets its own ephemeral directory, so concurrent scenarios
never share state or tfvars files.
"""

import logging
import os
import tempfile
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

logger = logging.getLogger(__name__)


@asynccontextmanager
async def ephemeral_manager(
    *,
    single_file_name: str,
    prefix: str = "ephemeral-",
    parent_dir: Optional[str] = None,
) -> AsyncGenerator[str, None]:
    """
    Create a private ephemeral directory and yield the path of one file in it.

    The file itself is not created; the caller (or a subprocess) writes it.
    On exit the file, anything else written into the directory, and the
    directory itself are removed.

    Args:
        single_file_name: The ephemeral file name inside the directory.
        prefix: Prefix for the ephemeral directory name.
        parent_dir: Where to place the ephemeral directory. None uses the
            system temp dir.

    Yields:
        str: The absolute path of the ephemeral file.

    Raises:
        ValueError: If single_file_name contains a path separator.
    """
    if os.sep in single_file_name:
        raise ValueError(f"Not a plain file name: {single_file_name!r}")

    ephemeral_dir = tempfile.mkdtemp(dir=parent_dir, prefix=prefix)

    try:
        yield os.path.join(ephemeral_dir, single_file_name)
    finally:
        # Terraform may leave a backup next to the state file
        if os.path.isdir(ephemeral_dir):
            for item in os.listdir(ephemeral_dir):
                item_path = os.path.join(ephemeral_dir, item)
                if os.path.isfile(item_path) or os.path.islink(item_path):
                    os.remove(item_path)
            os.rmdir(ephemeral_dir)
        logger.debug("Removed ephemeral directory %s", ephemeral_dir)
