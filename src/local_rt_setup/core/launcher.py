# local_rt_setup/core/launcher.py
"""Starts an installed Artifactory through its own control scripts.

The scripts put the server in the background themselves, so the launcher
only waits for the script to exit. Whether the server actually comes up is
decided later by the readiness poller.
"""

import logging
import os
import subprocess
import sys
from typing import List

from local_rt_setup.core.system.base import WINDOWS
from local_rt_setup.error import LaunchError

logger = logging.getLogger(__name__)


def build_start_command(bin_dir: str, os_type: str) -> List[str]:
    if os_type == WINDOWS:
        return [os.path.join(bin_dir, "InstallService.bat")]
    return [os.path.join(bin_dir, "artifactoryctl"), "start"]


def start_artifactory(bin_dir: str, os_type: str) -> None:
    """Runs the platform start command, forwarding its output to stderr.

    Args:
        bin_dir: The installation's bin directory.
        os_type: "mac", "windows" or "linux".

    Raises:
        LaunchError: If the command cannot be spawned or exits nonzero.
    """
    command = build_start_command(bin_dir, os_type)
    command_str = " ".join(command)
    logger.info("Starting Artifactory...")
    logger.debug(f"Executing start command: {command_str}")

    # Detach from our process group so the server outlives this process.
    popen_kwargs = {}
    if os_type == WINDOWS:
        popen_kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP
    else:
        popen_kwargs["start_new_session"] = True

    try:
        result = subprocess.run(
            command,
            stdin=subprocess.DEVNULL,
            stdout=sys.stderr,
            stderr=sys.stderr,
            check=False,
            **popen_kwargs,
        )
    except FileNotFoundError:
        raise LaunchError(command_str, "Start command not found") from None
    except OSError as e:
        raise LaunchError(command_str, f"Failed to run start command ({e})") from e

    if result.returncode != 0:
        raise LaunchError(
            command_str, f"Start command exited with code {result.returncode}"
        )
    logger.info("Artifactory start command completed.")
