# local_rt_setup/core/home.py
import logging
import os
from typing import Optional

from local_rt_setup.config.const import DEFAULT_HOME_DIR_NAME, INSTALL_DIR_NAME
from local_rt_setup.core.system.base import path_exists
from local_rt_setup.error import AlreadyProvisionedError, ConfigurationError

logger = logging.getLogger(__name__)


def default_home_dir() -> str:
    return os.path.join(os.path.expanduser("~"), DEFAULT_HOME_DIR_NAME)


def prepare_home(jfrog_home: Optional[str] = None) -> str:
    """Resolves and creates the directory Artifactory is installed into.

    Args:
        jfrog_home: The preset home (usually ``JFROG_HOME``). When empty, the
            default ``~/jfrog_home`` is used.

    Returns:
        The absolute path of the home directory.

    Raises:
        ConfigurationError: If the directory cannot be created.
        AlreadyProvisionedError: If it already holds an installation.
    """
    home = os.path.abspath(jfrog_home or default_home_dir())

    if not path_exists(home):
        logger.info(f"Creating JFrog home directory: {home}")
        try:
            os.makedirs(home, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                f"Could not create JFrog home directory '{home}': {e}"
            ) from e
        return home

    if not os.path.isdir(home):
        raise ConfigurationError(f"JFrog home '{home}' exists but is not a directory.")

    install_dir = os.path.join(home, INSTALL_DIR_NAME)
    if path_exists(install_dir):
        raise AlreadyProvisionedError(
            install_dir, "Artifactory dir already exists in JFrog home"
        )

    logger.debug(f"Using existing JFrog home directory: {home}")
    return home
