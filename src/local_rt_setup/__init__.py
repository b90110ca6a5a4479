# local_rt_setup/__init__.py
import logging

from local_rt_setup.config.const import get_installed_version
from local_rt_setup.config.settings import Settings
from local_rt_setup.core.provisioner import Provisioner, SetupContext

logger = logging.getLogger(__name__)

__version__ = get_installed_version()

__all__ = ["Provisioner", "SetupContext", "Settings", "__version__"]
