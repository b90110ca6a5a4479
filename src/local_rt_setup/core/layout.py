# local_rt_setup/core/layout.py
"""Well-known paths inside an Artifactory installation.

Major version 6 ships a flat layout (``bin``, ``etc``), while 7+ nests the
binaries under ``app/bin`` and keeps configuration and runtime data under
``var``. `ServerLayout` captures every difference between the two in one
immutable value, resolved once per run.
"""

import os
from dataclasses import dataclass
from typing import Optional

from local_rt_setup.config.const import INSTALL_DIR_NAME

_VAR = os.path.join(INSTALL_DIR_NAME, "var")
_VAR_ETC = os.path.join(_VAR, "etc")


@dataclass(frozen=True)
class ServerLayout:
    """Relative paths (from the home directory) of an installation.

    Paths that only exist in the modern layout are None for the legacy one.
    """

    is_legacy: bool
    install_dir: str
    bin_dir: str
    license_path: str
    var_dir: Optional[str] = None
    system_yaml_path: Optional[str] = None
    system_properties_path: Optional[str] = None
    access_import_path: Optional[str] = None
    token_trigger_path: Optional[str] = None
    generated_token_path: Optional[str] = None
    common_script_path: Optional[str] = None

    @property
    def has_access_bootstrap(self) -> bool:
        return self.token_trigger_path is not None

    def resolve(self, home: str, relative_path: str) -> str:
        return os.path.join(home, relative_path)


LEGACY_LAYOUT = ServerLayout(
    is_legacy=True,
    install_dir=INSTALL_DIR_NAME,
    bin_dir=os.path.join(INSTALL_DIR_NAME, "bin"),
    license_path=os.path.join(INSTALL_DIR_NAME, "etc", "artifactory.lic"),
)

MODERN_LAYOUT = ServerLayout(
    is_legacy=False,
    install_dir=INSTALL_DIR_NAME,
    bin_dir=os.path.join(INSTALL_DIR_NAME, "app", "bin"),
    license_path=os.path.join(_VAR_ETC, "artifactory", "artifactory.cluster.license"),
    var_dir=_VAR,
    system_yaml_path=os.path.join(_VAR_ETC, "system.yaml"),
    system_properties_path=os.path.join(
        _VAR_ETC, "artifactory", "artifactory.system.properties"
    ),
    access_import_path=os.path.join(_VAR_ETC, "access", "access.config.import.yml"),
    token_trigger_path=os.path.join(
        _VAR, "bootstrap", "etc", "access", "keys", "generate.token.json"
    ),
    generated_token_path=os.path.join(_VAR_ETC, "access", "keys", "token.json"),
    common_script_path=os.path.join(
        INSTALL_DIR_NAME, "app", "bin", "artifactoryCommon.sh"
    ),
)


def layout_for(is_legacy_major: bool) -> ServerLayout:
    return LEGACY_LAYOUT if is_legacy_major else MODERN_LAYOUT
