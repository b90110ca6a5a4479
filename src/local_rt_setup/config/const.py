# local_rt_setup/config/const.py
from importlib.metadata import version, PackageNotFoundError

# --- Package Constants ---
package_name = "local-rt-setup"
executable_name = package_name
app_name_title = package_name.replace("-", " ").title()
env_name = package_name.replace("-", "_").upper()
user_agent = f"jfrog/{package_name}"

# --- Environment variables read or written by the tool ---
JFROG_HOME_ENV = "JFROG_HOME"
LICENSE_ENV = "RTLIC"
GITHUB_ENV_FILE_ENV = "GITHUB_ENV"
EXPORTED_TOKEN_ENV = "JFROG_TESTS_LOCAL_ACCESS_TOKEN"

# --- Artifactory ---
DEFAULT_VERSION = "[RELEASE]"
MIN_MAJOR_VERSION = 6
LEGACY_MAJOR_VERSION = 6
DEFAULT_HOME_DIR_NAME = "jfrog_home"
INSTALL_DIR_NAME = "artifactory"
EXTRACTED_DIR_PREFIX = "artifactory-pro-"
ADMIN_TOKEN_AUDIENCE = "*@*"


def get_installed_version() -> str:
    try:
        installed_version = version(package_name)
        return installed_version
    except PackageNotFoundError:
        installed_version = "0.0.0"
        return installed_version
