# local_rt_setup/error.py
"""Custom exception hierarchy for local-rt-setup.

Every failure raised by the provisioning pipeline derives from
:class:`RTSetupError`, so the command-line entry point can report any of
them uniformly and exit with a nonzero status. Low-level exceptions
(``OSError``, ``requests`` exceptions) are wrapped with ``raise ... from e``
so the original cause stays attached.
"""

from typing import Optional


class RTSetupError(Exception):
    """Base class for all errors raised by local-rt-setup."""


# --- Environment / precondition errors ---


class ConfigurationError(RTSetupError):
    """The environment, a settings file or the running server's
    configuration is not in the expected state."""


class AlreadyProvisionedError(RTSetupError):
    """An Artifactory installation already exists in the target home."""

    def __init__(self, install_dir: str, message: str = "Artifactory dir already exists"):
        self.install_dir = install_dir
        self.message = message
        super().__init__(f"{message}: {install_dir}")


class MissingLicenseError(RTSetupError):
    """No license was provided through the environment."""

    def __init__(self, env_var: str):
        self.env_var = env_var
        super().__init__(
            f"No license provided. Aborting. Provide a license by setting the '{env_var}' env var."
        )


class InvalidVersionError(RTSetupError):
    """The requested Artifactory version is malformed or unsupported."""


class UnsupportedPlatformError(RTSetupError):
    """The host operating system is not one of mac, windows or linux."""

    def __init__(self, system_name: str):
        self.system_name = system_name
        super().__init__(
            f"The OS on this machine ({system_name}) is currently unsupported. "
            "Supported OS are darwin, windows and linux."
        )


# --- Network / protocol errors ---


class InternetConnectivityError(RTSetupError):
    """A request could not reach its destination."""


class DownloadError(RTSetupError):
    """The release server answered the archive download with a non-200 status."""

    def __init__(self, status_code: int, reason: Optional[str] = None):
        self.status_code = status_code
        self.reason = reason
        status = f"{status_code} {reason}" if reason else str(status_code)
        super().__init__(f"Failed downloading Artifactory. Releases response: {status}")


class ProtocolError(RTSetupError):
    """A server response or a server-written file broke an expected contract."""


class CredentialError(RTSetupError):
    """The admin access token could not be obtained."""


class ConnectionTimeoutError(RTSetupError):
    """A polling loop exhausted its time budget."""

    def __init__(self, description: str, attempts: int):
        self.description = description
        self.attempts = attempts
        super().__init__(f"Timed out {description} after {attempts} attempts.")


# --- Local installation errors ---


class FileOperationError(RTSetupError):
    """Reading or writing a local file failed."""


class InstallationError(RTSetupError):
    """The downloaded archive could not be installed."""


class LaunchError(RTSetupError):
    """The Artifactory start command could not be run or exited with an error."""

    def __init__(self, command: str, message: str):
        self.command = command
        self.message = message
        super().__init__(f"{message}: {command}")
