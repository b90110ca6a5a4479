# local_rt_setup/core/provisioner.py
"""Runs the complete provisioning of a local Artifactory, step by step.

Every step either completes or raises an `RTSetupError`, which aborts the
run. Nothing is rolled back: a failed run leaves its partial installation
behind and the next run refuses to touch it until it is removed.
"""

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Callable, MutableMapping, Optional

from local_rt_setup.config.const import (
    DEFAULT_VERSION,
    GITHUB_ENV_FILE_ENV,
    JFROG_HOME_ENV,
    LICENSE_ENV,
)
from local_rt_setup.config.settings import Settings
from local_rt_setup.core import config_patcher, credentials, installer, post_start
from local_rt_setup.core.client import ArtifactoryClient
from local_rt_setup.core.downloader import ArtifactoryDownloader
from local_rt_setup.core.home import prepare_home
from local_rt_setup.core.launcher import start_artifactory
from local_rt_setup.core.layout import ServerLayout, layout_for
from local_rt_setup.core.readiness import wait_for_successful_ping
from local_rt_setup.core.system.base import get_os_type
from local_rt_setup.core.target import InstallTarget, is_legacy_version
from local_rt_setup.error import MissingLicenseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SetupContext:
    """Everything a run takes from its environment, validated up front."""

    license_text: str = field(repr=False)
    rt_version: str
    os_type: str
    jfrog_home: Optional[str] = None
    github_env_file: Optional[str] = None

    @classmethod
    def from_environment(
        cls,
        rt_version: str = DEFAULT_VERSION,
        environ: Optional[MutableMapping[str, str]] = None,
        system_name: Optional[str] = None,
    ) -> "SetupContext":
        """Reads and validates the run's inputs without touching disk or network.

        Raises:
            MissingLicenseError: If ``RTLIC`` is unset or empty.
            InvalidVersionError: If `rt_version` is not acceptable.
            UnsupportedPlatformError: If the host OS is not supported.
        """
        environ = os.environ if environ is None else environ
        license_text = environ.get(LICENSE_ENV)
        if not license_text:
            raise MissingLicenseError(LICENSE_ENV)

        is_legacy_version(rt_version)
        return cls(
            license_text=license_text,
            rt_version=rt_version,
            os_type=get_os_type(system_name),
            jfrog_home=environ.get(JFROG_HOME_ENV) or None,
            github_env_file=environ.get(GITHUB_ENV_FILE_ENV) or None,
        )


class Provisioner:
    """Downloads, installs, configures and starts one Artifactory instance."""

    def __init__(
        self,
        context: SetupContext,
        settings: Optional[Settings] = None,
        client: Optional[ArtifactoryClient] = None,
        environ: Optional[MutableMapping[str, str]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.context = context
        self.settings = settings or Settings()
        self.client = client or ArtifactoryClient.from_settings(self.settings)
        self._environ = os.environ if environ is None else environ
        self._sleep = sleep or time.sleep
        self.target: Optional[InstallTarget] = None
        self.layout: Optional[ServerLayout] = None

    @property
    def _poll_interval(self) -> int:
        return self.settings.get("polling.interval_seconds")

    @property
    def _poll_max_wait(self) -> int:
        return self.settings.get("polling.max_wait_seconds")

    def prepare(self) -> InstallTarget:
        """Resolves the home directory and fixes the install target."""
        home = prepare_home(self.context.jfrog_home)
        if not self.context.jfrog_home:
            # External tooling run after us expects the same JFROG_HOME.
            self._environ[JFROG_HOME_ENV] = home
        self.target = InstallTarget.create(home, self.context.rt_version)
        self.layout = layout_for(self.target.is_legacy_major)
        return self.target

    def install(self) -> None:
        downloader = ArtifactoryDownloader(
            download_dir=self.target.home_directory,
            rt_version=self.target.version,
            os_type=self.context.os_type,
            is_legacy=self.target.is_legacy_major,
            base_url=self.settings.get("download.base_url"),
            timeout=self.settings.get("download.timeout"),
        )
        archive = downloader.download()
        installer.install_archive(
            archive, self.target.home_directory, self.layout, self.context.os_type
        )

    def configure(self) -> None:
        try:
            config_patcher.patch_configuration(
                self.target.home_directory, self.layout, self.context.license_text
            )
        finally:
            # The license must not leak to the server or to a later run.
            self._environ.pop(LICENSE_ENV, None)

    def start(self) -> None:
        bin_dir = self.layout.resolve(self.target.home_directory, self.layout.bin_dir)
        start_artifactory(bin_dir, self.context.os_type)
        wait_for_successful_ping(
            self.client,
            interval=self._poll_interval,
            max_wait=self._poll_max_wait,
            sleep=self._sleep,
        )

    def mint_admin_token(self) -> Optional[credentials.AccessToken]:
        """Obtains and exports the admin token (modern layout only)."""
        if not self.layout.has_access_bootstrap:
            return None

        token_path = self.layout.resolve(
            self.target.home_directory, self.layout.generated_token_path
        )
        bootstrap_token = credentials.wait_for_bootstrap_token(
            token_path,
            interval=self._poll_interval,
            max_wait=self._poll_max_wait,
            sleep=self._sleep,
        )
        admin_token = credentials.exchange_for_admin_token(self.client, bootstrap_token)
        credentials.export_token(admin_token, self.context.github_env_file)
        return admin_token

    def configure_running_server(self) -> None:
        post_start.set_custom_base_url(self.client)
        if not self.layout.is_legacy:
            post_start.enable_archive_index(self.client)

    def run(self) -> Optional[credentials.AccessToken]:
        """Runs every step in order.

        Returns:
            The admin token for modern versions, None for legacy ones.

        Raises:
            RTSetupError: From whichever step failed.
        """
        target = self.prepare()
        logger.info(
            f"Provisioning Artifactory {target.version} in {target.home_directory} "
            f"({'legacy' if target.is_legacy_major else 'modern'} layout, {self.context.os_type})"
        )
        self.install()
        self.configure()
        self.start()
        admin_token = self.mint_admin_token()
        self.configure_running_server()
        logger.info("Local Artifactory is ready.")
        return admin_token
