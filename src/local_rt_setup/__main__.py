# local_rt_setup/__main__.py
"""
Command-line entry point of local-rt-setup.

Sets up logging, reads the run's inputs from the environment and the
command line, and runs the provisioning pipeline. Any failure is printed and
turned into exit status 1.
"""

import logging
import sys

import click

from . import __version__
from .config.const import DEFAULT_VERSION, app_name_title
from .config.settings import Settings
from .core.provisioner import Provisioner, SetupContext
from .error import RTSetupError
from .logging import DEFAULT_LOG_DIR, log_separator, setup_logging


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(
    __version__, "-v", "--version", message=f"{app_name_title} %(version)s"
)
@click.option(
    "--rt-version",
    default=DEFAULT_VERSION,
    show_default=True,
    help="The version of Artifactory to download: [RELEASE] or X.Y.Z (6.0.0 or higher).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="JSON file overriding the default endpoints, credentials and polling budget.",
)
@click.option(
    "--log-dir",
    default=DEFAULT_LOG_DIR,
    show_default=True,
    type=click.Path(file_okay=False),
    help="Directory for the rotating log file.",
)
@click.option("--verbose", is_flag=True, help="Log debug messages to the console.")
def cli(rt_version: str, config_path: str, log_dir: str, verbose: bool):
    """Downloads, installs and starts a local Artifactory for integration tests.

    The license is read from the RTLIC environment variable. The installation
    goes to JFROG_HOME (default: ~/jfrog_home). When GITHUB_ENV is set, the
    generated admin token is exported there as JFROG_TESTS_LOCAL_ACCESS_TOKEN.
    """
    try:
        settings = Settings(config_path)
        cli_level = logging.DEBUG if verbose else settings.get("logging.cli_level")
        logger = setup_logging(
            log_dir=log_dir,
            file_log_level=settings.get("logging.file_level"),
            cli_log_level=cli_level,
            force_reconfigure=True,
        )
        log_separator(logger, app_name=app_name_title, app_version=__version__)
        logger.info(f"Starting {app_name_title} v{__version__}...")

        context = SetupContext.from_environment(rt_version)
        Provisioner(context, settings).run()
    except RTSetupError as e:
        logging.getLogger("local_rt_setup").error(f"Provisioning failed: {e}")
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)

    click.secho("Local Artifactory is up and configured.", fg="green")


def main():
    """Main execution function wrapped for final, fatal exception handling."""
    try:
        cli()
    except Exception as e:
        # Last-resort catch-all for unexpected errors not handled by Click.
        logger = logging.getLogger("local_rt_setup")
        logger.critical("A fatal, unhandled error occurred.", exc_info=True)
        click.secho(
            f"\nFATAL UNHANDLED ERROR: {type(e).__name__}: {e}", fg="red", bold=True, err=True
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
