# local_rt_setup/core/config_patcher.py
"""Writes the configuration an installation needs before its first start.

The legacy layout only needs a license file. The modern layout additionally
needs a system configuration allowing the bundled Derby database, an Access
import configuration, the staging-mode system property and the empty marker
file that makes Access generate a bootstrap admin token on first boot.
"""

import logging
from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from local_rt_setup.core.layout import ServerLayout
from local_rt_setup.core.system.base import (
    CONFIG_FILE_MODE,
    SECRET_FILE_MODE,
    write_file,
)
from local_rt_setup.error import ConfigurationError

logger = logging.getLogger(__name__)

SYSTEM_YAML_TEMPLATE = "system.yaml.j2"
ACCESS_IMPORT_TEMPLATE = "access.config.import.yml.j2"
STAGING_MODE_PROPERTY = "staging.mode=true\n"

SYSTEM_YAML_VALUES = {
    "node_id": "art1",
    "node_ip": "127.0.0.1",
    "allow_non_postgresql": "true",
}
ACCESS_IMPORT_VALUES = {
    "token_default_expiry": "0",
}


_template_env = Environment(
    loader=PackageLoader("local_rt_setup", "templates"),
    undefined=StrictUndefined,
    keep_trailing_newline=True,
)


def render_template(template_name: str, **values) -> str:
    """Renders one of the bundled templates with `values`.

    Raises:
        ConfigurationError: If the template is missing or a placeholder has
            no value.
    """
    try:
        return _template_env.get_template(template_name).render(**values)
    except TemplateError as e:
        raise ConfigurationError(
            f"Failed to render template '{template_name}': {e}"
        ) from e


def write_license(home: str, layout: ServerLayout, license_text: str) -> str:
    """Writes the license where the installation layout expects it."""
    license_path = layout.resolve(home, layout.license_path)
    logger.info("Creating license...")
    write_file(license_path, license_text, SECRET_FILE_MODE)
    return license_path


def allow_non_postgresql_db(home: str, layout: ServerLayout) -> None:
    path = layout.resolve(home, layout.system_yaml_path)
    logger.info(f"Writing system configuration to {path}")
    write_file(path, render_template(SYSTEM_YAML_TEMPLATE, **SYSTEM_YAML_VALUES))


def write_access_import_config(home: str, layout: ServerLayout) -> None:
    path = layout.resolve(home, layout.access_import_path)
    logger.info(f"Writing Access import configuration to {path}")
    write_file(path, render_template(ACCESS_IMPORT_TEMPLATE, **ACCESS_IMPORT_VALUES))


def allow_staging_mode(home: str, layout: ServerLayout) -> None:
    path = layout.resolve(home, layout.system_properties_path)
    logger.info("Enabling staging mode...")
    write_file(path, STAGING_MODE_PROPERTY, CONFIG_FILE_MODE)


def trigger_token_creation(home: str, layout: ServerLayout) -> None:
    """Creates the empty ``generate.token.json`` marker.

    Its presence alone makes Access write a bootstrap token to
    ``var/etc/access/keys/token.json`` on startup.
    """
    path = layout.resolve(home, layout.token_trigger_path)
    logger.info("Triggering bootstrap token creation...")
    write_file(path, b"", SECRET_FILE_MODE)


def patch_configuration(home: str, layout: ServerLayout, license_text: str) -> None:
    """Writes every pre-start configuration file for `layout`.

    Raises:
        FileOperationError: If any file cannot be written.
        ConfigurationError: If a bundled template cannot be rendered.
    """
    write_license(home, layout, license_text)
    if layout.is_legacy:
        return

    allow_non_postgresql_db(home, layout)
    write_access_import_config(home, layout)
    allow_staging_mode(home, layout)
    trigger_token_creation(home, layout)
