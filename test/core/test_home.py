import os
from unittest.mock import patch

import pytest

from local_rt_setup.core.home import default_home_dir, prepare_home
from local_rt_setup.error import AlreadyProvisionedError, ConfigurationError


def test_prepare_home_creates_missing_directory(tmp_path):
    home = tmp_path / "nested" / "jfrog_home"
    assert prepare_home(str(home)) == str(home)
    assert home.is_dir()


def test_prepare_home_accepts_existing_empty_directory(tmp_path):
    assert prepare_home(str(tmp_path)) == str(tmp_path)


def test_prepare_home_defaults_to_user_home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))

    home = prepare_home(None)

    assert home == os.path.join(str(tmp_path), "jfrog_home")
    assert home == default_home_dir()
    assert os.path.isdir(home)


def test_prepare_home_rejects_existing_installation(tmp_path):
    (tmp_path / "artifactory").mkdir()
    with pytest.raises(AlreadyProvisionedError) as exc_info:
        prepare_home(str(tmp_path))
    assert exc_info.value.install_dir == str(tmp_path / "artifactory")


def test_prepare_home_rejects_file(tmp_path):
    target = tmp_path / "file"
    target.write_text("x")
    with pytest.raises(ConfigurationError, match="not a directory"):
        prepare_home(str(target))


def test_prepare_home_wraps_creation_failure(tmp_path):
    with patch("local_rt_setup.core.home.os.makedirs", side_effect=OSError("denied")):
        with pytest.raises(ConfigurationError, match="denied"):
            prepare_home(str(tmp_path / "new_home"))
