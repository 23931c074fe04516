import pytest
import yaml

from homeferry.config import default_config


@pytest.fixture
def home(tmp_path):
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def mount(tmp_path):
    path = tmp_path / "mnt"
    path.mkdir()
    return path


@pytest.fixture
def config(tmp_path, home, mount):
    config = default_config()
    config.update(home=str(home), mount_point=str(mount), tmp_dir=str(tmp_path / "tmp"))
    return config


@pytest.fixture
def config_file(tmp_path, config):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "home": config["home"],
        "mount_point": config["mount_point"],
        "tmp_dir": config["tmp_dir"],
    }))
    return path


@pytest.fixture
def make_config_file(tmp_path, config):
    def _make(**extra):
        path = tmp_path / "custom-config.yaml"
        settings = {key: config[key] for key in ("home", "mount_point", "tmp_dir")}
        settings.update(extra)
        path.write_text(yaml.safe_dump(settings))
        return path
    return _make
