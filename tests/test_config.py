import pytest

from cargopack.config import DEFAULT_INSTALL_ARGS, CargoConfig
from cargopack.errors import ValidationError


def test_defaults_without_environment() -> None:
    config = CargoConfig.from_env({})

    assert config == CargoConfig()
    assert config.install_flags() == (*DEFAULT_INSTALL_ARGS, "--locked")


def test_reads_member_filter_and_install_args() -> None:
    config = CargoConfig.from_env(
        {
            "BP_CARGO_WORKSPACE_MEMBERS": "api, worker,,",
            "BP_CARGO_INSTALL_ARGS": "--offline --features 'tls metrics'",
            "BP_CARGO_LOCKED": "false",
        }
    )

    assert config.workspace_members == ("api", "worker")
    assert config.install_args == ("--offline", "--features", "tls metrics")
    assert config.install_flags() == ("--offline", "--features", "tls metrics")


def test_locked_is_not_duplicated() -> None:
    config = CargoConfig(install_args=("--locked",))

    assert config.install_flags() == ("--locked",)


def test_invalid_boolean_raises_validation_error() -> None:
    with pytest.raises(ValidationError) as excinfo:
        CargoConfig.from_env({"BP_CARGO_LOCKED": "maybe"})

    assert excinfo.value.context["variable"] == "BP_CARGO_LOCKED"
    assert excinfo.value.hint is not None
