"""
TOML configuration loader

Covers:
  - Defaults when no file is given
  - Section parsing
  - Environment variable overrides
  - Validation failures
"""

import pytest

from xroute.config import XRouteConfig, load_config
from xroute.exceptions import ConfigurationError

SAMPLE = """
[ledger]
owner = "gov-multisig"
custody = "pool-vault"
start_block = 10

[router]
fee_rate = 5

[messaging]
base_fee = 25
paused = true

[rpc]
host = "0.0.0.0"
port = 9000
"""

ENV_VARS = [
    "XROUTE_CONFIG", "XROUTE_OWNER", "XROUTE_CUSTODY", "XROUTE_FEE_RATE",
    "XROUTE_ROUTER_PAUSED", "XROUTE_BASE_MESSAGE_FEE", "XROUTE_MESSAGING_PAUSED",
    "XROUTE_RPC_HOST", "XROUTE_RPC_PORT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(SAMPLE)
    return path


class TestLoadConfig:

    def test_defaults(self):
        config = load_config()
        assert config.ledger.owner == "xroute-deployer"
        assert config.ledger.custody == "xroute-custody"
        assert config.router.fee_rate == 3
        assert config.messaging.base_fee == 10
        assert config.rpc.port == 8545

    def test_from_file(self, config_file):
        config = load_config(config_file)
        assert config.ledger.owner == "gov-multisig"
        assert config.ledger.start_block == 10
        assert config.router.fee_rate == 5
        assert not config.router.paused
        assert config.messaging.base_fee == 25
        assert config.messaging.paused
        assert config.rpc.host == "0.0.0.0"
        assert config.rpc.port == 9000

    def test_path_from_env(self, config_file, monkeypatch):
        monkeypatch.setenv("XROUTE_CONFIG", str(config_file))
        assert load_config().ledger.owner == "gov-multisig"

    def test_env_overrides_file(self, config_file, monkeypatch):
        monkeypatch.setenv("XROUTE_OWNER", "env-owner")
        monkeypatch.setenv("XROUTE_FEE_RATE", "30")
        monkeypatch.setenv("XROUTE_MESSAGING_PAUSED", "false")
        monkeypatch.setenv("XROUTE_RPC_PORT", "9100")
        config = load_config(config_file)
        assert config.ledger.owner == "env-owner"
        assert config.router.fee_rate == 30
        assert not config.messaging.paused
        assert config.rpc.port == 9100

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "absent.toml")


class TestValidation:

    def test_fee_rate_out_of_range(self, monkeypatch):
        monkeypatch.setenv("XROUTE_FEE_RATE", "1001")
        with pytest.raises(ConfigurationError):
            load_config()

    def test_owner_equals_custody(self):
        config = XRouteConfig.from_dict({"ledger": {"owner": "same", "custody": "same"}})
        with pytest.raises(ConfigurationError):
            config.validate()

    def test_negative_base_fee(self):
        config = XRouteConfig.from_dict({"messaging": {"base_fee": -1}})
        with pytest.raises(ConfigurationError):
            config.validate()

    @pytest.mark.parametrize("name", ["XROUTE_FEE_RATE", "XROUTE_BASE_MESSAGE_FEE", "XROUTE_RPC_PORT"])
    def test_malformed_integer_env(self, monkeypatch, name):
        monkeypatch.setenv(name, "ten")
        with pytest.raises(ConfigurationError, match=name):
            load_config()

    def test_error_tag(self):
        assert ConfigurationError("x").to_dict()["tag"] == "configuration"
