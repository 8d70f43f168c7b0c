"""
Unit Tests for client construction and configuration
"""

import base64
import copy
import dataclasses
import os

import pytest

from mpesa_sdk import ConfigurationError, Mpesa, MpesaConfig, MpesaError, config_from_env
from mpesa_sdk.schemas import load_config


def _without(config, *path):
    """Deep copy of config with the key at ``path`` removed."""
    trimmed = copy.deepcopy(config)
    target = trimmed
    for key in path[:-1]:
        target = target[key]
    del target[path[-1]]
    return trimmed


class TestConstruction:

    @pytest.mark.parametrize("path, message", [
        (("env",),                               "Missing required configuration parameter: env"),
        (("credentials",),                       "Missing required configuration parameter: credentials"),
        (("app_info",),                          "Missing required configuration parameter: app_info"),
        (("business_short_code",),               "Missing required configuration parameter: business_short_code"),
        (("short_code_type",),                   "Missing required configuration parameter: short_code_type"),
        (("requester",),                         "Missing required configuration parameter: requester"),
        (("credentials", "pass_key"),            "Missing required credentials parameter: pass_key"),
        (("credentials", "initiator_pass"),      "Missing required credentials parameter: initiator_pass"),
        (("credentials", "initiator_name"),      "Missing required credentials parameter: initiator_name"),
        (("app_info", "consumer_key"),           "Missing required app_info parameter: consumer_key"),
        (("app_info", "consumer_secret"),        "Missing required app_info parameter: consumer_secret"),
    ])
    def test_missing_field_raises(self, base_config, transport, path, message):
        with pytest.raises(ConfigurationError) as exc_info:
            Mpesa(_without(base_config, *path), transport=transport)

        assert exc_info.value.message == message
        transport.get.assert_not_called()

    @pytest.mark.parametrize("value", ["", None, 0])
    def test_falsy_value_counts_as_missing(self, base_config, value):
        with pytest.raises(ConfigurationError, match="business_short_code"):
            Mpesa({**base_config, "business_short_code": value})

    def test_blank_nested_value_counts_as_missing(self, base_config):
        config = copy.deepcopy(base_config)
        config["credentials"]["pass_key"] = ""

        with pytest.raises(ConfigurationError, match="credentials parameter: pass_key"):
            Mpesa(config)

    def test_top_level_fields_reported_before_nested(self, base_config):
        config = _without(base_config, "requester")
        del config["credentials"]["pass_key"]

        with pytest.raises(ConfigurationError, match="configuration parameter: requester"):
            Mpesa(config)

    def test_configuration_error_is_an_mpesa_error(self, base_config):
        with pytest.raises(MpesaError):
            Mpesa(_without(base_config, "env"))

    def test_non_mapping_config_raises(self):
        with pytest.raises(ConfigurationError, match="mapping"):
            Mpesa("not a config")

    def test_invalid_timeout_raises(self, base_config):
        with pytest.raises(ConfigurationError, match="Invalid configuration parameter: timeout"):
            Mpesa({**base_config, "timeout": -1})

    def test_unknown_keys_are_ignored(self, base_config, transport):
        client = Mpesa({**base_config, "callback_url": "https://example.com"}, transport=transport)
        assert client.business_short_code == "174379"

    def test_integer_shortcode_is_stored_as_string(self, base_config, transport):
        client = Mpesa({**base_config, "business_short_code": 174379}, transport=transport)
        assert client.business_short_code == "174379"

    def test_sandbox_base_url(self, client):
        assert client.base_url == "https://sandbox.safaricom.co.ke"

    def test_production_base_url(self, base_config, transport):
        client = Mpesa({**base_config, "env": "production"}, transport=transport)
        assert client.base_url == "https://api.safaricom.co.ke"

    def test_other_environments_use_sandbox(self, base_config, transport):
        client = Mpesa({**base_config, "env": "staging"}, transport=transport)
        assert client.base_url == "https://sandbox.safaricom.co.ke"

    def test_password_derived_from_shortcode_passkey_and_timestamp(self, client, base_config):
        raw = "174379" + base_config["credentials"]["pass_key"] + client.timestamp
        assert client.password == base64.b64encode(raw.encode()).decode()

    def test_timestamp_format(self, client):
        assert len(client.timestamp) == 14
        assert client.timestamp.isdigit()

    def test_construction_does_not_touch_the_network(self, client, transport):
        transport.get.assert_not_called()
        transport.post.assert_not_called()

    def test_prebuilt_config_is_accepted(self, base_config, transport):
        config = load_config(base_config)
        client = Mpesa(config, transport=transport)
        assert client.config is config


class TestMpesaConfig:

    def test_config_is_immutable(self, base_config):
        config = load_config(base_config)
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.env = "production"

    def test_secrets_hidden_from_repr(self, base_config):
        text = repr(load_config(base_config))
        assert base_config["credentials"]["pass_key"] not in text
        assert base_config["credentials"]["initiator_pass"] not in text
        assert "test_consumer_secret" not in text
        assert "test_consumer_key" in text

    def test_default_timeout(self, base_config):
        assert load_config(base_config).timeout == 30

    def test_returns_mpesa_config(self, base_config):
        assert isinstance(load_config(base_config), MpesaConfig)


class TestConfigFromEnv:

    ENV = {
        "MPESA_ENV": "production",
        "MPESA_REQUESTER": "254708374149",
        "MPESA_SHORTCODE_TYPE": "till",
        "MPESA_SHORTCODE": "600000",
        "MPESA_PASSKEY": "passkey",
        "MPESA_INITIATOR_NAME": "apiop",
        "MPESA_INITIATOR_PASSWORD": "secret",
        "MPESA_CONSUMER_KEY": "ck",
        "MPESA_CONSUMER_SECRET": "cs",
        "MPESA_TIMEOUT": "12",
    }

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch, tmp_path):
        # load_dotenv writes straight into os.environ
        environ = {k: v for k, v in os.environ.items() if not k.startswith("MPESA_")}
        monkeypatch.setattr(os, "environ", environ)
        monkeypatch.chdir(tmp_path)

    def test_reads_environment(self, monkeypatch):
        for name, value in self.ENV.items():
            monkeypatch.setenv(name, value)

        config = config_from_env()

        assert config["env"] == "production"
        assert config["business_short_code"] == "600000"
        assert config["credentials"]["initiator_pass"] == "secret"
        assert config["app_info"]["consumer_secret"] == "cs"
        assert config["certificates_dir"] is None
        assert load_config(config).timeout == 12.0

    def test_reads_dotenv_file(self, tmp_path):
        dotenv = tmp_path / "mpesa.env"
        dotenv.write_text("\n".join(f"{k}={v}" for k, v in self.ENV.items()))

        config = config_from_env(str(dotenv))

        assert config["short_code_type"] == "till"
        assert config["credentials"]["pass_key"] == "passkey"

    def test_environment_wins_over_dotenv(self, monkeypatch, tmp_path):
        dotenv = tmp_path / "mpesa.env"
        dotenv.write_text("MPESA_SHORTCODE=111111\n")
        monkeypatch.setenv("MPESA_SHORTCODE", "222222")

        assert config_from_env(str(dotenv))["business_short_code"] == "222222"

    def test_env_defaults_to_sandbox(self):
        assert config_from_env()["env"] == "sandbox"

    def test_missing_variables_are_reported_on_construction(self):
        with pytest.raises(ConfigurationError, match="business_short_code"):
            Mpesa(config_from_env())

    def test_from_env_builds_client(self, monkeypatch, certificates_dir, transport):
        for name, value in self.ENV.items():
            monkeypatch.setenv(name, value)
        monkeypatch.setenv("MPESA_CERTIFICATES_DIR", certificates_dir)

        client = Mpesa.from_env(transport=transport)

        assert client.base_url == "https://api.safaricom.co.ke"
        assert client.short_code_type == "till"
        assert client.config.timeout == 12.0
