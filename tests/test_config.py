"""
Tests for configuration validation.
"""

from vigils.core import config


def test_defaults_are_valid():
    assert config.validate_config() == []


def test_default_endpoints_in_pull_order():
    servers = config.get_bdo_servers()
    assert servers[0] == "https://dev.bdo.allyabase.com"
    assert len(servers) == 3


def test_bad_values_are_reported(monkeypatch):
    monkeypatch.setattr(config, "BDO_SERVERS", ["ftp://nope"])
    monkeypatch.setattr(config, "SEARCH_RADIUS_MILES", 0)
    monkeypatch.setattr(config, "ADMIN_PUBKEY", "not-hex")

    issues = config.validate_config()

    assert "Invalid BDO server URL: ftp://nope" in issues
    assert "SEARCH_RADIUS_MILES must be > 0" in issues
    assert "ADMIN_PUBKEY must be a hex-encoded public key" in issues


def test_no_endpoints(monkeypatch):
    monkeypatch.setattr(config, "BDO_SERVERS", [])
    assert "BDO_SERVERS must name at least one endpoint" in config.validate_config()


def test_debug_is_read_at_call_time(monkeypatch):
    assert not hasattr(config, "DEBUG")
    monkeypatch.setenv("DEBUG", "true")
    assert config.debug_enabled()
    monkeypatch.setenv("DEBUG", "false")
    assert not config.debug_enabled()
