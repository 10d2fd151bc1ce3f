"""Shared fixtures: keep session logs out of the user's home directory."""

import json
import os
import tempfile

import pytest

os.environ.setdefault("SCHEMASPLIT_LOG_DIR", tempfile.mkdtemp(prefix="schemasplit-logs-"))


@pytest.fixture(autouse=True)
def _fresh_config():
    from schemasplit.config import get_config

    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def write_json():
    """Write a JSON value to a path, creating parent directories."""

    def _write(path, value):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(value), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def hub_schema():
    return {
        "contract_name": "eris-hub",
        "contract_version": "1.4.0",
        "idl_version": "1.0.0",
        "instantiate": {"title": "InstantiateMsg", "type": "object"},
        "execute": {"title": "ExecuteMsg", "oneOf": []},
        "query": {"title": "QueryMsg", "oneOf": []},
        "migrate": None,
        "sudo": None,
        "responses": {
            "config": {"title": "ConfigResponse", "type": "object"},
            "state": {"title": "StateResponse", "type": "object"},
        },
    }
