import json
import logging
from unittest.mock import patch

import pytest

from idmsync import cli
from idmsync.config import FORGEOPS_DEPLOYMENT, SyncSettings
from idmsync.core.coordinator import Coordinator
from idmsync.core.errors import StoreOperationError

from conftest import FakeStore


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def fake_store():
    return FakeStore({"sync": {"mappings": []}, "script/a": {}, "script/b": {}})


@pytest.fixture
def patched(fake_store):
    def _from_settings(settings):
        return Coordinator(fake_store, settings.context())

    with patch.object(Coordinator, "from_settings", side_effect=_from_settings):
        yield fake_store


def run_cli(*argv):
    with pytest.raises(SystemExit) as info:
        cli.main(["--url", "https://idm.example.com", *argv])
        raise SystemExit(0)
    return info.value.code


def test_mask_sensitive():
    args = cli.build_parser().parse_args(["--token", "secret", "types"])
    assert cli.mask_sensitive(args)["token"] == "****"


def test_types_prints_each_type(patched, capsys):
    assert run_cli("types") == 0
    assert capsys.readouterr().out.split() == ["sync", "script"]


def test_export_writes_bundle(patched, tmp_path):
    path = tmp_path / "all.json"

    assert run_cli("--username", "admin", "export", "-f", str(path)) == 0

    data = json.loads(path.read_text())
    assert set(data["idm"]) == {"sync", "script/a", "script/b"}
    assert data["meta"]["exportedBy"] == "admin"


def test_import_failure_exits_1(patched, tmp_path):
    path = tmp_path / "in.json"
    path.write_text(json.dumps({"idm": {"sync": {"mappings": [1]}, "managed": {}}}))
    patched.fail_put["managed"] = StoreOperationError(500, "Internal Server Error", entity_id="managed")

    assert run_cli("import", "-f", str(path)) == 1
    assert patched.entities["sync"]["mappings"] == [1]


def test_delete_by_type(patched):
    assert run_cli("delete", "--type", "script") == 0
    assert set(patched.entities) == {"sync"}


def test_missing_url_exits_1(patched, monkeypatch):
    monkeypatch.delenv("IDMSYNC_BASE_URL", raising=False)
    with pytest.raises(SystemExit) as info:
        cli.main(["types"])
    assert info.value.code == 1


def test_settings_from_env_and_flags():
    env = {"IDMSYNC_BASE_URL": "https://env.example.com", "IDMSYNC_EXPORT_WORKERS": "4",
           "IDMSYNC_DEPLOYMENT_TYPE": "cloud"}
    settings = SyncSettings.from_env(env, export_workers=2, token=None)

    assert settings.base_url == "https://env.example.com"
    assert settings.export_workers == 2
    assert settings.deployment_type == "cloud"
    assert settings.verify_tls


def test_settings_reject_unknown_deployment():
    with pytest.raises(ValueError):
        SyncSettings(base_url="https://x", deployment_type="saas")


def test_case_sensitivity_unset_defers_to_policy_file():
    env = {"IDMSYNC_BASE_URL": "https://env.example.com"}
    assert SyncSettings.from_env(env).case_sensitive is None
    env["IDMSYNC_CASE_SENSITIVE"] = "false"
    assert SyncSettings.from_env(env).case_sensitive is False


def test_forgeops_deployment_type_is_accepted():
    args = cli.build_parser().parse_args(["--url", "https://x", "--deployment-type", "forgeops", "types"])
    assert cli.settings_from_args(args).context().deployment_type == FORGEOPS_DEPLOYMENT
