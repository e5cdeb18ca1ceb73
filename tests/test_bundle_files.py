import json

import pytest

from idmsync.core.errors import SyncError
from idmsync.core.models import ExportBundle, ExportMetadata
from idmsync.utils.bundle_files import load_bundle, save_bundle
from idmsync.utils.script_hooks import are_script_hooks_valid, find_script_hooks


def test_bundle_logical_shape():
    meta = ExportMetadata("https://idm.example.com", "admin", "2026-01-01T00:00:00.000Z", "idmsync", "1.0.0")
    bundle = ExportBundle(meta=meta, entities={"sync": {"_id": "sync"}})

    assert bundle.to_dict() == {
        "meta": {
            "origin": "https://idm.example.com",
            "exportedBy": "admin",
            "exportDate": "2026-01-01T00:00:00.000Z",
            "exportTool": "idmsync",
            "exportToolVersion": "1.0.0",
        },
        "idm": {"sync": {"_id": "sync"}},
    }


def test_save_and_load(tmp_path):
    meta = ExportMetadata.now("origin", "admin", "1.0.0")
    bundle = ExportBundle(meta=meta, entities={"managed": {"_id": "managed", "objects": [{"name": "user"}]}})
    path = tmp_path / "out" / "all.idm.json"

    save_bundle(bundle, path)
    loaded = load_bundle(path)

    assert loaded.meta == meta
    assert loaded.entities == bundle.entities
    assert json.loads(path.read_text())["idm"]["managed"]["objects"][0]["name"] == "user"


def test_load_without_meta(tmp_path):
    path = tmp_path / "legacy.json"
    path.write_text(json.dumps({"idm": {"sync": {"_id": "sync"}}}))

    bundle = load_bundle(path)
    assert bundle.meta is None
    assert list(bundle.entities) == ["sync"]


@pytest.mark.parametrize("content", ["not json", json.dumps({"meta": {}}), json.dumps([1])])
def test_load_malformed(tmp_path, content):
    path = tmp_path / "bad.json"
    path.write_text(content)
    with pytest.raises(SyncError):
        load_bundle(path)


def test_load_missing_file(tmp_path):
    with pytest.raises(SyncError):
        load_bundle(tmp_path / "missing.json")


def test_find_script_hooks_nested():
    entity = {
        "objects": [
            {"name": "user", "onCreate": {"type": "text/javascript", "source": "a();"}},
            {"name": "role", "properties": {"x": {"onValidate": {"type": "groovy", "source": "b()"}}}},
        ],
        "notAHook": {"type": "string"},
    }
    hooks = find_script_hooks(entity)
    assert [h["source"] for h in hooks] == ["a();", "b()"]


def test_script_hooks_validation():
    assert are_script_hooks_valid({"onCreate": {"type": "text/javascript", "source": "var a = 1;"}})
    assert not are_script_hooks_valid({"onCreate": {"type": "text/javascript", "source": "var a = ;"}})
    # groovy is not parsed
    assert are_script_hooks_valid({"onCreate": {"type": "groovy", "source": "def x = {"}})
    # multi-line sources stored as lists
    assert are_script_hooks_valid({"onCreate": {"type": "text/javascript", "source": ["var a = 1;", "a++;"]}})
    assert are_script_hooks_valid({"no": "hooks"})
