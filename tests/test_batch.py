"""Tests for the tree-level split driver."""
import json
from pathlib import Path

import pytest


def _snapshot(root: Path) -> dict[str, str]:
    return {
        str(p.relative_to(root)): p.read_text(encoding="utf-8", errors="replace")
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def workspace(tmp_path, write_json, hub_schema):
    """A small contract workspace after the schema generator has run."""
    write_json(tmp_path / "contracts" / "hub" / "schema" / "eris-hub.json", hub_schema)
    write_json(tmp_path / "contracts" / "arb-vault" / "schema" / "arb-vault.json", {
        "contract_name": "arb-vault",
        "instantiate": {"title": "InstantiateMsg"},
        "execute": {"title": "ExecuteMsg"},
        "query": {"title": "QueryMsg"},
        "migrate": {"title": "MigrateMsg"},
        "responses": {"state": {"title": "StateResponse"}},
    })
    write_json(tmp_path / "contracts" / "hub" / "target" / "schema.json",
               {"contract_name": "ignored", "query": {}})
    write_json(tmp_path / "node_modules" / "pkg" / "package.json",
               {"contract_name": "ignored", "query": {}})
    write_json(tmp_path / "scripts" / "tsconfig.json", {"compilerOptions": {}})
    (tmp_path / "scripts" / "broken.json").write_text("{,")
    (tmp_path / "contracts" / "hub" / "Cargo.toml").write_text("[package]")
    return tmp_path


class TestSchemaSplitter:
    def test_workers_clamped(self):
        from schemasplit.batch import SchemaSplitter
        assert SchemaSplitter(workers=0).workers == 1
        assert SchemaSplitter(workers=1000).workers == SchemaSplitter.MAX_WORKERS

    def test_default_exclusions(self):
        from schemasplit.batch import SchemaSplitter
        assert SchemaSplitter().excluded == ("node_modules", "target", ".git")

    def test_empty_tree(self, tmp_path):
        from schemasplit.batch import SchemaSplitter
        summary = SchemaSplitter().run(tmp_path)
        assert summary["scanned"] == 0
        assert summary["split"] == 0
        assert summary["files"] == []


class TestSchemaSplitterRun:
    def test_splits_workspace(self, workspace):
        from schemasplit.batch import SchemaSplitter
        summary = SchemaSplitter().run(workspace)

        hub = workspace / "contracts" / "hub" / "schema"
        arb = workspace / "contracts" / "arb-vault" / "schema"
        assert not (hub / "eris-hub.json").exists()
        assert not (arb / "arb-vault.json").exists()
        assert {p.name for p in arb.iterdir()} == {
            "arb_vault_instantiate.json",
            "arb_vault_execute.json",
            "arb_vault_query.json",
            "arb_vault_migrate.json",
            "arb_vault_state.json",
        }
        assert summary["split"] == 2
        assert summary["written"] == 10
        # tsconfig.json and broken.json
        assert summary["skipped"] == 2
        assert summary["scanned"] == 4
        assert summary["collisions"] == 0

    def test_excluded_trees_untouched(self, workspace):
        from schemasplit.batch import SchemaSplitter
        SchemaSplitter().run(workspace)
        assert (workspace / "contracts" / "hub" / "target" / "schema.json").exists()
        assert (workspace / "node_modules" / "pkg" / "package.json").exists()
        assert not (workspace / "node_modules" / "pkg" / "ignored_query.json").exists()

    def test_noise_untouched(self, workspace):
        from schemasplit.batch import SchemaSplitter
        SchemaSplitter().run(workspace)
        assert (workspace / "scripts" / "broken.json").read_text() == "{,"
        assert json.loads((workspace / "scripts" / "tsconfig.json").read_text()) == {"compilerOptions": {}}

    def test_second_run_is_noop(self, workspace):
        from schemasplit.batch import SchemaSplitter
        SchemaSplitter().run(workspace)
        before = _snapshot(workspace)
        summary = SchemaSplitter().run(workspace)
        assert _snapshot(workspace) == before
        assert summary["split"] == 0
        assert summary["written"] == 0

    def test_on_emit_receives_every_file(self, workspace):
        from schemasplit.batch import SchemaSplitter
        seen = []
        summary = SchemaSplitter().run(workspace, on_emit=seen.append)
        assert sorted(seen) == sorted(summary["files"])

    def test_on_progress_per_json_file(self, workspace):
        from schemasplit.batch import SchemaSplitter
        progress = []
        SchemaSplitter().run(workspace, on_progress=lambda p, ok: progress.append((p.name, ok)))
        assert sorted(progress) == sorted([
            ("eris-hub.json", True),
            ("arb-vault.json", True),
            ("tsconfig.json", False),
            ("broken.json", False),
        ])

    def test_dry_run(self, workspace):
        from schemasplit.batch import SchemaSplitter
        before = _snapshot(workspace)
        summary = SchemaSplitter(dry_run=True).run(workspace)
        assert _snapshot(workspace) == before
        assert summary["written"] == 10

    def test_custom_exclusions(self, workspace):
        from schemasplit.batch import SchemaSplitter
        summary = SchemaSplitter(excluded=("node_modules", "arb")).run(workspace)
        # target/ is no longer excluded, arb-vault/ now is
        assert (workspace / "contracts" / "arb-vault" / "schema" / "arb-vault.json").exists()
        assert (workspace / "contracts" / "hub" / "target" / "ignored_query.json").exists()
        assert summary["split"] == 2

    def test_collision_counted_last_write_wins(self, tmp_path, write_json):
        from schemasplit.batch import SchemaSplitter
        # Both sanitise to "a_b"
        write_json(tmp_path / "one.json", {"contract_name": "a-b", "query": {"from": "one"}})
        write_json(tmp_path / "two.json", {"contract_name": "a_b", "query": {"from": "two"}})
        summary = SchemaSplitter().run(tmp_path)
        assert summary["collisions"] == 1
        assert summary["written"] == 2
        assert json.loads((tmp_path / "a_b_query.json").read_text())["from"] in {"one", "two"}

    def test_deeply_nested_file_skipped(self, tmp_path, write_json):
        from schemasplit.batch import SchemaSplitter
        (tmp_path / "deep.json").write_text("[" * 200000 + "]" * 200000)
        write_json(tmp_path / "c.json", {"contract_name": "c", "query": {"q": 1}})
        summary = SchemaSplitter().run(tmp_path)
        assert summary["split"] == 1
        assert summary["skipped"] == 1
        assert (tmp_path / "deep.json").exists()
        assert json.loads((tmp_path / "c_query.json").read_text()) == {"q": 1}

    def test_write_failure_aborts(self, workspace, monkeypatch):
        from schemasplit import splitter
        from schemasplit.batch import SchemaSplitter

        def failing_emit(directory, contract_name, field_name, value):
            raise splitter.SplitWriteError(Path(directory) / "x.json", "write failed: disk full")

        monkeypatch.setattr(splitter, "emit", failing_emit)
        with pytest.raises(splitter.SplitWriteError):
            SchemaSplitter().run(workspace)


class TestParallelRun:
    def test_matches_sequential(self, tmp_path, write_json, hub_schema):
        from schemasplit.batch import SchemaSplitter
        seq_root = tmp_path / "seq"
        par_root = tmp_path / "par"
        for root in (seq_root, par_root):
            for i in range(12):
                doc = dict(hub_schema, contract_name=f"contract-{i}")
                write_json(root / f"c{i}" / "schema" / f"contract-{i}.json", doc)
            (root / "noise.json").write_text("nope")

        seq = SchemaSplitter(workers=1).run(seq_root)
        par = SchemaSplitter(workers=4).run(par_root)

        assert _snapshot(seq_root) == _snapshot(par_root)
        for key in ("scanned", "split", "skipped", "written", "collisions"):
            assert seq[key] == par[key]

    def test_write_failure_aborts(self, workspace, monkeypatch):
        from schemasplit import splitter
        from schemasplit.batch import SchemaSplitter

        def failing_emit(directory, contract_name, field_name, value):
            raise splitter.SplitWriteError(Path(directory) / "x.json", "write failed: disk full")

        monkeypatch.setattr(splitter, "emit", failing_emit)
        with pytest.raises(splitter.SplitWriteError):
            SchemaSplitter(workers=4).run(workspace)


class TestSplitTree:
    def test_uses_config_root(self, workspace, monkeypatch):
        from schemasplit.batch import split_tree
        monkeypatch.setenv("SCHEMASPLIT_ROOT_DIR", str(workspace))
        summary = split_tree()
        assert summary["split"] == 2

    def test_uses_config_exclusions(self, workspace, monkeypatch):
        from schemasplit.batch import split_tree
        monkeypatch.setenv("SCHEMASPLIT_EXCLUDED_DIRS", '["node_modules", "hub"]')
        summary = split_tree(workspace)
        assert summary["split"] == 1
        assert (workspace / "contracts" / "hub" / "schema" / "eris-hub.json").exists()
