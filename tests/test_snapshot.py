# tests/test_snapshot.py
import json
import shutil
import tempfile
import unittest
import warnings
from pathlib import Path

import polars as pl

from selgraph import Graph, GraphConfig
from selgraph.core.errors import BackupWarning
from selgraph.io import read_graph, write_graph


class TestSnapshotIO(unittest.TestCase):
    def setUp(self):
        G = Graph(name="unittest", delete_policy="forbid")
        G = G.add_node(type="gene", label="A", score=1.5)
        G = G.add_node(type="gene", label="B", score=0.5)
        G = G.add_node(type="drug", label="C")
        G = G.add_edge(1, 2, rel="binds", weight=2.0)
        G = G.add_edge(2, 3, rel="inhibits", weight=0.5)
        G = G.set_node_position(1, 0, 0).set_node_position(2, 1, 2)
        G = G.remove_edge(2).add_edge(3, 1, rel="activates")
        G = G.add_graph_action(lambda g: g, "noop").select_nodes(pl.col("type") == "gene")

        self.G = G
        self.tmpdir = tempfile.mkdtemp()
        self.out = Path(self.tmpdir) / "test_graph.selgraph"

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_layout(self):
        write_graph(self.G, self.out)
        for name in ("manifest.json", "nodes.parquet", "edges.parquet", "log.parquet"):
            self.assertTrue((self.out / name).exists(), name)
        manifest = json.loads((self.out / "manifest.json").read_text())
        self.assertEqual(manifest["format"], "selgraph")
        self.assertEqual(manifest["graph_version"], self.G.version_id)
        self.assertEqual(manifest["counts"], {"nodes": 3, "edges": 2})
        self.assertEqual(manifest["actions"], ["noop"])
        self.assertEqual(manifest["selection"], {"nodes": [1, 2], "edges": None})

    def test_roundtrip(self):
        write_graph(self.G, self.out)
        G2 = read_graph(self.out)

        self.assertTrue(G2.nodes_df.equals(self.G.nodes_df))
        self.assertTrue(G2.edges_df.equals(self.G.edges_df))
        self.assertEqual(G2.history(), self.G.history())
        self.assertEqual(G2.selection, self.G.selection)
        self.assertEqual(G2.graph_id, self.G.graph_id)
        self.assertEqual(G2.graph_name, "unittest")
        self.assertEqual(G2.config, self.G.config)
        self.assertEqual((G2.last_node_id, G2.last_edge_id), (3, 3))
        self.assertEqual(G2.get_graph_actions().height, 0)

    def test_roundtrip_continues_ids_and_versions(self):
        write_graph(self.G, self.out)
        G2 = read_graph(self.out).add_edge(1, 3)
        self.assertEqual(G2.last_edge_id, 4)
        self.assertEqual(G2.version_id, self.G.version_id + 1)

    def test_existing_path(self):
        write_graph(self.G, self.out)
        with self.assertRaises(FileExistsError):
            write_graph(self.G, self.out)
        write_graph(self.G.add_node(), self.out, overwrite=True)
        self.assertEqual(read_graph(self.out).count_nodes(), 4)

    def test_not_a_snapshot(self):
        self.out.mkdir()
        (self.out / "manifest.json").write_text(json.dumps({"format": "other"}))
        with self.assertRaises(ValueError):
            read_graph(self.out)


class TestBackups(unittest.TestCase):
    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_backup_per_operation(self):
        G = Graph(write_backups=True, backup_dir=self.tmpdir).add_node().add_node()
        names = sorted(p.name for p in self.tmpdir.iterdir())
        self.assertEqual(names, [f"{G.graph_id}_000001", f"{G.graph_id}_000002"])
        self.assertEqual(read_graph(self.tmpdir / names[-1]).count_nodes(), 2)

    def test_selection_writes_no_backup(self):
        G = Graph(GraphConfig(write_backups=True, backup_dir=self.tmpdir)).add_nodes(2)
        G.select_nodes().traverse_out()
        self.assertEqual(len(list(self.tmpdir.iterdir())), 1)

    def test_backup_failure_warns(self):
        blocked = self.tmpdir / "blocked"
        blocked.write_text("not a directory")
        G = Graph(write_backups=True, backup_dir=blocked)
        with self.assertWarns(BackupWarning):
            G2 = G.add_node()
        self.assertEqual(G2.count_nodes(), 1)
        self.assertEqual(G2.version_id, 1)

    def test_backups_off_by_default(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            G = Graph().add_node()
        self.assertFalse(G.config.write_backups)


if __name__ == "__main__":
    unittest.main()
