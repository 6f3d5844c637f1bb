# tests/test_igraph.py
import unittest
import warnings

import polars as pl

# Silence noisy NumPy longdouble warning seen on some builds
warnings.filterwarnings(
    "ignore",
    message=r"Signature .*numpy\.longdouble.*",
    category=UserWarning,
    module=r"numpy\._core\.getlimits",
)

from selgraph import Graph
from selgraph.adapters import available_metrics, compute_metric, load_metric

# Optional deps presence
HAS_IG = True
try:
    import igraph as ig  # noqa: F401
except Exception:
    HAS_IG = False


def _build_graph() -> Graph:
    """Directed 3-cycle plus a tail node hanging off node 3."""
    return (
        Graph()
        .add_nodes(3, type="cycle")
        .add_node(type="tail")
        .add_edge(1, 2, rel="next")
        .add_edge(2, 3, rel="next")
        .add_edge(3, 1, rel="next")
        .add_edge(3, 4, rel="leaf")
    )


class TestRegistry(unittest.TestCase):
    def test_unknown_metric(self):
        with self.assertRaises(ValueError):
            compute_metric(_build_graph(), "eigenbanana")
        with self.assertRaises(ValueError):
            load_metric("eigenbanana")

    def test_available_metrics(self):
        metrics = available_metrics()
        self.assertEqual(set(metrics), {"pagerank", "betweenness", "closeness", "degree"})
        self.assertEqual(metrics["pagerank"], HAS_IG)


@unittest.skipUnless(HAS_IG, "python-igraph not installed")
class TestIGraphAdapter(unittest.TestCase):
    def setUp(self):
        self.g = _build_graph()

    def test_to_igraph(self):
        from selgraph.adapters.igraph import to_igraph

        igG = to_igraph(self.g)
        self.assertTrue(igG.is_directed())
        self.assertEqual(igG.vcount(), 4)
        self.assertEqual(igG.ecount(), 4)
        self.assertEqual(igG.vs["id"], [1, 2, 3, 4])
        self.assertEqual(igG.es["eid"], [1, 2, 3, 4])
        self.assertEqual(igG.es["rel"], ["next", "next", "next", "leaf"])

    def test_to_igraph_after_deletions(self):
        from selgraph.adapters.igraph import to_igraph

        igG = to_igraph(self.g.remove_node(2), directed=False)
        self.assertFalse(igG.is_directed())
        self.assertEqual(igG.vs["id"], [1, 3, 4])
        self.assertEqual(sorted(igG.es["eid"]), [3, 4])

    def test_pagerank_on_cycle(self):
        from selgraph.adapters.igraph import get_pagerank

        cycle = Graph().add_nodes(3).add_edge(1, 2).add_edge(2, 3).add_edge(3, 1)
        pr = get_pagerank(cycle)
        self.assertEqual(pr.columns, ["id", "pagerank"])
        self.assertEqual(pr.schema["pagerank"], pl.Float64)
        self.assertEqual(pr.get_column("pagerank").to_list(), [0.3333, 0.3333, 0.3333])

    def test_compute_metric_matches_helper(self):
        from selgraph.adapters.igraph import get_pagerank

        pr = compute_metric(self.g, "pagerank", damping=0.85)
        self.assertTrue(pr.equals(get_pagerank(self.g)))
        self.assertAlmostEqual(pr.get_column("pagerank").sum(), 1.0, places=3)

    def test_betweenness(self):
        bt = compute_metric(self.g, "betweenness")
        self.assertEqual(bt.get_column("id").to_list(), [1, 2, 3, 4])
        # every path into node 4 passes through node 3
        scores = dict(bt.iter_rows())
        self.assertGreater(scores[3], scores[4])
        self.assertEqual(scores[4], 0.0)

    def test_join_pagerank_back(self):
        from selgraph.adapters.igraph import get_pagerank

        g = self.g.join_node_attrs(get_pagerank(self.g))
        self.assertIn("pagerank", g.nodes_df.columns)
        self.assertEqual(g.history()[-1]["function_used"], "join_node_attrs")
        self.assertEqual(g.history()[-1]["d_n"], 0)

    def test_pagerank_as_graph_action(self):
        from selgraph.adapters.igraph import get_pagerank

        g = (
            Graph()
            .add_graph_action(lambda g: g.join_node_attrs(get_pagerank(g)), "pagerank")
            .add_nodes(2)
            .add_edge(1, 2)
        )
        self.assertEqual(g.nodes_df.get_column("pagerank").null_count(), 0)
        self.assertTrue(g.get_node_attrs(2)["pagerank"] > g.get_node_attrs(1)["pagerank"])


if __name__ == "__main__":
    unittest.main()
