import unittest

from selgraph import Graph
from selgraph.adapters import compute_metric

HAS_NX = True
try:
    import networkx as nx
except Exception:
    HAS_NX = False


@unittest.skipUnless(HAS_NX, "networkx not installed")
class TestNetworkXAdapter(unittest.TestCase):

    def setUp(self):
        # 1 -> 2 -> 3 -> 4 with a shortcut 1 -> 3 and a parallel copy of 1 -> 2
        G = Graph().add_nodes(4, type="t")
        G = G.add_edge(1, 2, rel="a").add_edge(2, 3, rel="a")
        G = G.add_edge(3, 4, rel="b").add_edge(1, 3, rel="b", weight=2.0)
        G = G.select_edges(edges=1).add_forward_edges_ws(rel="copy")
        self.G = G

    def test_export(self):
        from selgraph.adapters.networkx import to_nx

        nxG = to_nx(self.G)
        self.assertIsInstance(nxG, nx.MultiDiGraph)
        self.assertEqual(sorted(nxG.nodes), [1, 2, 3, 4])
        self.assertEqual(nxG.number_of_edges(), 5)
        self.assertEqual(nxG.number_of_edges(1, 2), 2)
        self.assertEqual(nxG.edges[1, 3, 4]["weight"], 2.0)
        self.assertEqual(nxG.nodes[1]["type"], "t")

    def test_export_undirected(self):
        from selgraph.adapters.networkx import to_nx

        nxG = to_nx(self.G.with_config(directed=False))
        self.assertIsInstance(nxG, nx.MultiGraph)
        self.assertFalse(nxG.is_directed())

    def test_degree_centrality(self):
        deg = compute_metric(self.G.delete_edges_ws(), "degree")
        self.assertEqual(deg.columns, ["id", "degree"])
        scores = dict(deg.iter_rows())
        self.assertAlmostEqual(scores[3], 1.0)

    def test_closeness(self):
        from selgraph.adapters.networkx import get_closeness

        cl = get_closeness(self.G)
        self.assertEqual(cl.get_column("id").to_list(), [1, 2, 3, 4])
        scores = dict(cl.iter_rows())
        # nothing reaches node 1 along edge direction
        self.assertEqual(scores[1], 0.0)
        self.assertGreater(scores[4], 0.0)


if __name__ == "__main__":
    unittest.main()
