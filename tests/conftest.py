import pytest

from selgraph import Graph


@pytest.fixture
def chain_graph():
    """Four nodes; edges 1:1->2 (a), 2:2->3 (a), 3:3->4 (b), 4:1->3 (b)."""
    return (
        Graph()
        .add_nodes(4, type="t")
        .add_edge(1, 2, rel="a")
        .add_edge(2, 3, rel="a")
        .add_edge(3, 4, rel="b")
        .add_edge(1, 3, rel="b")
    )


@pytest.fixture
def positioned_graph():
    """Nodes 1..4 of types a, a, b, b placed at (1, 1) .. (4, 4)."""
    g = (
        Graph()
        .add_node(type="a", label="one")
        .add_node(type="a", label="two")
        .add_node(type="b", label="three")
        .add_node(type="b", label="four")
    )
    for i in range(1, 5):
        g = g.set_node_position(i, i, i)
    return g
