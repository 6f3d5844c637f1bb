# tests/test_lazy_proxies.py
import importlib

import pytest

import selgraph


def test_top_level_symbols_resolve():
    from selgraph.core.graph import Graph

    assert selgraph.Graph is Graph
    assert selgraph.NoActiveSelectionError is selgraph.core.errors.NoActiveSelectionError


def test_submodules_resolve():
    assert selgraph.io is importlib.import_module("selgraph.io")
    assert selgraph.adapters.compute_metric is selgraph.compute_metric


def test_unknown_attribute():
    with pytest.raises(AttributeError):
        selgraph.no_such_thing


def test_dir_lists_exports():
    names = dir(selgraph)
    for name in ("Graph", "GraphConfig", "read_graph", "write_graph", "compute_metric"):
        assert name in names


def test_errors_share_base_class():
    for name in selgraph.core.errors.__all__:
        cls = getattr(selgraph.core.errors, name)
        if name != "BackupWarning":
            assert issubclass(cls, selgraph.GraphError)
