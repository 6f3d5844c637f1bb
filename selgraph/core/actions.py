"""Deferred graph actions and change subscribers.

Actions are queued functions that run once after every logged mutation, in
queue order. Subscribers are plain callbacks notified of each
``GraphChanged`` event after the queue has run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

import polars as pl

from .errors import GraphActionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphAction:
    """A queued unit of work: ``function(graph) -> graph``.

    ``condition(graph) -> bool`` (optional) decides, at trigger time, whether
    the action runs.
    """

    name: str
    function: Callable
    condition: Callable | None = None

    def applies_to(self, graph) -> bool:
        return self.condition is None or bool(self.condition(graph))


class ActionQueueMixin:
    """Deferred action queue and change subscribers for ``Graph``."""

    _actions: tuple
    _subscribers: tuple

    # Queue management

    def add_graph_action(self, function, action_name=None, condition=None):
        """Append an action to the deferred action queue.

        Parameters
        ----------
        function : callable
            Takes a graph and returns a graph.
        action_name : str, optional
            Unique name; defaults to ``function.__name__``.
        condition : callable, optional
            Takes a graph and returns a bool; the action is skipped at trigger
            time when it returns False.

        Returns
        -------
        Graph

        Raises
        ------
        ValueError
            If the name is already used by a queued action.

        """
        if not callable(function):
            raise ValueError("function must be callable")
        name = action_name or getattr(function, "__name__", None)
        if not name or name == "<lambda>":
            name = f"action_{len(self._actions) + 1}"
        if any(a.name == name for a in self._actions):
            raise ValueError(f"A graph action named '{name}' already exists")
        action = GraphAction(name=name, function=function, condition=condition)
        return self._evolve(_actions=self._actions + (action,))

    def delete_graph_actions(self, actions: Iterable | None = None):
        """Remove queued actions by name or 1-based index; all when omitted."""
        if actions is None:
            return self._evolve(_actions=())
        if isinstance(actions, (str, int)):
            actions = [actions]
        drop = set()
        for ref in actions:
            drop.add(self._action_position(ref))
        kept = tuple(a for i, a in enumerate(self._actions) if i not in drop)
        return self._evolve(_actions=kept)

    def reorder_graph_actions(self, indices: Iterable[int]):
        """Reorder the queue.

        Parameters
        ----------
        indices : iterable of int
            1-based ``action_index`` values in the new order. Indices not
            mentioned keep their relative order after the ones given.

        """
        order = [self._action_position(int(i)) for i in indices]
        if len(set(order)) != len(order):
            raise ValueError("indices must not repeat")
        order += [i for i in range(len(self._actions)) if i not in order]
        return self._evolve(_actions=tuple(self._actions[i] for i in order))

    def get_graph_actions(self) -> pl.DataFrame:
        """Return the queue as a DataFrame (``action_index``, ``action_name``, ``has_condition``)."""
        return pl.DataFrame(
            {
                "action_index": list(range(1, len(self._actions) + 1)),
                "action_name": [a.name for a in self._actions],
                "has_condition": [a.condition is not None for a in self._actions],
            },
            schema={"action_index": pl.Int64, "action_name": pl.Utf8, "has_condition": pl.Boolean},
        )

    def _action_position(self, ref) -> int:
        if isinstance(ref, str):
            for i, a in enumerate(self._actions):
                if a.name == ref:
                    return i
            raise KeyError(f"No graph action named '{ref}'")
        if not 1 <= ref <= len(self._actions):
            raise KeyError(f"No graph action at index {ref}")
        return ref - 1

    # Triggering

    def trigger_graph_actions(self):
        """Run every queued action once, in queue order.

        The queue is detached while the actions run, so mutations performed
        by an action log themselves but do not trigger the queue again.

        Raises
        ------
        GraphActionError
            If an action raises or does not return a graph. The exception
            carries the graph as it stood before the failing action.

        """
        actions = self._actions
        graph = self._evolve(_actions=())
        for action in actions:
            if not action.applies_to(graph):
                logger.debug("graph action %s skipped by its condition", action.name)
                continue
            try:
                result = action.function(graph)
            except Exception as exc:
                raise GraphActionError(action.name, graph._evolve(_actions=actions)) from exc
            if not isinstance(result, type(self)):
                raise GraphActionError(action.name, graph._evolve(_actions=actions)) from TypeError(
                    f"returned {type(result).__name__}, not a graph"
                )
            graph = result
        return graph._evolve(_actions=actions)

    # Subscribers

    def subscribe(self, callback: Callable):
        """Register ``callback(graph, event)`` for every ``GraphChanged`` event.

        A callback may return a new graph, which replaces the current one, or
        None to leave it unchanged. Subscribers are detached while they run.
        """
        if not callable(callback):
            raise ValueError("callback must be callable")
        return self._evolve(_subscribers=self._subscribers + (callback,))

    def unsubscribe(self, callback: Callable):
        return self._evolve(_subscribers=tuple(s for s in self._subscribers if s is not callback))

    def _dispatch(self, event):
        graph = self
        if graph._actions:
            graph = graph.trigger_graph_actions()
        subscribers = graph._subscribers
        if not subscribers:
            return graph
        graph = graph._evolve(_subscribers=())
        for callback in subscribers:
            result = callback(graph, event)
            if result is not None:
                graph = result
        return graph._evolve(_subscribers=subscribers)
