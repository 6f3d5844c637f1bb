from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

DELETE_POLICIES = ("cascade", "forbid")


# ---------------------------------------------------------------------
# Graph behaviour
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class GraphConfig:
    """
    Per-graph policy carried along with every graph state.

    - ``directed``: default directedness handed to algorithm backends
    - ``write_backups``: write a snapshot after every committed mutation
    - ``backup_dir``: directory that receives those snapshots
    - ``delete_policy``: what removing a node does to the edges that
      reference it (``"cascade"`` removes them, ``"forbid"`` refuses)
    """

    directed: bool = True
    write_backups: bool = False
    backup_dir: Path = field(default_factory=lambda: Path("graph_backups"))
    delete_policy: Literal["cascade", "forbid"] = "cascade"

    def __post_init__(self) -> None:
        if self.delete_policy not in DELETE_POLICIES:
            raise ValueError(
                f"delete_policy must be one of {DELETE_POLICIES}, got {self.delete_policy!r}"
            )
        if not isinstance(self.backup_dir, Path):
            object.__setattr__(self, "backup_dir", Path(self.backup_dir))

    def to_dict(self) -> dict:
        return {
            "directed": self.directed,
            "write_backups": self.write_backups,
            "backup_dir": str(self.backup_dir),
            "delete_policy": self.delete_policy,
        }
