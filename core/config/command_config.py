# ============================================================================
# COMMAND CONFIG
# ============================================================================
# STATUS: Core - Per-command configuration with usage tracking
# PURPOSE: Report configuration values a command never read
# CREATED: 17 OCT 2026
# ============================================================================
"""
Command Config

A CommandConfig is built once per command from the resolved option values
plus any extra properties the command fills in while it runs. Every read
goes through get(), config["node_alias"] or config.node_alias, each of
which records the access. A field named like a method or "name" is only
readable through get(). At the end of the command unused() returns the
declared names that were never read, which is how dead options are
found in end-to-end tests.

Usage:
    config = CommandConfig(
        "node-delete",
        {"namespace": "net1", "node_alias": "node1", "force": False},
        extra_properties=["pod_refs"],
    )
    config.get("namespace")
    config.set("pod_refs", {...})
    config.unused()  # ["node_alias", "force", "pod_refs"]
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.errors import ConfigurationError


class CommandConfig:
    """Declared configuration fields plus a record of which were read."""

    def __init__(
        self,
        name: str,
        values: Optional[Mapping[str, Any]] = None,
        extra_properties: Iterable[str] = (),
    ):
        self.name = name
        self._values: Dict[str, Any] = dict(values or {})
        for prop in extra_properties:
            self._values.setdefault(prop, None)
        self._reads: Dict[str, int] = {}

    @property
    def declared(self) -> List[str]:
        """Declared field names in declaration order."""
        return list(self._values)

    def _check(self, key: str) -> None:
        if key not in self._values:
            raise ConfigurationError(
                f"'{key}' is not a declared field of command config '{self.name}'"
            )

    def get(self, key: str) -> Any:
        """Read a declared field and record the access."""
        self._check(key)
        self._reads[key] = self._reads.get(key, 0) + 1
        return self._values[key]

    def __getattr__(self, key: str) -> Any:
        # Only reached for names that are not real attributes
        if key.startswith("_"):
            raise AttributeError(key)
        return self.get(key)

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def set(self, key: str, value: Any) -> None:
        """Assign a declared field. Writes do not count as use."""
        self._check(key)
        self._values[key] = value

    def read_count(self, key: str) -> int:
        """How many times key was read."""
        self._check(key)
        return self._reads.get(key, 0)

    def unused(self) -> List[str]:
        """Declared fields that were never read, in declaration order."""
        return [key for key in self._values if key not in self._reads]

    def __repr__(self) -> str:
        return f"CommandConfig(name={self.name!r}, fields={self.declared!r})"


__all__ = ["CommandConfig"]
