"""
Index exclusion policy for entity properties.

Datastore indexes every property unless told otherwise. The policy is read
from a YAML file whose path is given by the INDEX_EXCLUDED environment
variable:

    kind:
      customer:
        property:
          email: true
          lastName: true

Only excluded properties need to be listed; anything absent stays indexed.

Invariants:
    - A missing variable, missing file or malformed file yields an empty
      policy; it is never fatal
    - The policy is immutable once loaded
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

INDEX_EXCLUDED_ENV = "INDEX_EXCLUDED"


class IndexExcluded:
    """Per-kind, per-property exclusion flags.

    Example:
        >>> policy = IndexExcluded({"customer": {"email": True}})
        >>> policy.is_excluded("customer", "email")
        True
        >>> policy.is_excluded("customer", "name")
        False
    """

    def __init__(self, kinds: Mapping[str, Mapping[str, bool]] | None = None) -> None:
        self._kinds: dict[str, dict[str, bool]] = {
            kind: {name: bool(flag) for name, flag in properties.items()}
            for kind, properties in (kinds or {}).items()
        }

    @classmethod
    def empty(cls) -> IndexExcluded:
        return cls()

    @classmethod
    def from_dict(cls, data: Any) -> IndexExcluded:
        """Build a policy from the parsed YAML document.

        Raises:
            ValueError: If the document does not have the expected shape
        """
        if data is None:
            return cls()
        if not isinstance(data, Mapping) or set(data) - {"kind"}:
            raise ValueError("index exclusion document must only contain a 'kind' mapping")

        kinds: dict[str, dict[str, bool]] = {}
        for kind, entry in (data.get("kind") or {}).items():
            if not isinstance(entry, Mapping) or set(entry) - {"property"}:
                raise ValueError(f"kind '{kind}' must only contain a 'property' mapping")
            properties = entry.get("property") or {}
            if not isinstance(properties, Mapping):
                raise ValueError(f"kind '{kind}' has a non-mapping 'property' entry")
            for name, flag in properties.items():
                if not isinstance(flag, bool):
                    raise ValueError(f"{kind}.{name} must be true or false, got {flag!r}")
            kinds[str(kind)] = {str(name): flag for name, flag in properties.items()}
        return cls(kinds)

    @classmethod
    def from_file(cls, path: str | Path) -> IndexExcluded:
        """Load a policy from a YAML file, falling back to an empty policy."""
        try:
            with open(path, encoding="utf-8") as fh:
                data = yaml.safe_load(fh)
        except OSError as e:
            logger.warning(f"Index exclusion file {path} unreadable, indexing everything: {e}")
            return cls()
        except yaml.YAMLError as e:
            logger.warning(f"Index exclusion file {path} is not valid YAML, indexing everything: {e}")
            return cls()

        try:
            policy = cls.from_dict(data)
        except ValueError as e:
            logger.warning(f"Index exclusion file {path} ignored: {e}")
            return cls()

        logger.debug(f"Loaded index exclusions for {len(policy._kinds)} kind(s) from {path}")
        return policy

    @classmethod
    def from_env(cls, var: str = INDEX_EXCLUDED_ENV) -> IndexExcluded:
        """Load the policy from the file named by an environment variable."""
        path = os.getenv(var)
        if not path:
            return cls()
        return cls.from_file(path)

    def is_excluded(self, kind: str, property_name: str) -> bool:
        """Whether `property_name` of entities of `kind` is excluded from indexes."""
        return self._kinds.get(kind, {}).get(property_name, False)

    def excluded_properties(self, kind: str) -> frozenset[str]:
        return frozenset(name for name, flag in self._kinds.get(kind, {}).items() if flag)

    def __bool__(self) -> bool:
        return any(self.excluded_properties(kind) for kind in self._kinds)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IndexExcluded):
            return NotImplemented
        return self._kinds == other._kinds

    def __repr__(self) -> str:
        return f"IndexExcluded({self._kinds!r})"
