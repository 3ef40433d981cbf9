from __future__ import annotations

import logging
from typing import Iterator, Sequence

from ..core.domain.enums import AliasPolicy
from ..core.domain.errors import AliasConflict
from ..core.domain.models import Advisory
from ..core.ports.index_port import AdvisoryIndexPort
from ..shared.ecosystems import package_key
from ..shared.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)


def _package_keys(advisory: Advisory) -> set[tuple[str, str]]:
    return {package_key(pkg.ecosystem, pkg.name) for pkg in advisory.affected}


def _own_aliases(advisory: Advisory) -> list[str]:
    return [a for a in advisory.aliases if a != advisory.id]


class InMemoryAdvisoryIndex(AdvisoryIndexPort):
    """In-memory advisory store keyed by id, alias and (ecosystem, package).

    Writers (insert/remove/clear) hold the write side of a ReadWriteLock while
    they update the three maps; readers hold the read side, so a reader never
    sees an alias pointing at an id that is not stored.
    """

    def __init__(self, default_policy: AliasPolicy = AliasPolicy.REJECT) -> None:
        self._default_policy = default_policy
        self._lock = ReadWriteLock()
        self._by_id: dict[str, Advisory] = {}
        self._alias_to_id: dict[str, str] = {}
        self._by_package: dict[tuple[str, str], set[str]] = {}

    # -- writes ---------------------------------------------------------

    def insert(self, advisory: Advisory, *, policy: AliasPolicy | None = None) -> Advisory | None:
        policy = policy or self._default_policy
        with self._lock.write():
            # Every conflict is detected before the first map is touched
            stolen: list[tuple[str, str]] = []
            for alias in _own_aliases(advisory):
                owner = self._alias_to_id.get(alias)
                if owner is None or owner == advisory.id:
                    continue
                if policy is AliasPolicy.REJECT:
                    raise AliasConflict(alias, owner, advisory.id)
                stolen.append((alias, owner))

            previous = self._detach(advisory.id)
            for alias, owner in stolen:
                logger.warning(f"Alias {alias} moved from {owner} to {advisory.id}")
            self._attach(advisory)

        if previous is None:
            logger.debug(f"Inserted {advisory.id}")
        else:
            logger.debug(f"Replaced {advisory.id}")
        return previous

    def remove(self, id: str) -> Advisory | None:
        with self._lock.write():
            removed = self._detach(id)
        if removed is not None:
            logger.debug(f"Removed {id}")
        return removed

    def clear(self) -> None:
        with self._lock.write():
            self._by_id.clear()
            self._alias_to_id.clear()
            self._by_package.clear()
        logger.info("Advisory index cleared")

    def _attach(self, advisory: Advisory) -> None:
        self._by_id[advisory.id] = advisory
        for alias in _own_aliases(advisory):
            self._alias_to_id[alias] = advisory.id
        for key in _package_keys(advisory):
            self._by_package.setdefault(key, set()).add(advisory.id)

    def _detach(self, id: str) -> Advisory | None:
        current = self._by_id.pop(id, None)
        if current is None:
            return None
        for alias in _own_aliases(current):
            # An overwrite may already have handed the alias to another advisory
            if self._alias_to_id.get(alias) == id:
                del self._alias_to_id[alias]
        for key in _package_keys(current):
            ids = self._by_package.get(key)
            if ids is None:
                continue
            ids.discard(id)
            if not ids:
                del self._by_package[key]
        return current

    # -- reads ----------------------------------------------------------

    def get_by_id(self, id: str) -> Advisory | None:
        with self._lock.read():
            return self._by_id.get(id)

    def get_by_alias(self, alias: str) -> Advisory | None:
        with self._lock.read():
            id = self._alias_to_id.get(alias)
            return self._by_id.get(id) if id is not None else None

    def find_by_package(self, ecosystem: str, name: str) -> Sequence[Advisory]:
        key = package_key(ecosystem, name)
        with self._lock.read():
            ids = sorted(self._by_package.get(key, ()))
            return [self._by_id[i] for i in ids]

    def list(self, *, ecosystem: str | None = None) -> Sequence[Advisory]:
        with self._lock.read():
            if ecosystem is None:
                return [self._by_id[i] for i in sorted(self._by_id)]
            ids: set[str] = set()
            for (eco, _name), owners in self._by_package.items():
                if eco == ecosystem:
                    ids.update(owners)
            return [self._by_id[i] for i in sorted(ids)]

    def ids(self) -> list[str]:
        with self._lock.read():
            return sorted(self._by_id)

    def aliases(self) -> dict[str, str]:
        """Snapshot of the alias -> id map."""
        with self._lock.read():
            return dict(self._alias_to_id)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._by_id)

    def __contains__(self, id: object) -> bool:
        with self._lock.read():
            return id in self._by_id

    def __iter__(self) -> Iterator[Advisory]:
        return iter(self.list())
