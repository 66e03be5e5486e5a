"""
Filter hooks for overriding resolved values.

``HookRegistry`` is a small ordered, priority based callback registry.
``FilterPipeline`` runs a value through the five hierarchical hooks of one
repository, from the global hook to the repository-and-key specific one, so
the most specific override always gets the last word.
"""

from dataclasses import dataclass, field
from itertools import count
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..infrastructure.logger import logger


FilterCallback = Callable[..., Any]


@dataclass(order=True)
class _Registration:
    priority: int
    sequence: int
    callback: FilterCallback = field(compare=False)


class HookRegistry:
    """
    Named filter hooks.

    Callbacks receive ``(value, *args)`` and return the new value. They run
    by ascending priority, then in registration order.
    """

    def __init__(self):
        self._filters: Dict[str, List[_Registration]] = {}
        self._sequence = count()

    def add_filter(self, name: str, callback: FilterCallback, priority: int = 10) -> None:
        registrations = self._filters.setdefault(name, [])
        registrations.append(_Registration(priority, next(self._sequence), callback))
        registrations.sort()

    def remove_filter(self, name: str, callback: FilterCallback, priority: Optional[int] = None) -> bool:
        registrations = self._filters.get(name, [])
        for registration in registrations:
            if registration.callback == callback and priority in (None, registration.priority):
                registrations.remove(registration)
                return True
        return False

    def has_filter(self, name: str) -> bool:
        return bool(self._filters.get(name))

    def apply_filters(self, name: str, value: Any, *args: Any) -> Any:
        for registration in list(self._filters.get(name, [])):
            value = registration.callback(value, *args)
        return value


class FilterPipeline:
    """
    Hierarchical filters for a single repository.

    Hooks run in this order, each consuming the previous output::

        {prefix}/{key}
        {prefix}/{type}
        {prefix}/{type}/{key}
        {prefix}/{type}/{repo_id}
        {prefix}/{type}/{repo_id}/{key}
    """

    def __init__(
        self,
        registry: HookRegistry,
        repo_type: Optional[str],
        repo_id: Optional[str],
        prefix: str = "repo_upgrader",
    ):
        self.registry = registry
        self.repo_type = (repo_type or "").strip().lower()
        self.repo_id = (repo_id or "").strip().lower()
        self.prefix = prefix

    @property
    def is_configured(self) -> bool:
        return bool(self.repo_type and self.repo_id)

    def hook_name(self, *parts: str) -> str:
        return "/".join((self.prefix, *parts))

    def _stages(self, key: str, args: Tuple[Any, ...]) -> List[Tuple[str, Tuple[Any, ...]]]:
        kind, repo = self.repo_type, self.repo_id
        return [
            (self.hook_name(key), (kind, repo, *args, key)),
            (self.hook_name(kind), (key, repo, *args, kind)),
            (self.hook_name(kind, key), (repo, *args, key, kind)),
            (self.hook_name(kind, repo), (key, *args, kind, repo)),
            (self.hook_name(kind, repo, key), (*args, key, kind, repo)),
        ]

    def apply(self, hook_key: str, value: Any, *args: Any) -> Any:
        """
        Run ``value`` through every stage for ``hook_key``.

        Returns:
            The filtered value, or False when the repository is unknown
        """
        if not self.repo_type:
            logger.warning("Repository type has not been initialized.")
            return False

        if not self.repo_id:
            logger.warning("Repository ID has not been initialized.")
            return False

        for name, stage_args in self._stages(hook_key, args):
            value = self.registry.apply_filters(name, value, *stage_args)
        return value


__all__ = [
    "FilterCallback",
    "HookRegistry",
    "FilterPipeline",
]
