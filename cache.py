# cache.py
import logging
import threading
from typing import Any, Callable, Dict, Hashable, Set

logger = logging.getLogger(__name__)

INVOICES_PATH = "/dashboard/invoices"


class ViewCache:
  """Materialized read views keyed by the dashboard path that renders them.

  ``revalidate_path`` drops every entry stored under a path and marks it
  stale until the next ``put`` for that path. A load that overlaps a
  revalidation of its path is returned to its caller but not stored.
  """

  def __init__(self) -> None:
    self._lock = threading.Lock()
    self._entries: Dict[str, Dict[Hashable, Any]] = {}
    self._stale: Set[str] = set()
    self._generations: Dict[str, int] = {}

  def get(self, path: str, key: Hashable = None) -> Any:
    with self._lock:
      return self._entries.get(path, {}).get(key)

  def put(self, path: str, key: Hashable, value: Any) -> None:
    with self._lock:
      self._entries.setdefault(path, {})[key] = value
      self._stale.discard(path)

  def get_or_load(self, path: str, key: Hashable, loader: Callable[[], Any]) -> Any:
    with self._lock:
      views = self._entries.get(path, {})
      if key in views:
        return views[key]
      generation = self._generations.get(path, 0)
    value = loader()
    with self._lock:
      if self._generations.get(path, 0) == generation:
        self._entries.setdefault(path, {})[key] = value
        self._stale.discard(path)
      else:
        logger.debug("discarding view loaded across a revalidation of %s", path)
    return value

  def revalidate_path(self, path: str) -> None:
    with self._lock:
      dropped = len(self._entries.pop(path, {}))
      self._stale.add(path)
      self._generations[path] = self._generations.get(path, 0) + 1
    logger.debug("revalidated %s (%d cached views dropped)", path, dropped)

  def is_stale(self, path: str) -> bool:
    with self._lock:
      return path in self._stale
