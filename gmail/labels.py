"""Label list caching and name-to-id resolution."""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from .errors import LabelNotFoundError

LOG = logging.getLogger(__name__)


class LabelResolver:
    """Caches the mailbox's labels for the lifetime of one context.

    ``client_getter`` returns the ``GmailClient`` lazily so building a
    resolver never triggers authentication on its own.
    """

    def __init__(self, client_getter: Callable[[], Any]) -> None:
        self._client_getter = client_getter
        self._labels: Optional[List[Dict[str, Any]]] = None

    def get_labels(self, force_refresh: bool = False) -> List[Dict[str, Any]]:
        """Return cached labels, fetching when empty or when forced.

        A fetch replaces the cache wholesale.
        """
        if self._labels is None or force_refresh:
            labels = self._client_getter().list_labels()
            self._labels = list(labels)
            LOG.debug("Label cache filled with %d labels", len(self._labels))
        return self._labels

    def get_label_id_by_name(self, name: str) -> str:
        """Exact, case-sensitive match; the first label with that name wins."""
        labels = self.get_labels()
        for label in labels:
            if label.get("name") == name:
                return label["id"]
        raise LabelNotFoundError(name, [lab.get("name", "") for lab in labels])
