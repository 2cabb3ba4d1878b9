"""
Storage utility.

Read-only loaders for bundled fixtures and collaborator data files.
"""

import json
import os
import logging
import threading
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class FixtureStore:
    """
    Loads JSON fixture files once and serves them from memory.

    Handles:
    - Review fixtures ({"result": [...]} or a bare list)
    - Plain JSON documents (place-id mapping, Places responses)

    Loaded documents are treated as read-only and shared between requests.
    """

    def __init__(self):
        self._cache: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def load_json(self, path: str) -> Optional[Any]:
        """
        Load a JSON document, caching it after the first successful read.

        Args:
            path: File path

        Returns:
            Parsed document, or None if the file is missing or unreadable
        """
        path = str(path)
        with self._lock:
            if path in self._cache:
                return self._cache[path]

            if not os.path.exists(path):
                logger.warning(f"Fixture not found: {path}")
                return None

            try:
                with open(path, 'r', encoding='utf-8') as f:
                    document = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Failed to load fixture {path}: {e}")
                return None

            self._cache[path] = document
            logger.debug(f"Loaded fixture {path}")
            return document

    def load_records(self, path: str) -> List[Any]:
        """
        Load a review fixture as a list of raw records.

        Returns:
            Records from {"result": [...]} or a bare list; empty list otherwise
        """
        return extract_records(self.load_json(path))

    def load_mapping(self, path: str) -> Dict[str, str]:
        """
        Load a name -> value mapping file (e.g. listing name -> place id).

        Returns:
            Mapping, or an empty dict when the file is absent or not an object
        """
        document = self.load_json(path)
        if not isinstance(document, dict):
            return {}
        return {str(k): str(v) for k, v in document.items() if v}


def extract_records(document: Any) -> List[Any]:
    """Accept either {"result": [...]} or a bare array."""
    if isinstance(document, dict) and isinstance(document.get("result"), list):
        return list(document["result"])
    if isinstance(document, list):
        return list(document)
    return []
