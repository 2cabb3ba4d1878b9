"""
Approval Registry - moderation state keyed by review id.

Key -> boolean store behind the public view: a review is shown when its
own flag or the registry says it is approved.
"""

import json
import os
import shutil
import logging
import threading
from datetime import datetime, timezone
from typing import Dict, Optional

from flex_reviews.models.review import ReviewId

logger = logging.getLogger(__name__)


class ApprovalRegistry:
    """
    Approval flags keyed by review id.

    Backed by a JSON file when a path is given, otherwise kept in memory.
    Ids are stored as strings so 7001 and "7001" refer to the same review.
    """

    def __init__(self, registry_path: Optional[str] = None):
        """
        Initialize registry from disk or start empty.

        Args:
            registry_path: Path to approvals.json; None keeps state in memory
        """
        self.registry_path = str(registry_path) if registry_path else None
        self.approvals: Dict[str, bool] = {}
        self.last_updated = _utc_now()
        self._lock = threading.Lock()

        if self.registry_path and os.path.exists(self.registry_path):
            self._load()
        else:
            logger.info("No existing approvals found, starting with an empty registry")

    @staticmethod
    def key(review_id: ReviewId) -> str:
        return str(review_id).strip()

    def get_approval(self, review_id: ReviewId) -> bool:
        """Return True only when the review was explicitly approved."""
        with self._lock:
            return self.approvals.get(self.key(review_id), False)

    def set_approval(self, review_id: ReviewId, approved: bool) -> None:
        """
        Record an approval decision and persist it.

        Args:
            review_id: Review identity key
            approved: New approval flag
        """
        with self._lock:
            updated = dict(self.approvals)
            updated[self.key(review_id)] = bool(approved)
            stamp = _utc_now()
            # Memory only changes once the file write has succeeded
            if self.registry_path:
                self._save(updated, stamp)
            self.approvals = updated
            self.last_updated = stamp
        logger.info(f"Review {review_id} approval set to {bool(approved)}")

    def snapshot(self) -> Dict[str, bool]:
        """Copy of the full approval map."""
        with self._lock:
            return dict(self.approvals)

    def _load(self) -> None:
        """Load registry from disk."""
        try:
            with open(self.registry_path, 'r') as f:
                data = json.load(f)

            # Bare {id: bool} maps are accepted as well as the full document
            if isinstance(data, dict) and isinstance(data.get("approvals"), dict):
                self.last_updated = data.get("last_updated", self.last_updated)
                data = data["approvals"]

            self.approvals = {self.key(k): bool(v) for k, v in data.items()}
            logger.info(f"Loaded {len(self.approvals)} approval decisions")

        except (OSError, json.JSONDecodeError, AttributeError) as e:
            logger.error(f"Failed to load approvals: {e}")
            self._try_restore_from_backup()

    def _try_restore_from_backup(self) -> None:
        """Attempt to restore from backup file if the main file is corrupted."""
        backup_path = f"{self.registry_path}.backup"
        if not os.path.exists(backup_path):
            logger.warning("No backup file found. Starting with empty approvals.")
            self.approvals = {}
            return

        logger.warning(f"Attempting to restore approvals from backup: {backup_path}")
        try:
            with open(backup_path, 'r') as f:
                data = json.load(f)
            if isinstance(data, dict) and isinstance(data.get("approvals"), dict):
                data = data["approvals"]
            self.approvals = {self.key(k): bool(v) for k, v in data.items()}
            shutil.copy(backup_path, self.registry_path)
            logger.info("Successfully restored approvals from backup")
        except (OSError, json.JSONDecodeError, AttributeError) as e:
            logger.error(f"Backup restoration failed: {e}. Starting with empty approvals.")
            self.approvals = {}

    def _save(self, approvals: Dict[str, bool], last_updated: str) -> None:
        """
        Persist the given approval map to disk with atomic write pattern.
        Creates backup before write. Caller holds the lock.
        """
        directory = os.path.dirname(self.registry_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        if os.path.exists(self.registry_path):
            backup_path = f"{self.registry_path}.backup"
            shutil.copy(self.registry_path, backup_path)
            logger.debug(f"Created backup: {backup_path}")

        data = {
            "last_updated": last_updated,
            "approvals": approvals,
        }

        temp_path = f"{self.registry_path}.tmp"
        try:
            with open(temp_path, 'w') as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(temp_path, self.registry_path)
            logger.debug(f"Approvals saved: {len(approvals)} entries")
        except OSError as e:
            logger.error(f"Failed to save approvals: {e}")
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
