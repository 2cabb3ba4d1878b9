"""
Unit tests for the Approval Registry.
Covers persistence, backup restore and id key normalization.
"""

import json
import os
import tempfile
from unittest.mock import patch

import pytest

from flex_reviews.registry.approval_registry import ApprovalRegistry


def test_in_memory_registry():
    """Test that a registry without a path never touches disk."""
    registry = ApprovalRegistry()

    assert registry.get_approval(7001) is False
    registry.set_approval(7001, True)
    assert registry.get_approval(7001) is True
    assert registry.registry_path is None


def test_string_and_int_ids_share_a_key():
    """Test that 7001 and "7001" address the same review."""
    registry = ApprovalRegistry()
    registry.set_approval("7001", True)

    assert registry.get_approval(7001) is True
    assert registry.snapshot() == {"7001": True}


def test_persist_and_reload():
    """Test that decisions survive a restart."""
    with tempfile.TemporaryDirectory() as tmpdir:
        registry_path = os.path.join(tmpdir, "approvals.json")

        registry = ApprovalRegistry(registry_path)
        registry.set_approval(7003, True)
        registry.set_approval(7004, False)

        reloaded = ApprovalRegistry(registry_path)

        assert reloaded.get_approval(7003) is True
        assert reloaded.get_approval(7004) is False
        assert reloaded.snapshot() == {"7003": True, "7004": False}


def test_saved_document_shape():
    """Test the on-disk format and that no temp file is left behind."""
    with tempfile.TemporaryDirectory() as tmpdir:
        registry_path = os.path.join(tmpdir, "nested", "approvals.json")
        registry = ApprovalRegistry(registry_path)
        registry.set_approval(1, True)

        with open(registry_path) as f:
            data = json.load(f)

        assert data["approvals"] == {"1": True}
        assert "last_updated" in data
        assert not os.path.exists(f"{registry_path}.tmp")


def test_backup_created_on_second_save():
    with tempfile.TemporaryDirectory() as tmpdir:
        registry_path = os.path.join(tmpdir, "approvals.json")
        registry = ApprovalRegistry(registry_path)

        registry.set_approval(1, True)
        assert not os.path.exists(f"{registry_path}.backup")

        registry.set_approval(2, True)
        with open(f"{registry_path}.backup") as f:
            assert json.load(f)["approvals"] == {"1": True}


def test_corrupted_file_restored_from_backup():
    """Test recovery when the main file is unreadable."""
    with tempfile.TemporaryDirectory() as tmpdir:
        registry_path = os.path.join(tmpdir, "approvals.json")
        registry = ApprovalRegistry(registry_path)
        registry.set_approval(1, True)
        registry.set_approval(2, True)

        with open(registry_path, "w") as f:
            f.write("{not json")

        restored = ApprovalRegistry(registry_path)

        assert restored.get_approval(1) is True
        assert restored.get_approval(2) is False

        # Main file repaired from the backup
        with open(registry_path) as f:
            assert json.load(f)["approvals"] == {"1": True}


def test_corrupted_file_without_backup_starts_empty():
    with tempfile.TemporaryDirectory() as tmpdir:
        registry_path = os.path.join(tmpdir, "approvals.json")
        with open(registry_path, "w") as f:
            f.write("garbage")

        registry = ApprovalRegistry(registry_path)

        assert registry.snapshot() == {}


def test_failed_save_leaves_state_unchanged():
    """Test that memory and disk still agree after a write error."""
    with tempfile.TemporaryDirectory() as tmpdir:
        registry_path = os.path.join(tmpdir, "approvals.json")
        registry = ApprovalRegistry(registry_path)
        registry.set_approval(1, True)

        with patch("flex_reviews.registry.approval_registry.os.replace",
                   side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                registry.set_approval(2, True)

        assert registry.get_approval(2) is False
        assert registry.snapshot() == {"1": True}
        assert not os.path.exists(f"{registry_path}.tmp")
        assert ApprovalRegistry(registry_path).snapshot() == {"1": True}


def test_bare_mapping_is_accepted(tmp_path):
    """Test loading a hand-written {id: bool} file."""
    path = tmp_path / "approvals.json"
    path.write_text(json.dumps({"7008": True, " 7009 ": False}))

    registry = ApprovalRegistry(path)

    assert registry.get_approval(7008) is True
    assert registry.get_approval(7009) is False


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
