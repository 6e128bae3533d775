"""Tests for the mint record store

Run with pytest from project root:
    pytest tests/test_record_store.py -v
"""

import json
from unittest.mock import patch

import pytest

from managers.record_store import MintRecordStore
from models.errors import RecordStoreWriteFailed
from models.mint import MintRecord, Trait


def _record(request_id="r1", status="in_queue", **kwargs):
    return MintRecord(
        request_id=request_id,
        status=status,
        name="Azure Phoenix",
        description="A phoenix",
        image_reference="ipfs://Qm123",
        owner_address="EQowner",
        traits=[Trait("Attack", 100)],
        **kwargs,
    )


class TestMintRecordStore:
    """Tests for upsert/get/list"""

    def test_in_memory_upsert_and_get(self):
        """Test records round-trip in memory"""
        store = MintRecordStore()
        store.upsert(_record())
        record = store.get("r1")
        assert record.status == "in_queue"
        assert record.traits[0].trait_type == "Attack"
        assert store.get("missing") is None

    def test_upsert_overwrites_and_keeps_created_at(self):
        """Test re-upserting the same id overwrites fields but not created_at"""
        store = MintRecordStore()
        first = store.upsert(_record())
        created_at = first.created_at

        second = store.upsert(_record(status="minted", nft_address="EQabc"))

        assert second.created_at == created_at
        assert store.get("r1").status == "minted"
        assert store.get("r1").nft_address == "EQabc"
        assert len(store.list_records()) == 1

    def test_persists_across_instances(self, tmp_path):
        """Test a file-backed store reloads its records"""
        path = tmp_path / "records.json"
        MintRecordStore(path).upsert(_record(nft_index=0))

        reloaded = MintRecordStore(path)
        record = reloaded.get("r1")
        assert record.nft_index == 0
        assert record.image_reference == "ipfs://Qm123"
        assert json.loads(path.read_text())["r1"]["requestId"] == "r1"

    def test_list_filters_by_status(self):
        """Test list_records filters by status"""
        store = MintRecordStore()
        store.upsert(_record("r1"))
        store.upsert(_record("r2", status="failed"))
        assert [r.request_id for r in store.list_records(status="failed")] == ["r2"]
        assert len(store.list_records()) == 2

    def test_write_failure_raises_and_keeps_memory_state(self, tmp_path):
        """Test a failed write raises RecordStoreWriteFailed and changes nothing"""
        store = MintRecordStore(tmp_path / "records.json")
        with patch("managers.record_store.json.dump", side_effect=OSError("disk full")):
            with pytest.raises(RecordStoreWriteFailed):
                store.upsert(_record())
        assert store.get("r1") is None

    def test_malformed_entries_skipped(self, tmp_path):
        """Test malformed records in the file are skipped on load"""
        path = tmp_path / "records.json"
        path.write_text(json.dumps({"bad": {"status": "in_queue"}, "r1": _record().to_dict()}))
        store = MintRecordStore(path)
        assert store.get("bad") is None
        assert store.get("r1") is not None

    def test_invalid_status_rejected(self):
        """Test MintRecord refuses statuses outside in_queue/minted/failed"""
        with pytest.raises(ValueError):
            _record(status="unknown")
