"""Tests for the editing session: edits, save, resend and reset."""

from __future__ import annotations

import asyncio
import json

import pytest

from services.base32 import encode_from_bytes
from services.editing_session import EditingSession
from services.entries import make_entry
from services.errors import EditingError, TransportFailure
from services.storage import dump_snapshot
from tests.conftest import MemoryStore, RecordingTransport, totp_uri


def _session(store=None, transport=None) -> EditingSession:
    return EditingSession(store or MemoryStore(), transport or RecordingTransport(),
                          settle_delay=0, pacing_delay=0)


class TestLoad:
    def test_load_restores_snapshot(self):
        entries = [make_entry("A", "a", "JBSWY3DPEHPK3PXP"), make_entry("B", "b", "ABCDEFGH")]
        session = _session(MemoryStore({"config_entries": dump_snapshot(entries)}))
        asyncio.run(session.load())
        assert list(session.entries) == entries

    def test_load_without_snapshot(self):
        session = _session()
        asyncio.run(session.load())
        assert session.entries == ()


class TestManualEntry:
    def test_add(self):
        session = _session()
        entry = session.add_manual("  GitHub ", "bob", "jbsw y3dp ehpk 3pxp")
        assert (entry.label, entry.account_name, entry.secret) == ("GitHub", "bob", "JBSWY3DPEHPK3PXP")
        assert (entry.period, entry.digits, entry.algorithm) == (30, 6, 0)
        assert session.entries == (entry,)

    @pytest.mark.parametrize("label, account, secret, message", [
        ("", "bob", "ABC", "Label is required."),
        ("x" * 33, "bob", "ABC", "Label is too long (max 32 characters)."),
        ("GitHub", "y" * 33, "ABC", "Account is too long (max 32 characters)."),
        ("GitHub", "bob", "", "Secret is required."),
        ("GitHub", "bob", "189!", "Secret is required."),
        ("GitHub", "bob", "A" * 65, "Secret is too long (max 64 characters)."),
    ])
    def test_rejected(self, label, account, secret, message):
        session = _session()
        with pytest.raises(EditingError, match=message.replace("(", r"\(").replace(")", r"\)")):
            session.add_manual(label, account, secret)
        assert session.entries == ()

    @pytest.mark.parametrize("label", ["|", " ; ", "|;|"])
    def test_label_of_separators_only(self, label):
        session = _session()
        with pytest.raises(EditingError, match="Label is required."):
            session.add_manual(label, "bob", "JBSWY3DPEHPK3PXP")
        assert session.entries == ()

    def test_duplicate_secret(self):
        session = _session()
        session.add_manual("A", "", "JBSWY3DPEHPK3PXP")
        with pytest.raises(EditingError, match="already exists"):
            session.add_manual("B", "", "jbswy3dpehpk3pxp")
        assert len(session.entries) == 1

    def test_cap(self):
        session = _session()
        session.import_text("\n".join(totp_uri(encode_from_bytes(bytes([i]) * 5)) for i in range(100)))
        with pytest.raises(EditingError, match="Maximum limit of 100 accounts reached!"):
            session.add_manual("A", "", "JBSWY3DPEHPK3PXP")


class TestListEdits:
    def _filled(self):
        session = _session()
        for label, secret in [("A", "AAAA"), ("B", "BBBB"), ("C", "CCCC")]:
            session.add_manual(label, "", secret)
        return session

    def test_update_keeps_secret_and_settings(self):
        session = self._filled()
        entry = session.update(1, "B2", "new|acct")
        assert (entry.label, entry.account_name, entry.secret) == ("B2", "new acct", "BBBB")
        assert session.entries[1] is entry

    @pytest.mark.parametrize("label, account, message", [
        ("", "x", "Label is required."),
        ("|", "x", "Label is required."),
        ("x" * 33, "x", r"Label is too long \(max 32 characters\)."),
        ("B2", "y" * 33, r"Account is too long \(max 32 characters\)."),
    ])
    def test_update_rejected(self, label, account, message):
        session = self._filled()
        with pytest.raises(EditingError, match=message):
            session.update(1, label, account)
        assert session.entries[1].label == "B"

    def test_remove(self):
        session = self._filled()
        assert session.remove(0).label == "A"
        assert [e.label for e in session.entries] == ["B", "C"]

    def test_move(self):
        session = self._filled()
        session.move(2, 0)
        assert [e.label for e in session.entries] == ["C", "A", "B"]

    @pytest.mark.parametrize("index", [-1, 3])
    def test_unknown_index(self, index):
        session = self._filled()
        with pytest.raises(EditingError, match="Entry not found."):
            session.remove(index)
        with pytest.raises(EditingError):
            session.move(0, index)

    def test_edits_not_persisted_until_save(self):
        store = MemoryStore()
        session = _session(store)
        session.add_manual("A", "", "AAAA")
        session.import_text(totp_uri("BBBB"))
        session.move(1, 0)
        assert store.data == {}


class TestSaveAndTransfer:
    def test_save_stores_and_sends(self):
        store, transport = MemoryStore(), RecordingTransport()
        session = _session(store, transport)
        session.add_manual("A", "a", "AAAA")
        session.add_manual("B", "", "BBBB")
        assert asyncio.run(session.save()) == 2
        assert store.data["config_payload"] == "A|a|AAAA|30|6|0;B||BBBB|30|6|0"
        assert [e["label"] for e in json.loads(store.data["config_entries"])] == ["A", "B"]
        assert transport.sent[0] == {"AppKeyCount": 2}
        assert transport.sent[2] == {"AppKeyEntryId": 1, "AppKeyEntry": "B||BBBB|30|6|0"}

    def test_empty_list_refused(self):
        store, transport = MemoryStore(), RecordingTransport()
        with pytest.raises(EditingError, match="Add at least one entry first."):
            asyncio.run(_session(store, transport).save())
        assert store.data == {}
        assert transport.sent == []

    def test_transport_failure_keeps_stored_payload(self):
        store = MemoryStore()
        session = _session(store, RecordingTransport(fail_at=1))
        session.add_manual("A", "", "AAAA")
        with pytest.raises(TransportFailure):
            asyncio.run(session.save())
        assert store.data["config_payload"] == "A||AAAA|30|6|0"

    def test_saved_list_reloads(self):
        store = MemoryStore()
        first = _session(store)
        first.add_manual("A", "a", "AAAA")
        asyncio.run(first.save())
        second = _session(store)
        asyncio.run(second.load())
        assert second.entries == first.entries


class TestResendAndReset:
    def test_resend_uses_stored_payload(self):
        transport = RecordingTransport()
        session = _session(MemoryStore({"config_payload": "A||AAAA|30|6|0"}), transport)
        assert asyncio.run(session.resend()) == 1
        assert transport.sent[1]["AppKeyEntry"] == "A||AAAA|30|6|0"

    def test_resend_without_payload(self):
        transport = RecordingTransport()
        assert asyncio.run(_session(transport=transport).resend()) == 0
        assert transport.sent == []

    def test_reset(self):
        store = MemoryStore({"config_entries": "[]", "config_payload": "x", "other": "y"})
        session = _session(store)
        session.add_manual("A", "", "AAAA")
        asyncio.run(session.reset())
        assert store.data == {"other": "y"}
        assert session.entries == ()
