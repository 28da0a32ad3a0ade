"""File-based JSON storage for outstanding verification codes.

Storage path: ``~/.jobguard/verification/codes.json``.  At most one record
exists per (subject, channel); ``put`` supersedes and ``consume`` deletes,
each inside a single store transaction.  Expiry is checked here rather than
relying on the backing store to evict old records.
"""

from __future__ import annotations

import hmac
from datetime import datetime, timedelta
from typing import Optional

from jobguard.storage import JsonFileStore
from jobguard.verification.models import Channel, VerificationRecord

DEFAULT_TTL = timedelta(minutes=10)


class VerificationStore(JsonFileStore):
    """One outstanding code per (subject, channel), single use, expiring."""

    default_subdir = "verification"

    def __init__(self, base_dir=None, clock=None) -> None:
        super().__init__(base_dir, clock)
        self._codes_path = self._base / "codes.json"

    @staticmethod
    def _record_from_dict(d: dict) -> VerificationRecord:
        return VerificationRecord(
            subject_id=d["subject_id"],
            channel=Channel(d["channel"]),
            code=d["code"],
            expires_at=datetime.fromisoformat(d["expires_at"]),
            created_at=datetime.fromisoformat(d["created_at"]),
        )

    @staticmethod
    def _record_to_dict(r: VerificationRecord) -> dict:
        return {
            "subject_id": r.subject_id,
            "channel": r.channel.value,
            "code": r.code,
            "expires_at": r.expires_at.isoformat(),
            "created_at": r.created_at.isoformat(),
        }

    @staticmethod
    def _matches(d: dict, subject_id: str, channel: Channel) -> bool:
        return d["subject_id"] == subject_id and d["channel"] == channel.value

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def put(
        self,
        subject_id: str,
        channel: Channel,
        code: str,
        ttl: timedelta = DEFAULT_TTL,
    ) -> VerificationRecord:
        """Replace any outstanding code for the pair with *code*."""
        channel = Channel(channel)
        now = self.now()
        record = VerificationRecord(
            subject_id=subject_id,
            channel=channel,
            code=code,
            expires_at=now + ttl,
            created_at=now,
        )
        with self.transaction():
            records = [
                d for d in self._read_json(self._codes_path)
                if not self._matches(d, subject_id, channel)
            ]
            records.append(self._record_to_dict(record))
            self._write_json(self._codes_path, records)
        return record

    def consume(self, subject_id: str, channel: Channel, code: str) -> bool:
        """Delete the pair's record if it holds *code* and has not expired.

        Returns True for exactly one caller per issued code.  A wrong code
        leaves the record in place; an expired one is removed.
        """
        channel = Channel(channel)
        with self.transaction():
            records = self._read_json(self._codes_path)
            for i, d in enumerate(records):
                if not self._matches(d, subject_id, channel):
                    continue
                record = self._record_from_dict(d)
                if record.is_expired(self.now()):
                    del records[i]
                    self._write_json(self._codes_path, records)
                    return False
                if not hmac.compare_digest(record.code, str(code)):
                    return False
                del records[i]
                self._write_json(self._codes_path, records)
                return True
        return False

    def get(self, subject_id: str, channel: Channel) -> Optional[VerificationRecord]:
        """Return the pair's outstanding, unexpired record, if any."""
        channel = Channel(channel)
        for d in self._read_json(self._codes_path):
            if self._matches(d, subject_id, channel):
                record = self._record_from_dict(d)
                return None if record.is_expired(self.now()) else record
        return None

    def purge_expired(self) -> int:
        """Delete every expired record.  Returns the number removed."""
        with self.transaction():
            records = self._read_json(self._codes_path)
            now = self.now()
            kept = [
                d for d in records
                if not self._record_from_dict(d).is_expired(now)
            ]
            removed = len(records) - len(kept)
            if removed:
                self._write_json(self._codes_path, kept)
        return removed
