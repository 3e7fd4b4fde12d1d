"""
In-memory zone record store with upsert semantics keyed by (individual, date).

Re-scoring a day replaces the earlier record for that day (last writer
wins). The ledger supplies prior-zone, fatigue and calibration history to
the pipeline and record sets to the team aggregator.
"""

from datetime import date as Date
from typing import Dict, Iterable, List, Optional, Tuple

from wellzone.models import ZoneRecord


class ZoneLedger:
    def __init__(self, records: Iterable[ZoneRecord] = ()):
        self._records: Dict[Tuple[str, Date], ZoneRecord] = {}
        for record in records:
            self.upsert(record)

    def __len__(self) -> int:
        return len(self._records)

    def upsert(self, record: ZoneRecord) -> ZoneRecord:
        self._records[record.key] = record
        return record

    def get(self, individual_id: str, day: Date) -> Optional[ZoneRecord]:
        return self._records.get((individual_id, day))

    def history(self, individual_id: str, before: Optional[Date] = None) -> List[ZoneRecord]:
        """Records for one individual, oldest first, optionally strictly before a date."""
        rows = [
            r for (pid, day), r in self._records.items()
            if pid == individual_id and (before is None or day < before)
        ]
        return sorted(rows, key=lambda r: r.date)

    def previous(self, individual_id: str, before: Date) -> Optional[ZoneRecord]:
        rows = self.history(individual_id, before=before)
        return rows[-1] if rows else None

    def records(self, individual_ids: Optional[Iterable[str]] = None) -> List[ZoneRecord]:
        wanted = set(individual_ids) if individual_ids is not None else None
        rows = [
            r for r in self._records.values()
            if wanted is None or r.individual_id in wanted
        ]
        return sorted(rows, key=lambda r: (r.individual_id, r.date))
