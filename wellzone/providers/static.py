"""HR directory held in memory (fixtures, demo organizations, already-synced rows)."""

from typing import Iterable, List

from wellzone.models import from_dict
from wellzone.providers.base import BaseHRProvider, EmployeeRecord


class StaticProvider(BaseHRProvider):
    name = "static"

    def __init__(self, employees: Iterable = ()):
        self._employees = [
            e if isinstance(e, EmployeeRecord) else from_dict(EmployeeRecord, e)
            for e in employees
        ]

    def test_connection(self) -> dict:
        return {"connected": True, "info": f"{len(self._employees)} employees in memory"}

    def fetch_employees(self) -> List[EmployeeRecord]:
        return list(self._employees)

    def fetch_departments(self) -> List[str]:
        return sorted({e.department for e in self._employees if e.department})
