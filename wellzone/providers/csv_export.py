"""HR directory from a CSV export (BambooHR, Gusto, Rippling and most HRIS tools)."""

import os
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd

from wellzone.providers.base import BaseHRProvider, EmployeeRecord


# Maps any known export header -> canonical field name
COLUMN_ALIASES = {
    "employee_id": "employee_id",
    "employeeid": "employee_id",
    "employee id": "employee_id",
    "id": "employee_id",
    "worker id": "employee_id",
    "name": "name",
    "full name": "name",
    "display name": "name",
    "email": "email",
    "work email": "email",
    "department": "department",
    "dept": "department",
    "team": "department",
    "manager_id": "manager_id",
    "managerid": "manager_id",
    "manager id": "manager_id",
    "reports to": "manager_id",
    "status": "status",
    "employment status": "status",
}

INACTIVE_STATUSES = {"inactive", "terminated", "former", "left"}


def _clean(value) -> Optional[str]:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    text = str(value).strip()
    return text or None


class CsvExportProvider(BaseHRProvider):
    name = "csv_export"

    def __init__(self, path: Union[str, Path, None] = None):
        path = path or os.environ.get("WELLZONE_HR_EXPORT", "")
        self.path = Path(path) if path else None

    def _frame(self) -> pd.DataFrame:
        if self.path is None or not self.path.exists():
            raise FileNotFoundError(f"HR export not found: {self.path}")
        df = pd.read_csv(self.path, dtype=str)
        df = df.rename(columns=lambda c: COLUMN_ALIASES.get(c.strip().lower(), c))
        if "employee_id" not in df.columns:
            raise ValueError("HR export has no employee id column")
        return df

    def test_connection(self) -> dict:
        try:
            df = self._frame()
        except (FileNotFoundError, ValueError) as e:
            return {"connected": False, "info": str(e)}
        return {"connected": True, "info": f"{len(df)} rows in {self.path.name}"}

    def fetch_employees(self) -> List[EmployeeRecord]:
        employees = []
        for row in self._frame().to_dict("records"):
            employee_id = _clean(row.get("employee_id"))
            if employee_id is None:
                continue
            status = (_clean(row.get("status")) or "active").lower()
            employees.append(EmployeeRecord(
                employee_id=employee_id,
                name=_clean(row.get("name")) or "",
                email=_clean(row.get("email")),
                department=_clean(row.get("department")),
                manager_id=_clean(row.get("manager_id")),
                is_active=status not in INACTIVE_STATUSES,
            ))
        return employees

    def fetch_departments(self) -> List[str]:
        return sorted({e.department for e in self.fetch_employees() if e.department})
