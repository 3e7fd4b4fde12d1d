"""Abstract base class for HR directory providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class EmployeeRecord:
    employee_id: str
    name: str = ""
    email: Optional[str] = None
    department: Optional[str] = None
    manager_id: Optional[str] = None
    is_active: bool = True


class BaseHRProvider(ABC):
    """All HR providers implement this interface."""

    name: str = "base"

    @abstractmethod
    def test_connection(self) -> dict:
        """Test the source. Returns dict with 'connected' bool and 'info' str."""
        ...

    @abstractmethod
    def fetch_employees(self) -> List[EmployeeRecord]:
        """Fetch all employees known to the HR system."""
        ...

    @abstractmethod
    def fetch_departments(self) -> List[str]:
        """Fetch department names."""
        ...

    def fetch_employee(self, employee_id: str) -> Optional[EmployeeRecord]:
        for employee in self.fetch_employees():
            if employee.employee_id == employee_id:
                return employee
        return None
