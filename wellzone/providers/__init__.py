"""HR provider registry and group membership lookup."""

import importlib
from typing import List, Optional

from wellzone.providers.base import BaseHRProvider, EmployeeRecord

# Registry: provider name -> (module, class name)
PROVIDERS = {
    "csv_export": {"module": "wellzone.providers.csv_export", "class": "CsvExportProvider"},
    "static": {"module": "wellzone.providers.static", "class": "StaticProvider"},
}


def get_provider(name: str, **kwargs) -> BaseHRProvider:
    """Get a provider instance by name. Raises ValueError for unknown names."""
    if name not in PROVIDERS:
        raise ValueError(f"Unknown provider: {name}")

    info = PROVIDERS[name]
    mod = importlib.import_module(info["module"])
    cls = getattr(mod, info["class"])
    return cls(**kwargs)


def list_providers() -> List[str]:
    return sorted(PROVIDERS)


def group_members(
    provider: BaseHRProvider,
    department: Optional[str] = None,
    manager_id: Optional[str] = None,
) -> List[str]:
    """Active employee ids in a department and/or reporting to a manager."""
    return [
        e.employee_id
        for e in provider.fetch_employees()
        if e.is_active
        and (department is None or e.department == department)
        and (manager_id is None or e.manager_id == manager_id)
    ]


__all__ = [
    "BaseHRProvider",
    "EmployeeRecord",
    "PROVIDERS",
    "get_provider",
    "group_members",
    "list_providers",
]
