from dataclasses import dataclass
from typing import Optional


@dataclass
class Procedure:
    """Catalog entry. Read-only reference data."""
    id: int
    code: str
    proc_name: str
    price: float
    description: Optional[str] = None
