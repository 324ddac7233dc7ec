"""Abstract source interface for lawsuit acquisition."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class BaseSource(ABC):
    """Abstract base class for lawsuit data sources."""

    name: str

    @abstractmethod
    async def fetch(self) -> List[Dict[str, Any]]:
        """Fetch lawsuit records, each with a ``defendants`` list."""

    @staticmethod
    def parse_timestamp(value: Any) -> Optional[datetime]:
        """ISO-8601 string or datetime to an aware UTC datetime; anything else is None."""
        if not value:
            return None
        try:
            if isinstance(value, str):
                parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
            elif isinstance(value, datetime):
                parsed = value
            else:
                return None
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
