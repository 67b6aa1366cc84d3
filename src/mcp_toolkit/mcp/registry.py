from __future__ import annotations

import threading
from typing import Any, Dict, Iterable, List, Optional

from ..core.errors import DuplicateToolError, ToolNotFoundError
from ..core.extractor import ToolDescriptor, ToolExtractor
from ..logging import get_logger

LOG = get_logger(__name__)


class ToolRegistry:
    """Tool descriptors keyed by name, kept in registration order.

    Registration is expected to finish before serving starts; lookups then
    run concurrently from request threads. Duplicate names are rejected.
    """

    def __init__(self, extractor: Optional[ToolExtractor] = None):
        self.extractor = extractor or ToolExtractor()
        self._tools: Dict[str, ToolDescriptor] = {}
        self._lock = threading.RLock()

    def register_tool(self, handler: Any) -> ToolDescriptor:
        descriptor = self.extractor.extract_callable(handler)
        self.add(descriptor)
        return descriptor

    def register_method(self, receiver: Any, method: Any) -> ToolDescriptor:
        descriptor = self.extractor.extract_method(receiver, method)
        self.add(descriptor)
        return descriptor

    def register_composite(self, service: Any) -> List[ToolDescriptor]:
        descriptors = self.extractor.extract_composite(service)
        self.add_all(descriptors)
        return descriptors

    def add(self, descriptor: ToolDescriptor) -> None:
        self.add_all([descriptor])

    def add_all(self, descriptors: Iterable[ToolDescriptor]) -> None:
        """Add a batch atomically: either every descriptor is added or none."""
        batch = list(descriptors)
        with self._lock:
            seen: set[str] = set()
            for d in batch:
                if d.name in self._tools or d.name in seen:
                    raise DuplicateToolError(d.name)
                seen.add(d.name)
            for d in batch:
                self._tools[d.name] = d
                LOG.info("registered tool %s (%s)", d.name, d.convention.value)

    def list(self) -> tuple[ToolDescriptor, ...]:
        with self._lock:
            return tuple(self._tools.values())

    def list_tools(self) -> List[Dict[str, Any]]:
        return [d.to_dict() for d in self.list()]

    def find(self, name: str) -> Optional[ToolDescriptor]:
        with self._lock:
            return self._tools.get(name)

    def get(self, name: str) -> ToolDescriptor:
        descriptor = self.find(name)
        if descriptor is None:
            raise ToolNotFoundError(name)
        return descriptor

    def __len__(self) -> int:
        with self._lock:
            return len(self._tools)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._tools
