"""Shared pytest configuration and fixtures."""

import sys
from pathlib import Path
from typing import List, Optional, Sequence

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.interfaces.events import ErrorCode, ErrorDomain
from core.interfaces.source import SourceError
from core.models.caps import Caps
from core.models.candidate import SourceDescriptor
from core.models.state import State, StateChangeReturn
from core.registry.plugin_registry import ProviderRegistry
from modules.sources.base import BaseVideoSource


class StubSource(BaseVideoSource):
    """Configurable source for exercising detection.

    Args:
        caps: Caps string reported by get_caps() (None = template caps)
        open_errors: Error texts posted when opening; the last one is raised
        silent_failure: Fail NULL -> READY without posting anything
        open_exception: Exception raised as is when opening
    """

    FACTORY_NAME = "stubsrc"
    TEMPLATE_CAPS = "video/x-raw-rgb"

    def __init__(
        self,
        name: Optional[str] = None,
        caps: Optional[str] = None,
        open_errors: Sequence[str] = (),
        silent_failure: bool = False,
        open_exception: Optional[Exception] = None
    ):
        self._caps = caps
        self.open_errors = list(open_errors)
        self.silent_failure = silent_failure
        self.open_exception = open_exception
        self.released = False
        super().__init__(name)

    def get_caps(self) -> Caps:
        if self._caps is not None:
            return Caps.from_string(self._caps)
        return super().get_caps()

    def _change_state(self, current, following):
        if self.silent_failure and (current, following) == (State.NULL, State.READY):
            return StateChangeReturn.FAILURE
        return super()._change_state(current, following)

    def _open(self) -> None:
        if self.open_exception is not None:
            raise self.open_exception
        if not self.open_errors:
            return
        for text in self.open_errors[:-1]:
            self.post_error(SourceError(text, ErrorDomain.RESOURCE, ErrorCode.NOT_FOUND))
        raise SourceError(self.open_errors[-1], ErrorDomain.RESOURCE, ErrorCode.NOT_FOUND)

    def release(self) -> None:
        super().release()
        self.released = True


class CountingFactory:
    """Factory creating StubSources and remembering every instance."""

    def __init__(self, **stub_kwargs):
        self.stub_kwargs = stub_kwargs
        self.instances: List[StubSource] = []

    def __call__(self, name: str) -> StubSource:
        source = StubSource(name, **self.stub_kwargs)
        self.instances.append(source)
        return source

    @property
    def created(self) -> int:
        return len(self.instances)


@pytest.fixture
def registry():
    """Empty provider registry, restored after the test."""
    reg = ProviderRegistry()
    saved = reg.list_sources()
    reg.clear()
    yield reg
    reg.clear()
    for descriptor in saved:
        reg.register_source(descriptor)


@pytest.fixture
def add_candidate(registry):
    """Register a stub candidate and return its counting factory."""

    def _add(name: str, rank: int, klass: str = "Source/Video", **stub_kwargs) -> CountingFactory:
        factory = CountingFactory(**stub_kwargs)
        registry.register_source(SourceDescriptor(name, klass, rank, factory))
        return factory

    return _add
