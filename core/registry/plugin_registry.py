"""Provider registry for video source implementations."""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Set

from core.models.candidate import SourceDescriptor

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Singleton registry of video source providers.

    The registry maintains the catalog of available source implementations.
    Plugin modules register a SourceDescriptor for each provider; the
    auto-detection logic queries it by class tag.

    Example:
        registry = ProviderRegistry()
        registry.register_source(SourceDescriptor("v4l2src", "Source/Video", Rank.PRIMARY, V4l2Source))
        candidates = registry.sources_with_tags({"Source", "Video"})
    """

    _instance = None

    def __new__(cls):
        """Ensure only one instance exists (singleton pattern)."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the provider registry."""
        if self._initialized:
            return

        self._sources: Dict[str, SourceDescriptor] = {}
        self._tag_index: Dict[str, Set[str]] = {}
        self._initialized = True

        logger.info("ProviderRegistry initialized")

    def register_source(self, descriptor: SourceDescriptor) -> None:
        """Register a source provider, replacing any with the same name.

        Args:
            descriptor: Descriptor of the provider
        """
        replaced = self._sources.get(descriptor.name)
        if replaced is not None:
            self._unindex(replaced)
        self._sources[descriptor.name] = descriptor
        for tag in descriptor.class_tags:
            self._tag_index.setdefault(tag, set()).add(descriptor.name)

        if replaced is not None:
            logger.debug(f"Replaced source provider: {descriptor.name} (rank {descriptor.rank})")
        else:
            logger.info(f"Registered source provider: {descriptor.name} (rank {descriptor.rank})")

    def unregister_source(self, name: str) -> bool:
        """Remove a source provider.

        Returns:
            True if the provider was registered
        """
        descriptor = self._sources.pop(name, None)
        if descriptor is None:
            return False
        self._unindex(descriptor)
        logger.info(f"Unregistered source provider: {name}")
        return True

    def _unindex(self, descriptor: SourceDescriptor) -> None:
        for tag in descriptor.class_tags:
            names = self._tag_index.get(tag)
            if names is not None:
                names.discard(descriptor.name)
                if not names:
                    del self._tag_index[tag]

    def get_source(self, name: str) -> Optional[SourceDescriptor]:
        """Get a source provider by name.

        Returns:
            Descriptor or None if not found
        """
        return self._sources.get(name)

    def list_sources(self) -> List[SourceDescriptor]:
        """List all registered source providers in registration order."""
        return list(self._sources.values())

    def sources_with_tags(self, tags: Iterable[str]) -> List[SourceDescriptor]:
        """List providers whose class carries every given tag.

        Uses the tag index, so only providers sharing the tags are visited.

        Args:
            tags: Class tags (e.g., {"Source", "Video"})

        Returns:
            Matching descriptors in registration order
        """
        tags = list(tags)
        if not tags:
            return self.list_sources()

        names = None
        for tag in tags:
            tagged = self._tag_index.get(tag, set())
            names = set(tagged) if names is None else names & tagged
            if not names:
                return []
        return [d for n, d in self._sources.items() if n in names]

    def set_rank(self, name: str, rank: int) -> bool:
        """Override the rank of a registered provider.

        Returns:
            True if the provider exists
        """
        descriptor = self._sources.get(name)
        if descriptor is None:
            logger.warning(f"Cannot set rank of unknown source provider: {name}")
            return False
        self._sources[name] = replace(descriptor, rank=int(rank))
        logger.info(f"Rank of {name} set to {int(rank)}")
        return True

    def clear(self) -> None:
        """Clear all registrations (mainly for testing)."""
        self._sources.clear()
        self._tag_index.clear()
        logger.debug("Provider registry cleared")
