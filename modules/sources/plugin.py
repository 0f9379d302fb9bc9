"""Source module plugin registration."""

import logging
from functools import partial
from typing import Any, Dict, Optional

from core.models.candidate import Rank, SourceDescriptor
from core.registry.plugin_registry import ProviderRegistry
from modules.sources.providers.fake_source import FakeSource
from modules.sources.providers.pattern_source import PatternSource
from modules.sources.providers.v4l2_source import V4l2Source

logger = logging.getLogger(__name__)


def register(
    sources: Optional[Dict[str, Dict[str, Any]]] = None,
    rank_overrides: Optional[Dict[str, int]] = None
) -> ProviderRegistry:
    """Register all built-in source providers with the provider registry.

    Args:
        sources: Per-provider initial properties, keyed by factory name
        rank_overrides: Ranks replacing the built-in ones, keyed by factory name

    Returns:
        The provider registry
    """
    sources = sources or {}
    registry = ProviderRegistry()

    registry.register_source(SourceDescriptor(
        name=FakeSource.FACTORY_NAME,
        klass="Source",
        rank=Rank.NONE,
        factory=partial(FakeSource, config=sources.get(FakeSource.FACTORY_NAME)),
        description="Push empty (no data) frames around"
    ))
    registry.register_source(SourceDescriptor(
        name=PatternSource.FACTORY_NAME,
        klass="Source/Video",
        rank=Rank.NONE,
        factory=partial(PatternSource, config=sources.get(PatternSource.FACTORY_NAME)),
        description="Creates a test video stream"
    ))
    registry.register_source(SourceDescriptor(
        name=V4l2Source.FACTORY_NAME,
        klass="Source/Video",
        rank=Rank.PRIMARY,
        factory=partial(V4l2Source, config=sources.get(V4l2Source.FACTORY_NAME)),
        description="Reads frames from a Video4Linux2 device"
    ))

    # Screen capture needs mss and a display server
    try:
        from modules.sources.providers.screen_source import ScreenSource
        registry.register_source(SourceDescriptor(
            name=ScreenSource.FACTORY_NAME,
            klass="Source/Video",
            rank=Rank.MARGINAL,
            factory=partial(ScreenSource, config=sources.get(ScreenSource.FACTORY_NAME)),
            description="Captures a monitor using MSS"
        ))
    except ImportError as e:
        logger.debug(f"Screen source not available: {e}")

    for name, rank in (rank_overrides or {}).items():
        registry.set_rank(name, rank)

    logger.debug("Source providers registered")
    return registry


# Auto-register on import
register()
