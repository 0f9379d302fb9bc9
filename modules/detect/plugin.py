"""Detect module plugin registration."""

import logging

from core.models.candidate import Rank, SourceDescriptor
from core.registry.plugin_registry import ProviderRegistry
from modules.detect.auto_source import AutoVideoSource

logger = logging.getLogger(__name__)


def register():
    """Register the auto-detecting source with the provider registry.

    It carries the Source/Video class like the sources it picks from, so it
    is registered without rank to keep it from selecting itself.
    """
    registry = ProviderRegistry()
    registry.register_source(SourceDescriptor(
        name=AutoVideoSource.FACTORY_NAME,
        klass="Source/Video",
        rank=Rank.NONE,
        factory=AutoVideoSource,
        description="Wrapper video source for automatically detected video source"
    ))
    logger.debug("Auto video source registered")


# Auto-register on import
register()
