"""Configuration data models."""

from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

from core.models.caps import Caps, RAW_VIDEO_CAPS
from core.models.candidate import Rank, parse_rank


@dataclass
class DetectConfig:
    """Configuration for source auto-detection."""
    name: str = "autovideosrc0"
    filter_caps: Optional[str] = RAW_VIDEO_CAPS
    min_rank: int = int(Rank.MARGINAL)
    classes: List[str] = field(default_factory=lambda: ["Source", "Video"])

    def __post_init__(self):
        """Fail early on unparsable caps."""
        Caps.from_value(self.filter_caps)

    @property
    def caps(self) -> Optional[Caps]:
        return Caps.from_value(self.filter_caps)


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    console_colors: bool = True
    log_to_file: bool = False
    log_file: str = "/tmp/autovideo/logs/autovideo.log"


@dataclass
class AutoVideoConfig:
    """Complete autovideo configuration."""
    detect: DetectConfig = field(default_factory=DetectConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    rank_overrides: Dict[str, int] = field(default_factory=dict)
    sources: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "AutoVideoConfig":
        """Build typed configuration from a loaded config dictionary.

        Raises:
            ValueError: If a rank cannot be parsed
        """
        detect = dict(config.get("detect") or {})
        if "min_rank" in detect:
            detect["min_rank"] = parse_rank(detect["min_rank"])
        overrides = (config.get("registry") or {}).get("rank_overrides") or {}
        return cls(
            detect=DetectConfig(**detect),
            logging=LoggingConfig(**(config.get("logging") or {})),
            rank_overrides={name: parse_rank(rank) for name, rank in overrides.items()},
            sources=dict(config.get("sources") or {}),
        )
