"""kasane ドメインモデルパッケージ。"""

from kasane.models._base import KasaneBaseModel, normalize_enum_value
from kasane.models.boundary import (
    DEFAULT_MAX_ABSOLUTE_DEPTH,
    DEFAULT_MAX_RELATIVE_DEPTH,
    PathEnvironment,
    TraversalBoundary,
    TraversalCheckResult,
    TraversalSecurityOptions,
)
from kasane.models.discovery import (
    DEFAULT_EXTENSIONS,
    DEFAULT_ROOT_DETECTION_DEPTH,
    DEFAULT_ROOT_MARKERS,
    DEFAULT_WALK_DEPTH,
    STANDARD_PATTERNS,
    ConfigDiscoveryOptions,
    ConfigNamingPattern,
    DiscoveredConfig,
    DiscoveryResult,
    HierarchicalMode,
    HierarchicalOptions,
    ModeDiscoveryResult,
    MultipleConfigWarning,
    RootDetectionResult,
    RootMarker,
    RootMarkerKind,
)
from kasane.models.exit_code import ExitCode
from kasane.models.hierarchy import (
    DEFAULT_CONFIG_DIR_NAME,
    DEFAULT_CONFIG_FILE_NAME,
    DEFAULT_ENCODING,
    DEFAULT_MAX_LEVELS,
    ArrayOverlapMode,
    DiscoveredConfigDir,
    HierarchicalConfigResult,
    HierarchicalDiscoveryOptions,
    normalize_field_overlaps,
)

__all__ = [
    "DEFAULT_CONFIG_DIR_NAME",
    "DEFAULT_CONFIG_FILE_NAME",
    "DEFAULT_ENCODING",
    "DEFAULT_EXTENSIONS",
    "DEFAULT_MAX_ABSOLUTE_DEPTH",
    "DEFAULT_MAX_LEVELS",
    "DEFAULT_MAX_RELATIVE_DEPTH",
    "DEFAULT_ROOT_DETECTION_DEPTH",
    "DEFAULT_ROOT_MARKERS",
    "DEFAULT_WALK_DEPTH",
    "STANDARD_PATTERNS",
    "ArrayOverlapMode",
    "ConfigDiscoveryOptions",
    "ConfigNamingPattern",
    "DiscoveredConfig",
    "DiscoveredConfigDir",
    "DiscoveryResult",
    "ExitCode",
    "HierarchicalConfigResult",
    "HierarchicalDiscoveryOptions",
    "HierarchicalMode",
    "HierarchicalOptions",
    "KasaneBaseModel",
    "ModeDiscoveryResult",
    "MultipleConfigWarning",
    "PathEnvironment",
    "RootDetectionResult",
    "RootMarker",
    "RootMarkerKind",
    "TraversalBoundary",
    "TraversalCheckResult",
    "TraversalSecurityOptions",
    "normalize_enum_value",
    "normalize_field_overlaps",
]
