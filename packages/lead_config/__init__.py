"""Voice Lead Collection - Configuration Package."""

from .loader import (
    DEFAULT_CONFIG_PATH,
    ConfigurationError,
    load_config_from_dict,
    load_config_from_yaml,
    resolve_config_path,
)
from .schemas import (
    AgentVoiceProfile,
    ConversationStep,
    FieldType,
    Gender,
    LeadFlowConfig,
    TurnTimings,
)

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "AgentVoiceProfile",
    "ConfigurationError",
    "ConversationStep",
    "FieldType",
    "Gender",
    "LeadFlowConfig",
    "TurnTimings",
    "load_config_from_dict",
    "load_config_from_yaml",
    "resolve_config_path",
]
