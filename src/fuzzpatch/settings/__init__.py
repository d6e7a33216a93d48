from .models import (  # noqa: F401
    CONFIG_RELPATH,
    LogLevel,
    LoggingSettings,
    PreviewSettings,
    Settings,
    ToolSpec,
)
from .loader import load_settings  # noqa: F401
