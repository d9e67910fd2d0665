from .loader import load_config
from .models import (
    AdmitWriterConfig,
    LLMSettings,
    OutputConfig,
    ReviewConfig,
    WriterConfig,
)

__all__ = [
    "AdmitWriterConfig",
    "LLMSettings",
    "OutputConfig",
    "ReviewConfig",
    "WriterConfig",
    "load_config",
]
