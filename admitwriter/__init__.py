"""admitwriter: section-aware Statement of Purpose generation."""

__version__ = "0.1.0"
