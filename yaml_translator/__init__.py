"""Structure-preserving YAML/JSON document translation through AI providers."""

__version__ = "1.0.0"
