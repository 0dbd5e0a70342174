"""Configuration loading modules."""

from .loaders import ConfigLoader, DocumentLoader, OutputFormat, SavedQuery

__all__ = ["ConfigLoader", "DocumentLoader", "OutputFormat", "SavedQuery"]
