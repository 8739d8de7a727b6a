"""Multi-language audio collection generation."""

from .assembler import CollectionAssembler
from .catalog import CATALOG, VoiceCatalog
from .orchestrator import BatchOrchestrator

__all__ = ["BatchOrchestrator", "CATALOG", "CollectionAssembler", "VoiceCatalog"]
