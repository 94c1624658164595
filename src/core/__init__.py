"""Kiosk Dialog Core"""
__version__ = "0.1.0"

from src.core.catalog import FlowDocument, NodeCatalog, load_flow_file
from src.core.flow import DialogEngine, EngineConfig
from src.core.matching import IntentMatcher, MatchingConfig, ResponseStrategy

__all__ = [
    "FlowDocument",
    "NodeCatalog",
    "load_flow_file",
    "DialogEngine",
    "EngineConfig",
    "IntentMatcher",
    "MatchingConfig",
    "ResponseStrategy",
]
