"""Resolve human-readable element descriptions to stable page locators."""

from .ambiguity import AmbiguityDetector, AmbiguityReport, Suggestion
from .config import EngineConfig, load_config
from .engine import Resolution, ResolutionEngine
from .errors import (
    AmbiguousSelectorError,
    ErrorCode,
    MappingError,
    ResolutionError,
    SelectorNotFoundError,
    StoreEmptyError,
)
from .models import ElementRecord, Locator, LocatorStrategy, MatchTier, Query, ScoredCandidate
from .scorer import CandidateScorer
from .store import ElementRecordStore
from .synthesizer import LocatorSynthesizer

__all__ = [
    "AmbiguityDetector",
    "AmbiguityReport",
    "AmbiguousSelectorError",
    "CandidateScorer",
    "ElementRecord",
    "ElementRecordStore",
    "EngineConfig",
    "ErrorCode",
    "Locator",
    "LocatorStrategy",
    "LocatorSynthesizer",
    "MappingError",
    "MatchTier",
    "Query",
    "Resolution",
    "ResolutionEngine",
    "ResolutionError",
    "ScoredCandidate",
    "SelectorNotFoundError",
    "StoreEmptyError",
    "Suggestion",
    "load_config",
]
