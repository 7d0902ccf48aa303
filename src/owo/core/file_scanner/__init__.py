"""
File scanner module for owo.

Provides ordered directory traversal, the layered ignore policy and the
extension to language-tag lookup used when rendering.
"""

from .ignore_matcher import (
    DEFAULT_IGNORE_PATTERN,
    IgnoreMatcher,
    IgnoreRuleSet,
    Verdict,
    combine_patterns,
)
from .interfaces import PathEnumeratorInterface
from .language_registry import UNKNOWN_LANGUAGE, LanguageRegistry, get_default_registry
from .models import FileResult, FileTask, PathCandidate
from .scanner import PathEnumerator

__all__ = [
    # Traversal
    "PathEnumerator",
    "PathEnumeratorInterface",
    # Ignore policy
    "IgnoreMatcher",
    "IgnoreRuleSet",
    "Verdict",
    "combine_patterns",
    "DEFAULT_IGNORE_PATTERN",
    # Models
    "PathCandidate",
    "FileTask",
    "FileResult",
    # Language registry
    "LanguageRegistry",
    "get_default_registry",
    "UNKNOWN_LANGUAGE",
]
