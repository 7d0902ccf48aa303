"""
Layered ignore policy for owo.

A candidate is checked against, in order:
1. the dotfile rule (hidden entries are denied unless dotfiles are enabled)
2. the regex alternation (whole-name default patterns, optionally OR-ed with
   an unanchored user pattern)
3. the stack of gitignore layers along its ancestor directories

Denied directories are reported as PRUNE so the enumerator skips the whole
subtree without listing it.
"""

import enum
import logging
import re
from dataclasses import dataclass

from owo.core.errors import ConfigurationError
from owo.core.gitignore_manager import DEFAULT_IGNORE_FILENAMES, GitignoreLayer

from .models import PathCandidate

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_PATTERN = "obj|bin|build|dist|.git|.env.*"


class Verdict(enum.Enum):
    """Outcome of evaluating one candidate."""

    ALLOW = "allow"
    DENY = "deny"
    PRUNE = "prune"

    @property
    def allowed(self) -> bool:
        return self is Verdict.ALLOW


def combine_patterns(user_pattern: str | None, use_default: bool = True) -> str | None:
    """
    Build the ignore alternation from the default and a user pattern.

    The default alternation is anchored so that it must match a whole name
    (``bin`` denies ``bin/`` but not ``binary.py``). The user pattern is left
    unanchored, so ``\\.log`` denies ``app.log``; it can anchor itself with
    ``^`` and ``$``. With both present they are OR-ed together, so a user
    pattern extends the defaults instead of replacing them. With
    ``use_default=False`` only the user pattern is kept.

    Returns:
        The combined pattern, or None when nothing should be matched
    """
    parts = []
    if use_default:
        parts.append(rf"\A(?:{DEFAULT_IGNORE_PATTERN})\Z")
    if user_pattern is not None and user_pattern.strip():
        parts.append(f"(?:{user_pattern.strip()})")
    if not parts:
        return None
    return "|".join(parts)


@dataclass(frozen=True)
class IgnoreRuleSet:
    """
    Read-only ignore configuration shared by every enumeration step.

    Attributes:
        regex: Compiled alternation, or None to disable the regex rule
        with_dotfiles: Whether entries whose name starts with "." are kept
        respect_gitignore: Whether gitignore layers are consulted
        ignore_filenames: Rule file names loaded in each directory
    """

    regex: re.Pattern[str] | None = None
    with_dotfiles: bool = False
    respect_gitignore: bool = True
    ignore_filenames: tuple[str, ...] = DEFAULT_IGNORE_FILENAMES

    @classmethod
    def build(
        cls,
        ignore_pattern: str | None = None,
        with_dotfiles: bool = False,
        use_default_ignore: bool = True,
        respect_gitignore: bool = True,
        ignore_filenames: tuple[str, ...] | list[str] = DEFAULT_IGNORE_FILENAMES,
    ) -> "IgnoreRuleSet":
        """
        Compile a rule set from configuration values.

        Raises:
            ConfigurationError: If the combined pattern is not a valid regex
        """
        combined = combine_patterns(ignore_pattern, use_default=use_default_ignore)
        regex = None
        if combined is not None:
            try:
                regex = re.compile(combined)
            except re.error as e:
                raise ConfigurationError(
                    f"Invalid ignore pattern {ignore_pattern!r}: {e}"
                ) from e

        return cls(
            regex=regex,
            with_dotfiles=with_dotfiles,
            respect_gitignore=respect_gitignore,
            ignore_filenames=tuple(ignore_filenames),
        )


class IgnoreMatcher:
    """
    Evaluates path candidates against an IgnoreRuleSet.

    The matcher holds no mutable state; every decision is a function of the
    candidate, the rule set and the gitignore layers passed in.
    """

    def __init__(self, ruleset: IgnoreRuleSet):
        self._ruleset = ruleset

    @property
    def ruleset(self) -> IgnoreRuleSet:
        return self._ruleset

    def evaluate(
        self,
        candidate: PathCandidate,
        layers: tuple[GitignoreLayer, ...] = (),
    ) -> Verdict:
        """
        Decide whether a candidate is kept.

        Args:
            candidate: Entry to evaluate
            layers: Gitignore layers of the candidate's ancestors, root first

        Returns:
            ALLOW, DENY for a denied file, or PRUNE for a denied directory
        """
        reason = self._deny_reason(candidate, layers)
        if reason is None:
            return Verdict.ALLOW

        logger.debug(f"Ignoring {candidate.rel_path} ({reason})")
        return Verdict.PRUNE if candidate.is_dir else Verdict.DENY

    def _deny_reason(
        self,
        candidate: PathCandidate,
        layers: tuple[GitignoreLayer, ...],
    ) -> str | None:
        if candidate.is_hidden and not self._ruleset.with_dotfiles:
            return "dotfile"

        if self._matches_regex(candidate):
            return "ignore pattern"

        if self._ruleset.respect_gitignore:
            pattern = self._last_gitignore_match(candidate, layers)
            if pattern is not None and not pattern.negation:
                return f"{pattern.source_path}:{pattern.line_number}: {pattern.raw}"

        return None

    def _matches_regex(self, candidate: PathCandidate) -> bool:
        """
        Search the alternation in the basename and in the full relative path.

        The default part is anchored by combine_patterns, so it only ever
        matches a whole name or the whole relative path.
        """
        regex = self._ruleset.regex
        if regex is None:
            return False
        return (
            regex.search(candidate.name) is not None
            or regex.search(candidate.rel_path) is not None
        )

    @staticmethod
    def _last_gitignore_match(candidate: PathCandidate, layers: tuple[GitignoreLayer, ...]):
        # Deeper layers come later, so the deepest match overrides shallower ones
        result = None
        for layer in layers:
            match = layer.last_match(candidate.rel_path, candidate.is_dir)
            if match is not None:
                result = match
        return result
