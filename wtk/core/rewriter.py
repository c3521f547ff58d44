"""Text rewriting engine for WTK.

Compression is an ordered pipeline of pure ``str -> str`` rules. Later rules
see the output of earlier ones, so the order of ``GENERIC_RULES`` is part of
the behaviour. File-specific block templates are data loaded from YAML and
replace the generic rules for the handful of files they target.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from ..logging_config import logger
from ..utils.tokenizer import TokenCounter, approximate_token_count, savings_percent
from .errors import ConfigError

DEFAULT_TEMPLATES_PATH = Path(__file__).resolve().parent.parent / "data" / "block_templates.yaml"

Replacement = str | Callable[[re.Match[str]], str]


@dataclass(frozen=True)
class TextDocument:
    """A named piece of text to compress."""

    filename: str
    content: str


@dataclass(frozen=True)
class CompressionRule:
    """A single find/replace transform."""

    label: str
    pattern: re.Pattern[str]
    replacement: Replacement

    def apply(self, text: str) -> str:
        """Apply the rule to every match in text."""
        return self.pattern.sub(self.replacement, text)

    def apply_counted(self, text: str) -> tuple[str, int]:
        """Apply the rule and report how many substitutions were made."""
        return self.pattern.subn(self.replacement, text)


@dataclass
class CompressionResult:
    """Result of compressing one document."""

    filename: str
    original_tokens: int
    compressed_tokens: int
    original_text: str
    compressed_text: str
    savings_percent: int
    applied_rules: list[str] = field(default_factory=list)

    @property
    def tokens_saved(self) -> int:
        """Tokens saved; negative when the rewrite made the text longer."""
        return self.original_tokens - self.compressed_tokens

    @property
    def is_beneficial(self) -> bool:
        """Only strictly smaller output is worth writing back."""
        return self.compressed_tokens < self.original_tokens


# =============================================================================
# Generic Rules
# =============================================================================

FILLER_WORDS = ["very", "quite", "rather", "really", "actually", "basically", "essentially"]


def _strip_filler(match: re.Match[str]) -> str:
    """Drop a filler word, keeping one separator only when it sat between words."""
    lead, trail = match.group("lead"), match.group("trail")
    return lead if lead and trail else ""


def _demote_header(match: re.Match[str]) -> str:
    return match.group(1) + "#"


# Registry of generic rules, in application order
GENERIC_RULES: list[CompressionRule] = []


def _register_rule(label: str, pattern: str, replacement: Replacement, flags: int = 0) -> None:
    """Register a generic compression rule."""
    GENERIC_RULES.append(CompressionRule(label, re.compile(pattern, flags), replacement))


_register_rule("conditional", r"\bWhen\s+([^,\n]+),\s*(.+)", r"\1 → \2", re.IGNORECASE)
_register_rule("purpose", r"\bIn order to\s+([^,\n]+),\s*(.+)", r"GOAL: \1 → \2", re.IGNORECASE)
_register_rule("importance", r"\bIt is important to\s+(.+)", r"CRITICAL: \1", re.IGNORECASE)
_register_rule("instruction", r"\bYou should\s+(.+)", r"DO: \1", re.IGNORECASE)
_register_rule("politeness", r"\bPlease[ \t]+(.+)", r"\1", re.IGNORECASE)
_register_rule(
    "filler",
    rf"(?P<lead>[ \t]*)(?<![\w'-])(?:{'|'.join(FILLER_WORDS)})(?![\w'-])(?P<trail>[ \t]*)",
    _strip_filler,
    re.IGNORECASE,
)
_register_rule("bullets", r"^[ \t]*[-•*][ \t]+(.+)$", r"• \1", re.MULTILINE)
_register_rule("headers", r"^(#{1,2})(?= )", _demote_header, re.MULTILINE)
_register_rule("blank-lines", r"\n(?:[ \t]*\n){2,}", "\n\n")


# =============================================================================
# File-specific Block Templates
# =============================================================================


def _parse_flags(names: Iterable[str], source: str) -> int:
    flags = 0
    for name in names:
        flag = getattr(re, str(name).upper(), None)
        if not isinstance(flag, re.RegexFlag):
            raise ConfigError(f"Unknown regex flag '{name}' in {source}")
        flags |= flag
    return flags


def load_block_templates(path: Path | None = None) -> dict[str, list[CompressionRule]]:
    """Load the filename-keyed block templates from a YAML table.

    The table maps a file name to a list of entries with ``pattern``,
    ``replacement`` and optional ``label`` and ``flags`` keys.

    Args:
        path: YAML file to read; the shipped table when omitted

    Returns:
        Dict of file name to its ordered block rules
    """
    path = path or DEFAULT_TEMPLATES_PATH
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Could not read block templates {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    templates: dict[str, list[CompressionRule]] = {}
    for filename, entries in data.items():
        rules = []
        for i, entry in enumerate(entries or []):
            source = f"{path} ({filename} #{i + 1})"
            try:
                pattern = re.compile(entry["pattern"], _parse_flags(entry.get("flags", []), source))
            except KeyError as e:
                raise ConfigError(f"Missing key {e} in {source}") from e
            except re.error as e:
                raise ConfigError(f"Bad pattern in {source}: {e}") from e
            label = entry.get("label") or f"{filename}#{i + 1}"
            rules.append(CompressionRule(label, pattern, entry.get("replacement", "")))
        templates[str(filename)] = rules

    logger.debug(f"Loaded block templates for {len(templates)} file(s) from {path}")
    return templates


# =============================================================================
# Rewriter
# =============================================================================


def _run_rules(rules: Iterable[CompressionRule], text: str) -> tuple[str, list[str]]:
    """Run rules in order, returning the text and the labels that fired."""
    fired = []
    for rule in rules:
        text, count = rule.apply_counted(text)
        if count:
            fired.append(rule.label)
    return text, fired


class Rewriter:
    """Applies generic rules and block templates, and measures the result."""

    def __init__(
        self,
        rules: list[CompressionRule] | None = None,
        block_templates: dict[str, list[CompressionRule]] | None = None,
        token_counter: TokenCounter = approximate_token_count,
    ):
        self.rules = list(GENERIC_RULES if rules is None else rules)
        self.block_templates = (
            load_block_templates() if block_templates is None else block_templates
        )
        self.token_counter = token_counter

    def has_block_rules(self, filename: str) -> bool:
        """Check whether a file name has block templates."""
        return Path(filename).name in self.block_templates

    def apply_generic_rules(self, text: str) -> str:
        """Apply the generic rules in order."""
        return _run_rules(self.rules, text)[0]

    def apply_file_specific_blocks(self, text: str, filename: str) -> str:
        """Replace known blocks for this file; unchanged when nothing matches."""
        rules = self.block_templates.get(Path(filename).name, [])
        return _run_rules(rules, text)[0]

    def compress(self, document: TextDocument) -> CompressionResult:
        """Compress a document and measure the token delta."""
        # Known files get their block rewrites only, everything else the generic rules
        if self.has_block_rules(document.filename):
            block_rules = self.block_templates[Path(document.filename).name]
            text, fired = _run_rules(block_rules, document.content)
        else:
            text, fired = _run_rules(self.rules, document.content)

        original_tokens = self.token_counter(document.content)
        compressed_tokens = self.token_counter(text)
        logger.debug(
            f"{document.filename}: {original_tokens} -> {compressed_tokens} tokens "
            f"(rules: {', '.join(fired) or 'none'})"
        )

        return CompressionResult(
            filename=document.filename,
            original_tokens=original_tokens,
            compressed_tokens=compressed_tokens,
            original_text=document.content,
            compressed_text=text,
            savings_percent=savings_percent(original_tokens, compressed_tokens),
            applied_rules=fired,
        )


# Global rewriter instance
_rewriter: Rewriter | None = None


def get_rewriter() -> Rewriter:
    """Get the global rewriter built from the shipped rules."""
    global _rewriter
    if _rewriter is None:
        _rewriter = Rewriter()
    return _rewriter


def apply_generic_rules(text: str) -> str:
    """Apply the generic rules with the default rewriter."""
    return get_rewriter().apply_generic_rules(text)


def apply_file_specific_blocks(text: str, filename: str) -> str:
    """Apply block templates for filename with the default rewriter."""
    return get_rewriter().apply_file_specific_blocks(text, filename)


def compress(document: TextDocument) -> CompressionResult:
    """Compress a document with the default rewriter."""
    return get_rewriter().compress(document)
