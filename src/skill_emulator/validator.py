"""Response validator — checks skill responses against scripted expectations."""

import logging
import re
import string
from dataclasses import dataclass
from typing import List, Optional

from .response import SkillResponse
from .script import TurnExpectation

logger = logging.getLogger(__name__)

_SSML_TAG_RE = re.compile(r"<[^>]+>")


@dataclass
class ValidationResult:
    """Outcome of a single validation check."""

    passed: bool
    score: float  # 0.0–1.0  (fraction of checks that passed)
    details: str  # Human-readable reason


def _normalize(text: str) -> list:
    """Drop SSML tags, lowercase, strip punctuation, split into tokens."""
    text = _SSML_TAG_RE.sub(" ", text).lower()
    text = text.translate(str.maketrans("", "", string.punctuation))
    return text.split()


def _contains(haystack: list, needle: list) -> bool:
    """True if *needle* appears as a contiguous token run in *haystack*."""
    if not needle:
        return True
    n = len(needle)
    return any(haystack[i : i + n] == needle for i in range(len(haystack) - n + 1))


class ResponseValidator:
    """Validates skill responses against a turn's expectations."""

    def validate_text(self, actual: Optional[str], expected: str) -> ValidationResult:
        """Check that *expected* occurs in *actual*, ignoring case, punctuation and SSML.

        Returns:
            ValidationResult with ``score`` equal to the fraction of expected
            words present anywhere in the actual text.
        """
        if actual is None:
            return ValidationResult(False, 0.0, f"expected '{expected}'  actual=<none>")

        actual_tokens = _normalize(actual)
        expected_tokens = _normalize(expected)
        passed = _contains(actual_tokens, expected_tokens)
        if expected_tokens:
            present = sum(1 for t in expected_tokens if t in actual_tokens)
            score = present / len(expected_tokens)
        else:
            score = 1.0

        details = f"expected '{expected}'  actual='{actual}'"
        logger.debug("Text validation: passed=%s  %s", passed, details)
        return ValidationResult(passed=passed, score=score, details=details)

    def validate_response(
        self, response: SkillResponse, expect: TurnExpectation
    ) -> ValidationResult:
        """Run every check the expectation names against *response*."""
        checks: List[ValidationResult] = []

        if expect.prompt is not None:
            checks.append(self._labelled("prompt", self.validate_text(response.prompt(), expect.prompt)))
        if expect.reprompt is not None:
            checks.append(
                self._labelled("reprompt", self.validate_text(response.reprompt(), expect.reprompt))
            )
        if expect.card_title is not None:
            checks.append(
                self._labelled("card_title", self.validate_text(response.card_title(), expect.card_title))
            )
        if expect.directive is not None:
            found = response.directive(expect.directive) is not None
            checks.append(
                ValidationResult(
                    passed=found,
                    score=1.0 if found else 0.0,
                    details=f"directive {expect.directive}: {'present' if found else 'missing'}",
                )
            )
        if expect.session_ended is not None:
            ended = response.should_end_session
            ok = ended == expect.session_ended
            checks.append(
                ValidationResult(
                    passed=ok,
                    score=1.0 if ok else 0.0,
                    details=f"session_ended expected={expect.session_ended} actual={ended}",
                )
            )

        if not checks:
            return ValidationResult(passed=True, score=1.0, details="no expectations")

        passed = all(c.passed for c in checks)
        score = sum(1.0 for c in checks if c.passed) / len(checks)
        details = "; ".join(c.details for c in checks if not c.passed) or "all checks passed"
        return ValidationResult(passed=passed, score=score, details=details)

    @staticmethod
    def _labelled(label: str, result: ValidationResult) -> ValidationResult:
        return ValidationResult(result.passed, result.score, f"{label}: {result.details}")
