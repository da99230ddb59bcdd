"""Token estimation for prompt budgeting.

Provides a lightweight token estimate without an external tokenizer. The
estimate is used to decide whether mentioned files fit in the prompt or must
be replaced by retrieved excerpts, so it errs on the high side.
"""

import re
from typing import Iterable


class TokenEstimator:
    """Heuristic token counter.

    Starts from the word count scaled by a subword multiplier and adds
    adjustments for punctuation, code, numbers and line breaks, which
    tokenizers tend to split into separate tokens.
    """

    WORD_MULTIPLIER = 1.3

    @staticmethod
    def estimate_tokens(text: str) -> int:
        """Estimate token count for ``text``.

        Returns:
            Estimated token count; 0 for empty or whitespace-only text.

        Example:
            >>> TokenEstimator.estimate_tokens("Hello world!") > 0
            True
        """
        if not text or not text.strip():
            return 0

        base_estimate = len(text.split()) * TokenEstimator.WORD_MULTIPLIER

        adjustments = (
            TokenEstimator._punctuation_adjustment(text)
            + TokenEstimator._code_adjustment(text)
            + TokenEstimator._special_chars_adjustment(text)
        )

        return max(1, int(base_estimate + adjustments))

    @staticmethod
    def estimate_total(texts: Iterable[str]) -> int:
        """Sum the estimates of several texts."""
        return sum(TokenEstimator.estimate_tokens(text) for text in texts)

    @staticmethod
    def _punctuation_adjustment(text: str) -> float:
        punct_chars = re.findall(r'[.!?,:;(){}[\]"\'-]', text)
        return len(punct_chars) * 0.3

    @staticmethod
    def _code_adjustment(text: str) -> float:
        adjustments = 0.0

        code_blocks = re.findall(r"```.*?```", text, re.DOTALL)
        adjustments += len(code_blocks) * 5

        inline_code = re.findall(r"`[^`]+`", text)
        adjustments += len(inline_code) * 2

        links = re.findall(r"https?://\S+|\[\[[^\]]+\]\]", text)
        adjustments += len(links) * 3

        return adjustments

    @staticmethod
    def _special_chars_adjustment(text: str) -> float:
        adjustments = 0.0

        numbers = re.findall(r"\d+", text)
        adjustments += len(numbers) * 0.2

        special_chars = re.findall(r'[^\w\s.,!?;:\'"()-]', text)
        adjustments += len(special_chars) * 0.5

        adjustments += text.count("\n") * 0.5

        return adjustments
