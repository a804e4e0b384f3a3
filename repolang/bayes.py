"""Multinomial Naive Bayes text classifier over code tokens."""

from __future__ import annotations

import math
import re
from collections import Counter
from dataclasses import dataclass, field

_TOKEN_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*|\d+|[^\w\s]{1,3}")


def tokenize(text: str) -> list[str]:
    """Split source text into identifiers, numbers and short punctuation runs."""
    return _TOKEN_RE.findall(text)


@dataclass
class Prediction:
    label: str
    scores: dict[str, float] = field(default_factory=dict)  # label -> probability


class NaiveBayesClassifier:
    """Laplace-smoothed multinomial Naive Bayes.

    Each instance holds its own counts; nothing is shared between instances.
    Ties are broken in favour of the label trained first.
    """

    def __init__(self, alpha: float = 1.0) -> None:
        self.alpha = alpha
        self._labels: list[str] = []
        self._docs: Counter[str] = Counter()
        self._tokens: dict[str, Counter[str]] = {}
        self._totals: Counter[str] = Counter()
        self._vocab: set[str] = set()

    @property
    def labels(self) -> list[str]:
        return list(self._labels)

    def train(self, text: str, label: str) -> None:
        if label not in self._tokens:
            self._labels.append(label)
            self._tokens[label] = Counter()
        tokens = tokenize(text)
        self._docs[label] += 1
        self._tokens[label].update(tokens)
        self._totals[label] += len(tokens)
        self._vocab.update(tokens)

    def predict(self, text: str) -> Prediction:
        if not self._labels:
            raise ValueError("classifier has not been trained")

        tokens = tokenize(text)
        n_docs = sum(self._docs.values())
        vocab = len(self._vocab) or 1
        log_scores: dict[str, float] = {}
        for label in self._labels:
            counts = self._tokens[label]
            denom = self._totals[label] + self.alpha * vocab
            score = math.log(self._docs[label] / n_docs)
            for token in tokens:
                score += math.log((counts[token] + self.alpha) / denom)
            log_scores[label] = score

        # Normalise with log-sum-exp
        top = max(log_scores.values())
        norm = top + math.log(sum(math.exp(s - top) for s in log_scores.values()))
        scores = {label: math.exp(s - norm) for label, s in log_scores.items()}
        best = max(self._labels, key=lambda label: log_scores[label])
        return Prediction(label=best, scores=scores)
