"""Statistical fallback for files that heuristics could not narrow down."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import structlog

from repolang.bayes import NaiveBayesClassifier
from repolang.exceptions import ClassifierUnavailableError
from repolang.extractor import CandidateSet
from repolang.samples import SampleProvider

log = structlog.get_logger("repolang.fallback")


class StatisticalFallback:
    """Train a fresh classifier on one sample per candidate and predict.

    *classifier_factory* builds the classifier used for each file; any object
    with ``train(text, label)`` and ``predict(text).label`` will do.
    """

    def __init__(
        self,
        provider: SampleProvider,
        classifier_factory: Callable[[], NaiveBayesClassifier] = NaiveBayesClassifier,
    ) -> None:
        self.provider = provider
        self.classifier_factory = classifier_factory

    async def classify(self, path: str, candidates: CandidateSet, content: str) -> str | None:
        """Return the predicted language; falls back to the first candidate."""
        try:
            return await self._predict(candidates, content)
        except ClassifierUnavailableError as e:
            log.info("fallback.no_samples", path=path, candidates=e.candidates)
            return candidates.first()

    async def _predict(self, candidates: CandidateSet, content: str) -> str:
        classifier = self.classifier_factory()
        trained = 0
        for language in candidates:
            sample = await self._sample(language)
            if sample is None:
                continue
            classifier.train(sample, language)
            trained += 1
        if not trained:
            raise ClassifierUnavailableError(candidates.as_list())
        return classifier.predict(content).label

    async def _sample(self, language: str) -> str | None:
        try:
            return await self.provider.get_sample(language)
        except (httpx.HTTPError, OSError) as e:
            log.warning("fallback.sample_failed", language=language, error=str(e))
            return None
