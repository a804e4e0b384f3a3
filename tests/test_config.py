"""Tests for AnalysisOptions."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from repolang.config import AnalysisOptions


class TestAnalysisOptions:
    def test_defaults(self):
        o = AnalysisOptions()
        assert o.ignored_files == [] and o.ignored_languages == []
        assert o.categories is None
        assert not (o.child_languages or o.keep_vendored or o.keep_binary or o.quick)
        assert o.check_attributes and o.check_ignored and o.check_heuristics and o.check_shebang
        assert o.concurrency == 8

    def test_camel_case_names(self):
        o = AnalysisOptions.model_validate(
            {"ignoredFiles": ["*.log"], "childLanguages": True, "keepVendored": True, "checkShebang": False}
        )
        assert o.ignored_files == ["*.log"]
        assert o.child_languages and o.keep_vendored
        assert not o.check_shebang

    def test_quick_forces_checks_off(self):
        o = AnalysisOptions(quick=True, check_heuristics=True, checkShebang=True)
        assert not (o.check_attributes or o.check_ignored or o.check_heuristics or o.check_shebang)

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            AnalysisOptions(categories=["programming", "poetry"])

    def test_unknown_option_rejected(self):
        with pytest.raises(ValidationError):
            AnalysisOptions(checkSamples=True)

    def test_blank_patterns_dropped(self):
        assert AnalysisOptions(ignored_files=["  ", "*.tmp "]).ignored_files == ["*.tmp"]

    def test_concurrency_must_be_positive(self):
        with pytest.raises(ValidationError):
            AnalysisOptions(concurrency=0)

    def test_frozen(self):
        with pytest.raises(ValidationError):
            AnalysisOptions().quick = True
