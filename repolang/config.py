"""Analysis options."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from repolang.models.language import Category

_CHECK_FIELDS = ("check_attributes", "check_ignored", "check_heuristics", "check_shebang")
_CHECK_KEYS = frozenset(_CHECK_FIELDS) | {to_camel(name) for name in _CHECK_FIELDS}


class AnalysisOptions(BaseModel):
    """Options recognised by :func:`repolang.analyser.analyse`.

    Accepts snake_case field names and the camelCase spellings
    (``ignoredFiles``, ``childLanguages``, ...).  ``quick`` turns every
    ``check_*`` flag off regardless of what else was passed.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )

    ignored_files: list[str] = Field(default_factory=list)
    ignored_languages: list[str] = Field(default_factory=list)
    categories: list[Category] | None = None
    child_languages: bool = False
    keep_vendored: bool = False
    keep_binary: bool = False
    check_attributes: bool = True
    check_ignored: bool = True
    check_heuristics: bool = True
    check_shebang: bool = True
    quick: bool = False
    concurrency: int = Field(default=8, ge=1)

    @model_validator(mode="before")
    @classmethod
    def _quick_disables_checks(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("quick") in (True, 1, "true", "True", "1"):
            data = {k: v for k, v in data.items() if k not in _CHECK_KEYS}
            data.update({name: False for name in _CHECK_FIELDS})
        return data

    @field_validator("ignored_files", "ignored_languages", mode="before")
    @classmethod
    def _drop_blank(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = [v]
        if isinstance(v, list):
            return [
                item.strip() if isinstance(item, str) else item
                for item in v
                if not isinstance(item, str) or item.strip()
            ]
        return v
