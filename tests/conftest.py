import sys
from pathlib import Path

import pytest

# Ensure the package is importable when tests run from the repo root
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
	sys.path.insert(0, str(PROJECT_ROOT))

from wordguard.moderation.domain.container import set_word_filter
from wordguard.moderation.domain.term_sources import MappingTermSource
from wordguard.moderation.domain.word_filter import FilterOptions, SensitiveWordFilter


@pytest.fixture
def make_filter():
	"""Build a filter over an explicit dictionary (no built-in terms)."""

	def _make(terms=None, **options) -> SensitiveWordFilter:
		sources = [MappingTermSource(terms)] if terms else []
		return SensitiveWordFilter(options=FilterOptions(**options), sources=sources)

	return _make


@pytest.fixture
def word_filter(make_filter) -> SensitiveWordFilter:
	return make_filter({"Low": ["spam"], "High": ["badword"]})


@pytest.fixture(autouse=True)
def reset_default_filter():
	try:
		yield
	finally:
		set_word_filter(None)
