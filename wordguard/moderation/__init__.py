"""Moderation package integration helpers exposed to the application."""

from wordguard.moderation.domain.container import build_word_filter, get_word_filter, set_word_filter

__all__ = ["build_word_filter", "get_word_filter", "set_word_filter"]
