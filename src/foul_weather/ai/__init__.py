# ABOUTME: AI integration module for Google Gemini.
# ABOUTME: Provides narrative generation and multi-speaker speech synthesis.

from foul_weather.ai.service import NarrativeService

__all__ = ["NarrativeService"]
