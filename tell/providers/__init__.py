"""LLM provider implementations for TELL."""

from .base import CommandResponse, LLMProvider, UsageInfo

__all__ = ["CommandResponse", "LLMProvider", "UsageInfo"]
