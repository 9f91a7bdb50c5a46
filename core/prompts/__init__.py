# core/prompts/__init__.py
"""Prompt templates"""

from .system import get_prescription_prompt, PRESCRIPTION_PROMPT, NOT_READABLE

__all__ = ["get_prescription_prompt", "PRESCRIPTION_PROMPT", "NOT_READABLE"]
