"""
Prompt construction shared by the local and remote execution paths.

Components:
- PromptBuilder: renders Jinja2 prompt templates
- text_utils: token estimation and key-point parsing helpers
"""

from hybrid_inference.llm.prompt_builder import PromptBuilder, TONE_INSTRUCTIONS
from hybrid_inference.llm.text_utils import estimate_token_count, parse_key_points

__all__ = [
    "PromptBuilder",
    "TONE_INSTRUCTIONS",
    "estimate_token_count",
    "parse_key_points",
]
