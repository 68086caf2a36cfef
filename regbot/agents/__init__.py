"""
Language-model text generators.
"""

from .base import BaseTextGenerator
from .text_generator import OpenAITextGenerator

__all__ = ["BaseTextGenerator", "OpenAITextGenerator"]
