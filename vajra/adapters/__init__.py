"""
Adapters for text-generation backends.

Provider-agnostic architecture: Protocol defines WHAT, implementations define HOW.
"""

from .anthropic import AnthropicAdapter
from .base import BackendAdapter, HostedAdapter
from .gemini import GeminiAdapter
from .huggingface import HuggingFaceAdapter
from .ollama import OllamaAdapter
from .openai_compat import (
    DeepSeekAdapter,
    GroqAdapter,
    MistralAdapter,
    OpenAIAdapter,
    OpenAICompatibleAdapter,
    OpenRouterAdapter,
    QwenAdapter,
)

# Registration (and display) order
ADAPTER_CLASSES = (
    OllamaAdapter,
    OpenAIAdapter,
    AnthropicAdapter,
    GeminiAdapter,
    GroqAdapter,
    DeepSeekAdapter,
    MistralAdapter,
    QwenAdapter,
    OpenRouterAdapter,
    HuggingFaceAdapter,
)

__all__ = [
    "ADAPTER_CLASSES",
    "AnthropicAdapter",
    "BackendAdapter",
    "DeepSeekAdapter",
    "GeminiAdapter",
    "GroqAdapter",
    "HostedAdapter",
    "HuggingFaceAdapter",
    "MistralAdapter",
    "OllamaAdapter",
    "OpenAIAdapter",
    "OpenAICompatibleAdapter",
    "OpenRouterAdapter",
    "QwenAdapter",
]
