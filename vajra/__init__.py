"""
vajra - one contract over many text-generation backends.

Adapters per backend, a registry, an Ollama inventory probe, a model
resolver with fallback priority, a hardware advisor and a failure
classifier.
"""

__version__ = "0.3.0"
