"""
OAI CLI - Three-layer architecture for the OpenAI REST API.

Layers:
- core: Config, transport, response decoding, multipart encoding and types
- sdk: High-level OpenAIClient with one sub-API per resource family
- cli: Opinionated command-line interface
"""

from oai_cli.sdk import OpenAIClient

__version__ = "0.1.0"
__all__ = ["OpenAIClient"]
