"""
Core layer - Shared request/response machinery and raw types.

This layer provides:
- Immutable client configuration
- Authenticated transport with timeout normalization
- Error envelope decoding and binary streaming
- multipart/form-data encoding for file uploads
- Typed dataclasses for request parameters and responses
"""

from oai_cli.core.client import (
    APIClient,
    APIError,
    BadStatusError,
    CLIError,
    Config,
    RequestTimeoutError,
    ValidationError,
    decode_response,
)
from oai_cli.core.multipart import FILE_FIELDS, encode_multipart
from oai_cli.core.types import ErrorEnvelope, as_params

__all__ = [
    "APIClient",
    "APIError",
    "BadStatusError",
    "CLIError",
    "Config",
    "ErrorEnvelope",
    "FILE_FIELDS",
    "RequestTimeoutError",
    "ValidationError",
    "as_params",
    "decode_response",
    "encode_multipart",
]
