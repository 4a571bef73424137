"""
Core types for the OpenAI REST API.

Request parameter records are dataclasses whose field metadata drives
serialization (see ``as_params``); response records are built with
``from_dict`` from the decoded JSON body.
"""

import json
from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any

# =============================================================================
# Parameter flattening
# =============================================================================


def omitempty(default: Any = None, default_factory: Any = None) -> Any:
    """Declare a parameter field that is left out of the request when empty."""
    if default_factory is not None:
        return field(default_factory=default_factory, metadata={"omitempty": True})
    return field(default=default, metadata={"omitempty": True})


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, bytes, list, tuple, dict)):
        return len(value) == 0
    return value is False or value == 0


def as_params(record: Any) -> dict[str, Any]:
    """
    Flatten a parameter record into a name -> value mapping.

    Dataclass fields marked with ``omitempty`` are dropped when empty
    (None, "", 0, False or an empty collection). Plain mappings pass
    through unchanged.
    """
    if isinstance(record, dict):
        return dict(record)
    if not is_dataclass(record) or isinstance(record, type):
        raise TypeError(f"Cannot flatten {type(record).__name__} into request parameters")

    params: dict[str, Any] = {}
    for f in fields(record):
        value = getattr(record, f.name)
        if f.metadata.get("omitempty") and _is_empty(value):
            continue
        params[f.metadata.get("name", f.name)] = value
    return params


# =============================================================================
# Errors
# =============================================================================


ERROR_MESSAGE_TEMPLATE = "Message: {message} | Type: {type} | Code: {code} | Param: {param}"


def render_param(param: Any) -> str:
    """Render an untyped ``param`` value for display (strings as-is, else JSON)."""
    if isinstance(param, str):
        return param
    return json.dumps(param, default=str)


@dataclass(frozen=True)
class ErrorEnvelope:
    """The ``error`` object returned by the API on a failed request."""

    message: str = ""
    type: str = ""
    code: str = ""
    param: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ErrorEnvelope":
        """
        Create from the decoded error body (the object holding ``error``).

        ``null`` leaves a field empty; any other mistyped value is a decode
        failure.

        Raises:
            ValueError: If ``error`` is not an object or a text field is not a string

        """
        error = data.get("error")
        if error is None:
            error = {}
        if not isinstance(error, dict):
            raise ValueError(f"Unexpected error envelope of type {type(error).__name__}")

        text = {}
        for name in ("message", "type", "code"):
            value = error.get(name)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"Error field {name!r} has type {type(value).__name__}, expected string")
            text[name] = value or ""
        return cls(param=error.get("param"), **text)

    def render(self) -> str:
        """Format as a single human-readable line."""
        return ERROR_MESSAGE_TEMPLATE.format(
            message=self.message,
            type=self.type,
            code=self.code,
            param=render_param(self.param),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "type": self.type, "code": self.code, "param": self.param}


# =============================================================================
# Model Types
# =============================================================================


@dataclass
class ModelPermission:
    """A permission the caller holds on a model."""

    id: str
    created: int = 0
    allow_create_engine: bool = False
    allow_sampling: bool = False
    allow_logprobs: bool = False
    allow_search_indices: bool = False
    allow_view: bool = False
    allow_fine_tuning: bool = False
    organization: str = ""
    group: Any = None
    is_blocking: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ModelPermission":
        """Create from API response dict."""
        return cls(
            id=data.get("id", ""),
            created=data.get("created", 0),
            allow_create_engine=data.get("allow_create_engine", False),
            allow_sampling=data.get("allow_sampling", False),
            allow_logprobs=data.get("allow_logprobs", False),
            allow_search_indices=data.get("allow_search_indices", False),
            allow_view=data.get("allow_view", False),
            allow_fine_tuning=data.get("allow_fine_tuning", False),
            organization=data.get("organization", ""),
            group=data.get("group"),
            is_blocking=data.get("is_blocking", False),
        )


@dataclass
class Model:
    """A model available to the organization."""

    id: str
    owned_by: str = ""
    created: int = 0
    root: str = ""
    parent: Any = None
    permission: list[ModelPermission] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Model":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            owned_by=data.get("owned_by", ""),
            created=data.get("created", 0),
            root=data.get("root", ""),
            parent=data.get("parent"),
            permission=[ModelPermission.from_dict(p) for p in data.get("permission") or []],
        )


@dataclass
class Deleted:
    """Acknowledgement returned when a model or file is deleted."""

    id: str
    deleted: bool = False
    object: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Deleted":
        """Create from API response dict."""
        return cls(
            id=data.get("id", ""),
            deleted=bool(data.get("deleted", False)),
            object=data.get("object", ""),
        )


# =============================================================================
# Completion / Edit / Embedding Types
# =============================================================================


@dataclass
class TokenUsage:
    """Token accounting attached to generation responses."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "TokenUsage":
        data = data or {}
        return cls(
            prompt_tokens=data.get("prompt_tokens", 0),
            completion_tokens=data.get("completion_tokens", 0),
            total_tokens=data.get("total_tokens", 0),
        )


@dataclass
class CompletionParams:
    """Parameters for ``POST /completions``."""

    model: str
    prompt: Any = omitempty()
    suffix: str = omitempty("")
    max_tokens: int = omitempty(0)
    temperature: float = omitempty(0.0)
    top_p: float = omitempty(0.0)
    n: int = omitempty(0)
    logprobs: int = omitempty(0)
    echo: bool = omitempty(False)
    stop: Any = omitempty()
    presence_penalty: float = omitempty(0.0)
    frequency_penalty: float = omitempty(0.0)
    best_of: int = omitempty(0)
    logit_bias: dict[str, int] = omitempty(default_factory=dict)
    user: str = omitempty("")


@dataclass
class CompletionChoice:
    """One generated completion."""

    text: str
    index: int = 0
    logprobs: Any = None
    finish_reason: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CompletionChoice":
        return cls(
            text=data.get("text", ""),
            index=data.get("index", 0),
            logprobs=data.get("logprobs"),
            finish_reason=data.get("finish_reason") or "",
        )


@dataclass
class Completion:
    """Response of ``POST /completions``."""

    id: str
    object: str = ""
    created: int = 0
    model: str = ""
    choices: list[CompletionChoice] = field(default_factory=list)
    usage: TokenUsage = field(default_factory=TokenUsage)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Completion":
        """Create from API response dict."""
        return cls(
            id=data.get("id", ""),
            object=data.get("object", ""),
            created=data.get("created", 0),
            model=data.get("model", ""),
            choices=[CompletionChoice.from_dict(c) for c in data.get("choices") or []],
            usage=TokenUsage.from_dict(data.get("usage")),
        )


@dataclass
class EditParams:
    """Parameters for ``POST /edits``."""

    model: str
    instruction: str
    input: str = omitempty("")
    n: int = omitempty(0)
    temperature: float = omitempty(0.0)
    top_p: float = omitempty(0.0)


@dataclass
class EditChoice:
    text: str
    index: int = 0


@dataclass
class Edit:
    """Response of ``POST /edits``."""

    created: int = 0
    choices: list[EditChoice] = field(default_factory=list)
    usage: TokenUsage = field(default_factory=TokenUsage)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Edit":
        """Create from API response dict."""
        return cls(
            created=data.get("created", 0),
            choices=[EditChoice(text=c.get("text", ""), index=c.get("index", 0)) for c in data.get("choices") or []],
            usage=TokenUsage.from_dict(data.get("usage")),
        )


@dataclass
class EmbeddingParams:
    """Parameters for ``POST /embeddings``."""

    model: str
    input: Any
    user: str = omitempty("")


@dataclass
class Embedding:
    embedding: list[float]
    index: int = 0
    object: str = "embedding"


@dataclass
class EmbeddingResult:
    """Response of ``POST /embeddings``."""

    data: list[Embedding] = field(default_factory=list)
    model: str = ""
    usage: TokenUsage = field(default_factory=TokenUsage)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EmbeddingResult":
        """Create from API response dict."""
        return cls(
            data=[
                Embedding(
                    embedding=e.get("embedding") or [],
                    index=e.get("index", 0),
                    object=e.get("object", "embedding"),
                )
                for e in data.get("data") or []
            ],
            model=data.get("model", ""),
            usage=TokenUsage.from_dict(data.get("usage")),
        )


# =============================================================================
# Image Types
# =============================================================================


IMAGE_SIZE_256 = "256x256"
IMAGE_SIZE_512 = "512x512"
IMAGE_SIZE_1024 = "1024x1024"
IMAGE_SIZES = (IMAGE_SIZE_256, IMAGE_SIZE_512, IMAGE_SIZE_1024)

IMAGE_FORMAT_URL = "url"
IMAGE_FORMAT_B64_JSON = "b64_json"
IMAGE_FORMATS = (IMAGE_FORMAT_URL, IMAGE_FORMAT_B64_JSON)


@dataclass
class Image:
    """A generated image, as a URL or base64 payload."""

    url: str = ""
    b64_json: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Image":
        return cls(url=data.get("url") or "", b64_json=data.get("b64_json") or "")


@dataclass
class ImageGenerationParams:
    """Parameters for ``POST /images/generations``."""

    prompt: str
    n: int = omitempty(0)
    size: str = omitempty("")
    response_format: str = omitempty("")
    user: str = omitempty("")


@dataclass
class ImageEditParams:
    """Parameters for ``POST /images/edits``; ``image`` and ``mask`` are local paths."""

    image: str
    prompt: str
    mask: str = omitempty("")
    n: int = omitempty(0)
    size: str = omitempty("")
    response_format: str = omitempty("")
    user: str = omitempty("")


@dataclass
class ImageVariationParams:
    """Parameters for ``POST /images/variations``; ``image`` is a local path."""

    image: str
    n: int = omitempty(0)
    size: str = omitempty("")
    response_format: str = omitempty("")
    user: str = omitempty("")


# =============================================================================
# File Types
# =============================================================================


@dataclass
class File:
    """A file uploaded to the organization."""

    id: str
    bytes: int = 0
    created_at: int = 0
    filename: str = ""
    purpose: str = ""
    status: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "File":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            bytes=data.get("bytes", 0),
            created_at=data.get("created_at", 0),
            filename=data.get("filename", ""),
            purpose=data.get("purpose", ""),
            status=data.get("status"),
        )


@dataclass
class FileParams:
    """Parameters for ``POST /files``; ``file`` is a local path."""

    file: str
    purpose: str


# =============================================================================
# Fine-tune Types
# =============================================================================


@dataclass
class FineTuneEvent:
    created_at: int = 0
    level: str = ""
    message: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FineTuneEvent":
        return cls(
            created_at=data.get("created_at", 0),
            level=data.get("level", ""),
            message=data.get("message", ""),
        )


@dataclass
class FineTuneHyperparams:
    batch_size: int | None = None
    learning_rate_multiplier: float | None = None
    n_epochs: int | None = None
    prompt_loss_weight: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "FineTuneHyperparams":
        data = data or {}
        return cls(
            batch_size=data.get("batch_size"),
            learning_rate_multiplier=data.get("learning_rate_multiplier"),
            n_epochs=data.get("n_epochs"),
            prompt_loss_weight=data.get("prompt_loss_weight"),
        )


@dataclass
class FineTune:
    """A fine-tuning job."""

    id: str
    model: str = ""
    status: str = ""
    created_at: int = 0
    updated_at: int = 0
    fine_tuned_model: str | None = None
    organization_id: str = ""
    hyperparams: FineTuneHyperparams = field(default_factory=FineTuneHyperparams)
    events: list[FineTuneEvent] = field(default_factory=list)
    result_files: list[File] = field(default_factory=list)
    training_files: list[File] = field(default_factory=list)
    validation_files: list[Any] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """Check if the job reached a terminal status."""
        return self.status in ("succeeded", "failed", "cancelled")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FineTune":
        """Create from API response dict."""
        return cls(
            id=data["id"],
            model=data.get("model", ""),
            status=data.get("status", ""),
            created_at=data.get("created_at", 0),
            updated_at=data.get("updated_at", 0),
            fine_tuned_model=data.get("fine_tuned_model"),
            organization_id=data.get("organization_id", ""),
            hyperparams=FineTuneHyperparams.from_dict(data.get("hyperparams")),
            events=[FineTuneEvent.from_dict(e) for e in data.get("events") or []],
            result_files=[File.from_dict(f) for f in data.get("result_files") or []],
            training_files=[File.from_dict(f) for f in data.get("training_files") or []],
            validation_files=list(data.get("validation_files") or []),
        )


@dataclass
class FineTuneParams:
    """Parameters for ``POST /fine-tunes``; file fields are uploaded file IDs."""

    training_file: str
    validation_file: str = omitempty("")
    model: str = omitempty("")
    n_epochs: int = omitempty(0)
    batch_size: int = omitempty(0)
    learning_rate_multiplier: float = omitempty(0.0)
    prompt_loss_weight: float = omitempty(0.0)
    compute_classification_metrics: bool = omitempty(False)
    classification_n_classes: int = omitempty(0)
    classification_positive_class: str = omitempty("")
    classification_betas: list[Any] = omitempty(default_factory=list)
    suffix: str = omitempty("")


# =============================================================================
# Moderation Types
# =============================================================================


@dataclass
class ModerationResult:
    """Moderation verdict for one input."""

    flagged: bool = False
    categories: dict[str, bool] = field(default_factory=dict)
    category_scores: dict[str, float] = field(default_factory=dict)

    @property
    def flagged_categories(self) -> list[str]:
        return [name for name, hit in self.categories.items() if hit]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ModerationResult":
        return cls(
            flagged=bool(data.get("flagged", False)),
            categories=dict(data.get("categories") or {}),
            category_scores=dict(data.get("category_scores") or {}),
        )


@dataclass
class Moderation:
    """Response of ``POST /moderations``."""

    id: str
    model: str = ""
    results: list[ModerationResult] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Moderation":
        """Create from API response dict."""
        return cls(
            id=data.get("id", ""),
            model=data.get("model", ""),
            results=[ModerationResult.from_dict(r) for r in data.get("results") or []],
        )


@dataclass
class ModerationParams:
    """Parameters for ``POST /moderations``."""

    input: Any
    model: str = omitempty("")
