"""
OpenAI SDK - High-level client with one sub-API per resource family.

This layer provides a clean, typed interface over the core APIClient:
each operation owns its endpoint path and response shape, nothing else.
"""

import builtins
import logging
import os
from typing import BinaryIO

from oai_cli.core.client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, APIClient, Config, Opener, ValidationError
from oai_cli.core.types import (
    Completion,
    CompletionParams,
    Deleted,
    Edit,
    EditParams,
    EmbeddingParams,
    EmbeddingResult,
    File,
    FileParams,
    FineTune,
    FineTuneEvent,
    FineTuneParams,
    Image,
    ImageEditParams,
    ImageGenerationParams,
    ImageVariationParams,
    Model,
    Moderation,
    ModerationParams,
)

logger = logging.getLogger(__name__)

MODELS_ENDPOINT = "/models"
COMPLETIONS_ENDPOINT = "/completions"
EDITS_ENDPOINT = "/edits"
IMAGE_GENERATIONS_ENDPOINT = "/images/generations"
IMAGE_EDITS_ENDPOINT = "/images/edits"
IMAGE_VARIATIONS_ENDPOINT = "/images/variations"
EMBEDDINGS_ENDPOINT = "/embeddings"
FILES_ENDPOINT = "/files"
FINE_TUNES_ENDPOINT = "/fine-tunes"
MODERATIONS_ENDPOINT = "/moderations"


def _timeout_from_env() -> float | None:
    raw = os.environ.get("OPENAI_REQUEST_TIMEOUT")
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(f"OPENAI_REQUEST_TIMEOUT must be a number of seconds, got {raw!r}")


class OpenAIClient:
    """
    High-level OpenAI API client with typed methods.

    Example:
        client = OpenAIClient()

        models = client.models.list()
        upload = client.files.create(FileParams(file="train.jsonl", purpose="fine-tune"))
        job = client.fine_tunes.create(FineTuneParams(training_file=upload.id))

        with open("result.csv", "wb") as sink:
            client.files.download(job.result_files[0].id, sink)

    """

    def __init__(
        self,
        api_key: str | None = None,
        organization_id: str | None = None,
        timeout: float | None = None,
        base_url: str | None = None,
        opener: Opener | None = None,
    ):
        """
        Initialize the OpenAI client.

        Args:
            api_key: API key (or OPENAI_API_KEY env var)
            organization_id: Organization ID (or OPENAI_ORGANIZATION env var)
            timeout: Request timeout in seconds (or OPENAI_REQUEST_TIMEOUT env var)
            base_url: API base URL (or OPENAI_BASE_URL env var)
            opener: Transport override, mainly for tests

        """
        config = Config(
            api_key=api_key or os.environ.get("OPENAI_API_KEY", ""),
            organization_id=organization_id or os.environ.get("OPENAI_ORGANIZATION", ""),
            request_timeout=timeout or _timeout_from_env() or DEFAULT_TIMEOUT,
            base_url=base_url or os.environ.get("OPENAI_BASE_URL", DEFAULT_BASE_URL),
        )
        self._client = APIClient(config, opener=opener)

        # Sub-clients for each resource family
        self.models = ModelOperations(self._client)
        self.completions = CompletionOperations(self._client)
        self.edits = EditOperations(self._client)
        self.images = ImageOperations(self._client)
        self.embeddings = EmbeddingOperations(self._client)
        self.files = FileOperations(self._client)
        self.fine_tunes = FineTuneOperations(self._client)
        self.moderations = ModerationOperations(self._client)

    @property
    def config(self) -> Config:
        """The shared, read-only client configuration."""
        return self._client.config


# =============================================================================
# Model Operations
# =============================================================================


class ModelOperations:
    """Operations for listing and deleting models."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(self) -> builtins.list[Model]:
        """
        List the models available to the organization.

        Returns:
            List of Models

        """
        logger.debug("GET %s", MODELS_ENDPOINT)
        result = self._client.get(MODELS_ENDPOINT)
        return [Model.from_dict(m) for m in result.get("data") or []]

    def get(self, model_id: str) -> Model:
        """
        Get a model by ID.

        Args:
            model_id: The model ID

        Returns:
            Model details, including permissions

        """
        logger.debug("GET %s/%s", MODELS_ENDPOINT, model_id)
        return Model.from_dict(self._client.get(f"{MODELS_ENDPOINT}/{model_id}"))

    def delete(self, model_id: str) -> Deleted:
        """
        Delete a fine-tuned model owned by the organization.

        Args:
            model_id: The model ID

        Returns:
            Deletion acknowledgement

        """
        logger.debug("DELETE %s/%s", MODELS_ENDPOINT, model_id)
        return Deleted.from_dict(self._client.delete(f"{MODELS_ENDPOINT}/{model_id}"))


# =============================================================================
# Generation Operations
# =============================================================================


class CompletionOperations:
    """Text completions."""

    def __init__(self, client: APIClient):
        self._client = client

    def create(self, params: CompletionParams) -> Completion:
        """Create a completion for the given prompt."""
        logger.debug("POST %s model=%s", COMPLETIONS_ENDPOINT, params.model)
        return Completion.from_dict(self._client.post(COMPLETIONS_ENDPOINT, params))


class EditOperations:
    """Instruction-driven text edits."""

    def __init__(self, client: APIClient):
        self._client = client

    def create(self, params: EditParams) -> Edit:
        """Create an edited version of the input following the instruction."""
        logger.debug("POST %s model=%s", EDITS_ENDPOINT, params.model)
        return Edit.from_dict(self._client.post(EDITS_ENDPOINT, params))


class EmbeddingOperations:
    """Vector embeddings."""

    def __init__(self, client: APIClient):
        self._client = client

    def create(self, params: EmbeddingParams) -> EmbeddingResult:
        """Embed one input or a batch of inputs."""
        logger.debug("POST %s model=%s", EMBEDDINGS_ENDPOINT, params.model)
        return EmbeddingResult.from_dict(self._client.post(EMBEDDINGS_ENDPOINT, params))


class ModerationOperations:
    """Content moderation."""

    def __init__(self, client: APIClient):
        self._client = client

    def create(self, params: ModerationParams) -> Moderation:
        """Classify the input against the moderation categories."""
        logger.debug("POST %s", MODERATIONS_ENDPOINT)
        return Moderation.from_dict(self._client.post(MODERATIONS_ENDPOINT, params))


# =============================================================================
# Image Operations
# =============================================================================


class ImageOperations:
    """Image generation, editing and variations."""

    def __init__(self, client: APIClient):
        self._client = client

    def create(self, params: ImageGenerationParams) -> builtins.list[Image]:
        """
        Generate images from a prompt.

        Args:
            params: Prompt, count, size and response format

        Returns:
            List of generated Images

        """
        logger.debug("POST %s", IMAGE_GENERATIONS_ENDPOINT)
        result = self._client.post(IMAGE_GENERATIONS_ENDPOINT, params)
        return [Image.from_dict(i) for i in result.get("data") or []]

    def edit(self, params: ImageEditParams) -> builtins.list[Image]:
        """
        Edit a local image (optionally through a mask) following a prompt.

        Args:
            params: Paths of the image and mask plus generation options

        Returns:
            List of edited Images

        Raises:
            OSError: If the image or mask cannot be read

        """
        return self._from_form_data(IMAGE_EDITS_ENDPOINT, params)

    def create_variation(self, params: ImageVariationParams) -> builtins.list[Image]:
        """Generate variations of a local image."""
        return self._from_form_data(IMAGE_VARIATIONS_ENDPOINT, params)

    def _from_form_data(self, path: str, params: ImageEditParams | ImageVariationParams) -> builtins.list[Image]:
        logger.debug("POST %s (multipart)", path)
        result = self._client.post_multipart(path, params)
        return [Image.from_dict(i) for i in result.get("data") or []]


# =============================================================================
# File Operations
# =============================================================================


class FileOperations:
    """Operations for uploading, inspecting and downloading files."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(self) -> builtins.list[File]:
        """
        List files uploaded by the organization.

        Returns:
            List of Files

        """
        logger.debug("GET %s", FILES_ENDPOINT)
        result = self._client.get(FILES_ENDPOINT)
        return [File.from_dict(f) for f in result.get("data") or []]

    def get(self, file_id: str) -> File:
        """
        Get file metadata by ID.

        Args:
            file_id: The file ID

        Returns:
            File metadata

        """
        logger.debug("GET %s/%s", FILES_ENDPOINT, file_id)
        return File.from_dict(self._client.get(f"{FILES_ENDPOINT}/{file_id}"))

    def create(self, params: FileParams) -> File:
        """
        Upload a local file.

        Args:
            params: Local path and purpose (e.g. "fine-tune")

        Returns:
            The uploaded File

        Raises:
            OSError: If the local file cannot be read; nothing is sent

        """
        logger.debug("POST %s (multipart) purpose=%s", FILES_ENDPOINT, params.purpose)
        return File.from_dict(self._client.post_multipart(FILES_ENDPOINT, params))

    def delete(self, file_id: str) -> Deleted:
        """
        Delete a file.

        Args:
            file_id: The file ID

        Returns:
            Deletion acknowledgement

        """
        logger.debug("DELETE %s/%s", FILES_ENDPOINT, file_id)
        return Deleted.from_dict(self._client.delete(f"{FILES_ENDPOINT}/{file_id}"))

    def download(self, file_id: str, sink: BinaryIO) -> None:
        """
        Stream the content of a file into ``sink``.

        Args:
            file_id: The file ID
            sink: Writable binary stream receiving the bytes

        Raises:
            BadStatusError: If the API does not answer 200 OK

        """
        logger.debug("GET %s/%s/content", FILES_ENDPOINT, file_id)
        self._client.download(f"{FILES_ENDPOINT}/{file_id}/content", sink)


# =============================================================================
# Fine-tune Operations
# =============================================================================


class FineTuneOperations:
    """Operations for managing fine-tuning jobs."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(self) -> builtins.list[FineTune]:
        """List fine-tuning jobs."""
        logger.debug("GET %s", FINE_TUNES_ENDPOINT)
        result = self._client.get(FINE_TUNES_ENDPOINT)
        return [FineTune.from_dict(ft) for ft in result.get("data") or []]

    def get(self, fine_tune_id: str) -> FineTune:
        """Get a fine-tuning job, including its events."""
        logger.debug("GET %s/%s", FINE_TUNES_ENDPOINT, fine_tune_id)
        return FineTune.from_dict(self._client.get(f"{FINE_TUNES_ENDPOINT}/{fine_tune_id}"))

    def create(self, params: FineTuneParams) -> FineTune:
        """
        Start a fine-tuning job.

        Args:
            params: Uploaded training (and validation) file IDs plus hyperparameters

        Returns:
            The created FineTune, usually in "pending" status

        """
        logger.debug("POST %s model=%s", FINE_TUNES_ENDPOINT, params.model or "(default)")
        return FineTune.from_dict(self._client.post(FINE_TUNES_ENDPOINT, params))

    def cancel(self, fine_tune_id: str) -> FineTune:
        """Cancel a running fine-tuning job."""
        logger.debug("POST %s/%s/cancel", FINE_TUNES_ENDPOINT, fine_tune_id)
        return FineTune.from_dict(self._client.post(f"{FINE_TUNES_ENDPOINT}/{fine_tune_id}/cancel"))

    def events(self, fine_tune_id: str) -> builtins.list[FineTuneEvent]:
        """List the events of a fine-tuning job."""
        logger.debug("GET %s/%s/events", FINE_TUNES_ENDPOINT, fine_tune_id)
        result = self._client.get(f"{FINE_TUNES_ENDPOINT}/{fine_tune_id}/events")
        return [FineTuneEvent.from_dict(e) for e in result.get("data") or []]
