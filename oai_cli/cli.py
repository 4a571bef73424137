"""
OAI CLI - Opinionated command-line interface.

This layer provides the user-facing CLI commands, using the SDK layer
for all operations. It handles:
- Argument parsing
- TTY detection for human vs machine output
- Pretty formatting for human output
- JSON output for piping/automation
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from typing import Any

from dotenv import load_dotenv

from oai_cli.core.client import CLIError
from oai_cli.core.types import (
    IMAGE_FORMATS,
    IMAGE_SIZES,
    CompletionParams,
    EditParams,
    EmbeddingParams,
    FileParams,
    FineTuneParams,
    ImageEditParams,
    ImageGenerationParams,
    ImageVariationParams,
    ModerationParams,
)
from oai_cli.sdk import OpenAIClient

# =============================================================================
# Output Helpers
# =============================================================================


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (LLM/machine)."""
    return sys.stdout.isatty()


def json_output(data: Any, pretty: bool = False) -> None:
    """Print JSON output."""
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(data, indent=indent, default=str))


def error_output(error: CLIError) -> None:
    """Print error and exit."""
    json_output(error.to_dict())
    sys.exit(1)


def success_output(data: Any) -> None:
    """Print success output."""
    json_output(data)


def table_output(
    headers: list[str],
    rows: list[list[str]],
    widths: list[int],
) -> None:
    """Print a formatted table for human output."""
    # Header
    header_line = "  ".join(h.ljust(w) for h, w in zip(headers, widths))
    print(header_line)
    print("-" * len(header_line))

    # Rows
    for row in rows:
        print("  ".join(str(v)[:w].ljust(w) for v, w in zip(row, widths)))


# =============================================================================
# CLI Commands - Models
# =============================================================================


def cmd_models_list(client: OpenAIClient, _args: argparse.Namespace) -> None:
    """List available models."""
    try:
        models = client.models.list()

        if is_tty():
            if not models:
                print("No models found.")
                return

            table_output(
                ["ID", "Owned By", "Root"],
                [[m.id, m.owned_by, m.root] for m in models],
                [40, 24, 30],
            )
        else:
            success_output({"data": [{"id": m.id, "owned_by": m.owned_by, "created": m.created} for m in models]})
    except CLIError as e:
        error_output(e)


def cmd_models_get(client: OpenAIClient, args: argparse.Namespace) -> None:
    """Get a model by ID."""
    try:
        success_output(asdict(client.models.get(args.model_id)))
    except CLIError as e:
        error_output(e)


def cmd_models_delete(client: OpenAIClient, args: argparse.Namespace) -> None:
    """Delete a fine-tuned model."""
    try:
        result = client.models.delete(args.model_id)
        success_output({"success": result.deleted, "id": result.id})
    except CLIError as e:
        error_output(e)


# =============================================================================
# CLI Commands - Files
# =============================================================================


def cmd_files_list(client: OpenAIClient, _args: argparse.Namespace) -> None:
    """List uploaded files."""
    try:
        files = client.files.list()

        if is_tty():
            if not files:
                print("No files found.")
                return

            table_output(
                ["ID", "Filename", "Purpose", "Bytes"],
                [[f.id, f.filename, f.purpose, str(f.bytes)] for f in files],
                [30, 40, 16, 10],
            )
        else:
            success_output({"data": [asdict(f) for f in files]})
    except CLIError as e:
        error_output(e)


def cmd_files_get(client: OpenAIClient, args: argparse.Namespace) -> None:
    """Get file metadata."""
    try:
        success_output(asdict(client.files.get(args.file_id)))
    except CLIError as e:
        error_output(e)


def cmd_files_upload(client: OpenAIClient, args: argparse.Namespace) -> None:
    """Upload a local file."""
    try:
        uploaded = client.files.create(FileParams(file=args.path, purpose=args.purpose))
        success_output(
            {
                "id": uploaded.id,
                "filename": uploaded.filename,
                "purpose": uploaded.purpose,
                "message": "File uploaded",
            }
        )
    except CLIError as e:
        error_output(e)


def cmd_files_delete(client: OpenAIClient, args: argparse.Namespace) -> None:
    """Delete a file."""
    try:
        result = client.files.delete(args.file_id)
        success_output({"success": result.deleted, "message": f"File {args.file_id} deleted"})
    except CLIError as e:
        error_output(e)


def cmd_files_download(client: OpenAIClient, args: argparse.Namespace) -> None:
    """Download file content to a path or stdout."""
    try:
        if args.output in (None, "-"):
            client.files.download(args.file_id, sys.stdout.buffer)
            sys.stdout.buffer.flush()
            return

        with open(args.output, "wb") as sink:
            client.files.download(args.file_id, sink)
        print(f"Saved {args.file_id} to {args.output}", file=sys.stderr)
    except CLIError as e:
        error_output(e)


# =============================================================================
# CLI Commands - Fine-tunes
# =============================================================================


def cmd_fine_tunes_list(client: OpenAIClient, _args: argparse.Namespace) -> None:
    """List fine-tuning jobs."""
    try:
        jobs = client.fine_tunes.list()

        if is_tty():
            if not jobs:
                print("No fine-tunes found.")
                return

            table_output(
                ["ID", "Model", "Status", "Fine-tuned Model"],
                [[ft.id, ft.model, ft.status, ft.fine_tuned_model or ""] for ft in jobs],
                [30, 12, 10, 40],
            )
        else:
            success_output(
                {
                    "data": [
                        {
                            "id": ft.id,
                            "model": ft.model,
                            "status": ft.status,
                            "fine_tuned_model": ft.fine_tuned_model,
                        }
                        for ft in jobs
                    ]
                }
            )
    except CLIError as e:
        error_output(e)


def cmd_fine_tunes_get(client: OpenAIClient, args: argparse.Namespace) -> None:
    """Get a fine-tuning job."""
    try:
        success_output(asdict(client.fine_tunes.get(args.fine_tune_id)))
    except CLIError as e:
        error_output(e)


def cmd_fine_tunes_create(client: OpenAIClient, args: argparse.Namespace) -> None:
    """Start a fine-tuning job."""
    try:
        job = client.fine_tunes.create(
            FineTuneParams(
                training_file=args.training_file,
                validation_file=args.validation_file or "",
                model=args.model or "",
                n_epochs=args.n_epochs or 0,
                suffix=args.suffix or "",
            )
        )
        success_output(
            {
                "id": job.id,
                "status": job.status,
                "message": "Fine-tune started. Use 'oai fine_tunes events <id>' to follow progress.",
            }
        )
    except CLIError as e:
        error_output(e)


def cmd_fine_tunes_cancel(client: OpenAIClient, args: argparse.Namespace) -> None:
    """Cancel a fine-tuning job."""
    try:
        job = client.fine_tunes.cancel(args.fine_tune_id)
        success_output({"id": job.id, "status": job.status})
    except CLIError as e:
        error_output(e)


def cmd_fine_tunes_events(client: OpenAIClient, args: argparse.Namespace) -> None:
    """List events of a fine-tuning job."""
    try:
        events = client.fine_tunes.events(args.fine_tune_id)

        if is_tty():
            for event in events:
                print(f"[{event.created_at}] {event.level}: {event.message}")
        else:
            success_output({"data": [asdict(e) for e in events]})
    except CLIError as e:
        error_output(e)


# =============================================================================
# CLI Commands - Generation
# =============================================================================


def cmd_completions_create(client: OpenAIClient, args: argparse.Namespace) -> None:
    """Complete a prompt."""
    try:
        completion = client.completions.create(
            CompletionParams(
                model=args.model,
                prompt=args.prompt,
                max_tokens=args.max_tokens or 0,
                temperature=args.temperature or 0.0,
            )
        )
        if is_tty():
            for choice in completion.choices:
                print(choice.text.strip())
        else:
            success_output(asdict(completion))
    except CLIError as e:
        error_output(e)


def cmd_edits_create(client: OpenAIClient, args: argparse.Namespace) -> None:
    """Edit input text following an instruction."""
    try:
        edit = client.edits.create(
            EditParams(model=args.model, instruction=args.instruction, input=args.input or "")
        )
        if is_tty():
            for choice in edit.choices:
                print(choice.text)
        else:
            success_output(asdict(edit))
    except CLIError as e:
        error_output(e)


def cmd_embeddings_create(client: OpenAIClient, args: argparse.Namespace) -> None:
    """Embed one or more inputs."""
    try:
        inputs = args.input[0] if len(args.input) == 1 else args.input
        result = client.embeddings.create(EmbeddingParams(model=args.model, input=inputs))
        success_output(asdict(result))
    except CLIError as e:
        error_output(e)


def cmd_moderations_create(client: OpenAIClient, args: argparse.Namespace) -> None:
    """Classify input against the moderation categories."""
    try:
        moderation = client.moderations.create(ModerationParams(input=args.input, model=args.model or ""))
        if is_tty():
            for result in moderation.results:
                flagged = ", ".join(result.flagged_categories) or "none"
                print(f"Flagged: {result.flagged} (categories: {flagged})")
        else:
            success_output(asdict(moderation))
    except CLIError as e:
        error_output(e)


# =============================================================================
# CLI Commands - Images
# =============================================================================


def _images_output(images: list) -> None:
    success_output({"data": [{k: v for k, v in asdict(i).items() if v} for i in images]})


def cmd_images_create(client: OpenAIClient, args: argparse.Namespace) -> None:
    """Generate images from a prompt."""
    try:
        images = client.images.create(
            ImageGenerationParams(
                prompt=args.prompt,
                n=args.n or 0,
                size=args.size or "",
                response_format=args.format or "",
            )
        )
        _images_output(images)
    except CLIError as e:
        error_output(e)


def cmd_images_edit(client: OpenAIClient, args: argparse.Namespace) -> None:
    """Edit a local image."""
    try:
        images = client.images.edit(
            ImageEditParams(
                image=args.image,
                prompt=args.prompt,
                mask=args.mask or "",
                n=args.n or 0,
                size=args.size or "",
                response_format=args.format or "",
            )
        )
        _images_output(images)
    except CLIError as e:
        error_output(e)


def cmd_images_variation(client: OpenAIClient, args: argparse.Namespace) -> None:
    """Generate variations of a local image."""
    try:
        images = client.images.create_variation(
            ImageVariationParams(
                image=args.image,
                n=args.n or 0,
                size=args.size or "",
                response_format=args.format or "",
            )
        )
        _images_output(images)
    except CLIError as e:
        error_output(e)


# =============================================================================
# Main CLI
# =============================================================================


def _add_image_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-n", type=int, help="Number of images")
    parser.add_argument("--size", "-s", choices=IMAGE_SIZES, help="Image size")
    parser.add_argument("--format", "-f", choices=IMAGE_FORMATS, help="Response format")


def create_parser() -> argparse.ArgumentParser:  # noqa: PLR0915
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description="OAI CLI - Command-line interface for the OpenAI API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Output Modes:
  TTY (human):  Pretty tables and plain text
  Pipe (LLM):   Full JSON

Examples:
  oai models list
  oai files upload train.jsonl --purpose fine-tune
  oai fine_tunes create --training-file file-abc123 --model curie
  oai files download file-abc123 -o results.csv
  oai moderations create "some text" | jq '.results[0].flagged'
""",
    )
    parser.add_argument("--org", dest="organization", help="Organization ID (overrides OPENAI_ORGANIZATION)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log requests to stderr")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ========== Models ==========
    models = subparsers.add_parser("models", help="List and manage models")
    models.set_defaults(func=lambda _c, _a: models.print_help())
    models_sub = models.add_subparsers(dest="subcommand")

    m_list = models_sub.add_parser("list", help="List models")
    m_list.set_defaults(func=cmd_models_list)

    m_get = models_sub.add_parser("get", help="Get model details")
    m_get.add_argument("model_id", help="Model ID")
    m_get.set_defaults(func=cmd_models_get)

    m_delete = models_sub.add_parser("delete", help="Delete a fine-tuned model")
    m_delete.add_argument("model_id", help="Model ID")
    m_delete.set_defaults(func=cmd_models_delete)

    # ========== Files ==========
    files = subparsers.add_parser("files", help="Upload and manage files")
    files.set_defaults(func=lambda _c, _a: files.print_help())
    files_sub = files.add_subparsers(dest="subcommand")

    f_list = files_sub.add_parser("list", help="List files")
    f_list.set_defaults(func=cmd_files_list)

    f_get = files_sub.add_parser("get", help="Get file metadata")
    f_get.add_argument("file_id", help="File ID")
    f_get.set_defaults(func=cmd_files_get)

    f_upload = files_sub.add_parser("upload", help="Upload a local file")
    f_upload.add_argument("path", help="Path of the file to upload")
    f_upload.add_argument("--purpose", "-p", default="fine-tune", help="Intended use of the file")
    f_upload.set_defaults(func=cmd_files_upload)

    f_delete = files_sub.add_parser("delete", help="Delete a file")
    f_delete.add_argument("file_id", help="File ID")
    f_delete.set_defaults(func=cmd_files_delete)

    f_download = files_sub.add_parser("download", help="Download file content")
    f_download.add_argument("file_id", help="File ID")
    f_download.add_argument("--output", "-o", help="Destination path (default: stdout)")
    f_download.set_defaults(func=cmd_files_download)

    # ========== Fine-tunes ==========
    fine_tunes = subparsers.add_parser("fine_tunes", help="Manage fine-tuning jobs")
    fine_tunes.set_defaults(func=lambda _c, _a: fine_tunes.print_help())
    ft_sub = fine_tunes.add_subparsers(dest="subcommand")

    ft_list = ft_sub.add_parser("list", help="List fine-tunes")
    ft_list.set_defaults(func=cmd_fine_tunes_list)

    ft_get = ft_sub.add_parser("get", help="Get fine-tune details")
    ft_get.add_argument("fine_tune_id", help="Fine-tune ID")
    ft_get.set_defaults(func=cmd_fine_tunes_get)

    ft_create = ft_sub.add_parser("create", help="Start a fine-tune")
    ft_create.add_argument("--training-file", "-t", required=True, help="Uploaded training file ID")
    ft_create.add_argument("--validation-file", help="Uploaded validation file ID")
    ft_create.add_argument("--model", "-m", help="Base model")
    ft_create.add_argument("--n-epochs", type=int, help="Number of epochs")
    ft_create.add_argument("--suffix", help="Suffix for the fine-tuned model name")
    ft_create.set_defaults(func=cmd_fine_tunes_create)

    ft_cancel = ft_sub.add_parser("cancel", help="Cancel a fine-tune")
    ft_cancel.add_argument("fine_tune_id", help="Fine-tune ID")
    ft_cancel.set_defaults(func=cmd_fine_tunes_cancel)

    ft_events = ft_sub.add_parser("events", help="List fine-tune events")
    ft_events.add_argument("fine_tune_id", help="Fine-tune ID")
    ft_events.set_defaults(func=cmd_fine_tunes_events)

    # ========== Completions ==========
    completions = subparsers.add_parser("completions", help="Text completions")
    completions.set_defaults(func=lambda _c, _a: completions.print_help())
    c_sub = completions.add_subparsers(dest="subcommand")

    c_create = c_sub.add_parser("create", help="Complete a prompt")
    c_create.add_argument("prompt", help="Prompt text")
    c_create.add_argument("--model", "-m", default="text-davinci-003", help="Model ID")
    c_create.add_argument("--max-tokens", type=int, help="Maximum tokens to generate")
    c_create.add_argument("--temperature", type=float, help="Sampling temperature")
    c_create.set_defaults(func=cmd_completions_create)

    # ========== Edits ==========
    edits = subparsers.add_parser("edits", help="Instruction-driven edits")
    edits.set_defaults(func=lambda _c, _a: edits.print_help())
    ed_sub = edits.add_subparsers(dest="subcommand")

    ed_create = ed_sub.add_parser("create", help="Edit text")
    ed_create.add_argument("instruction", help="How to edit the input")
    ed_create.add_argument("--input", "-i", help="Text to edit")
    ed_create.add_argument("--model", "-m", default="text-davinci-edit-001", help="Model ID")
    ed_create.set_defaults(func=cmd_edits_create)

    # ========== Embeddings ==========
    embeddings = subparsers.add_parser("embeddings", help="Vector embeddings")
    embeddings.set_defaults(func=lambda _c, _a: embeddings.print_help())
    em_sub = embeddings.add_subparsers(dest="subcommand")

    em_create = em_sub.add_parser("create", help="Embed text")
    em_create.add_argument("input", nargs="+", help="Text(s) to embed")
    em_create.add_argument("--model", "-m", default="text-embedding-ada-002", help="Model ID")
    em_create.set_defaults(func=cmd_embeddings_create)

    # ========== Images ==========
    images = subparsers.add_parser("images", help="Generate and edit images")
    images.set_defaults(func=lambda _c, _a: images.print_help())
    img_sub = images.add_subparsers(dest="subcommand")

    i_create = img_sub.add_parser("create", help="Generate images from a prompt")
    i_create.add_argument("prompt", help="Prompt text")
    _add_image_options(i_create)
    i_create.set_defaults(func=cmd_images_create)

    i_edit = img_sub.add_parser("edit", help="Edit a local image")
    i_edit.add_argument("image", help="Path of the PNG to edit")
    i_edit.add_argument("prompt", help="Description of the edit")
    i_edit.add_argument("--mask", help="Path of the mask PNG")
    _add_image_options(i_edit)
    i_edit.set_defaults(func=cmd_images_edit)

    i_variation = img_sub.add_parser("variation", help="Generate variations of a local image")
    i_variation.add_argument("image", help="Path of the source PNG")
    _add_image_options(i_variation)
    i_variation.set_defaults(func=cmd_images_variation)

    # ========== Moderations ==========
    moderations = subparsers.add_parser("moderations", help="Content moderation")
    moderations.set_defaults(func=lambda _c, _a: moderations.print_help())
    mod_sub = moderations.add_subparsers(dest="subcommand")

    mod_create = mod_sub.add_parser("create", help="Moderate text")
    mod_create.add_argument("input", help="Text to classify")
    mod_create.add_argument("--model", "-m", help="Moderation model")
    mod_create.set_defaults(func=cmd_moderations_create)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    load_dotenv()
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )

    try:
        client = OpenAIClient(organization_id=args.organization)
        # Run command (all subparsers have default funcs that print help)
        args.func(client, args)
    except CLIError as e:
        error_output(e)
    except (OSError, ValueError) as e:
        # URLError, OSError and JSONDecodeError surface here unchanged in kind
        error_output(CLIError(str(e), details={"type": type(e).__name__}))


if __name__ == "__main__":
    main()
