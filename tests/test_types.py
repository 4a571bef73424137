"""Tests for parameter flattening and response types."""

import pytest

from oai_cli.core.types import (
    CompletionParams,
    ErrorEnvelope,
    FineTune,
    FineTuneParams,
    Model,
    ModerationResult,
    as_params,
)


def test_as_params_drops_empty_optional_fields():
    params = FineTuneParams(training_file="file-abc", n_epochs=4)
    assert as_params(params) == {"training_file": "file-abc", "n_epochs": 4}


def test_as_params_keeps_required_fields_even_when_empty():
    assert as_params(FineTuneParams(training_file="")) == {"training_file": ""}


def test_as_params_keeps_structured_values():
    params = CompletionParams(model="m", prompt=["a", "b"], stop=["\n"], logit_bias={"50256": -100})
    assert as_params(params) == {
        "model": "m",
        "prompt": ["a", "b"],
        "stop": ["\n"],
        "logit_bias": {"50256": -100},
    }


def test_as_params_copies_mappings():
    source = {"input": "text"}
    flattened = as_params(source)
    assert flattened == source
    assert flattened is not source


def test_as_params_rejects_classes():
    with pytest.raises(TypeError):
        as_params(FineTuneParams)


def test_error_envelope_render_and_from_dict():
    envelope = ErrorEnvelope.from_dict(
        {"error": {"message": "That model does not exist", "type": "invalid_request_error", "code": "model_not_found", "param": {"model": "x"}}}
    )
    assert envelope.code == "model_not_found"
    assert envelope.param == {"model": "x"}
    assert envelope.render() == (
        'Message: That model does not exist | Type: invalid_request_error | Code: model_not_found | Param: {"model": "x"}'
    )


def test_error_envelope_missing_error_key():
    assert ErrorEnvelope.from_dict({}) == ErrorEnvelope()
    assert ErrorEnvelope.from_dict({"error": None}) == ErrorEnvelope()


@pytest.mark.parametrize(
    "body",
    [
        {"error": "boom"},
        {"error": ["m"]},
        {"error": {"message": "m", "code": 42}},
        {"error": {"message": 1}},
        {"error": {"message": "m", "type": {"kind": "x"}}},
    ],
)
def test_error_envelope_rejects_mistyped_fields(body):
    with pytest.raises(ValueError):
        ErrorEnvelope.from_dict(body)


def test_model_keeps_untyped_fields():
    model = Model.from_dict(
        {
            "id": "ada:ft-acme-2023",
            "owned_by": "acme",
            "root": "ada",
            "parent": {"id": "ada"},
            "permission": [{"id": "modelperm-1", "group": ["g1"], "allow_view": True}],
        }
    )
    assert model.parent == {"id": "ada"}
    assert model.permission[0].group == ["g1"]
    assert model.permission[0].allow_view is True


def test_fine_tune_from_dict():
    job = FineTune.from_dict(
        {
            "id": "ft-1",
            "model": "curie",
            "status": "succeeded",
            "hyperparams": {"batch_size": 4, "n_epochs": 4},
            "events": [{"created_at": 1, "level": "info", "message": "Job enqueued"}],
            "training_files": [{"id": "file-1", "filename": "train.jsonl", "purpose": "fine-tune"}],
            "result_files": [],
            "validation_files": [],
        }
    )
    assert job.is_complete
    assert job.hyperparams.batch_size == 4
    assert job.events[0].message == "Job enqueued"
    assert job.training_files[0].filename == "train.jsonl"


def test_moderation_flagged_categories():
    result = ModerationResult.from_dict(
        {"flagged": True, "categories": {"hate": False, "violence": True}, "category_scores": {"violence": 0.9}}
    )
    assert result.flagged_categories == ["violence"]
