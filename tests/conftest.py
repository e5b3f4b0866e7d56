import json
import os
import sys
from typing import Generator, List, Union

import boto3
import pytest
from moto import mock_aws

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(PROJECT_ROOT, "src")
DATA_ROOT = os.path.join(PROJECT_ROOT, "data")

if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

import config  # noqa: E402
import scope_store  # noqa: E402
from schemas import parse_scope_document  # noqa: E402
from scope_store import Language  # noqa: E402


REQUIRED_ENV = {
    "APP_ENV": "test",
    "AWS_REGION": "us-east-1",
    "AWS_ACCESS_KEY_ID": "testing",
    "AWS_SECRET_ACCESS_KEY": "testing",
    "AWS_SESSION_TOKEN": "testing",
    "BEDROCK_MODEL_ID": "anthropic.claude-3-haiku-20240307-v1:0",
    "SCOPE_DATA_EN_PATH": os.path.join(DATA_ROOT, "scope_en.json"),
    "SCOPE_DATA_ID_PATH": os.path.join(DATA_ROOT, "scope_id.json"),
}

OPTIONAL_ENV = (
    "BEDROCK_GUARDRAIL_ID",
    "BEDROCK_GUARDRAIL_VER",
    "SCOPE_DATA_EN_S3_URI",
    "SCOPE_DATA_ID_S3_URI",
    "TYPO_CORRECTION_ENABLED",
)


@pytest.fixture(autouse=True)
def _env_vars(monkeypatch) -> Generator[None, None, None]:
    for key, value in REQUIRED_ENV.items():
        monkeypatch.setenv(key, value)
    for key in OPTIONAL_ENV:
        monkeypatch.delenv(key, raising=False)

    config.clear_caches()
    scope_store.clear_caches()
    yield
    config.clear_caches()
    scope_store.clear_caches()


@pytest.fixture
def aws_mock() -> Generator[None, None, None]:
    with mock_aws():
        config.clear_caches()
        yield
        config.clear_caches()


@pytest.fixture
def s3_bucket(aws_mock):
    session = boto3.session.Session(region_name=REQUIRED_ENV["AWS_REGION"])
    s3 = session.client("s3")
    s3.create_bucket(Bucket="scope-data")
    return s3


def _load_dataset(filename: str):
    with open(os.path.join(DATA_ROOT, filename), encoding="utf-8") as handle:
        return parse_scope_document(json.load(handle))


@pytest.fixture
def english_dataset():
    return _load_dataset("scope_en.json")


@pytest.fixture
def indonesian_dataset():
    return _load_dataset("scope_id.json")


@pytest.fixture
def dataset_loader(english_dataset, indonesian_dataset):
    datasets = {Language.ENGLISH: english_dataset, Language.INDONESIAN: indonesian_dataset}
    return lambda language: datasets[language]


class StubCompletion:
    """Text completion double returning queued answers and recording prompts."""

    def __init__(self, *responses: Union[str, Exception]):
        self.responses: List[Union[str, Exception]] = list(responses)
        self.calls: List[dict] = []

    def complete(self, prompt: str, *, max_output_tokens: int) -> str:
        self.calls.append({"prompt": prompt, "max_output_tokens": max_output_tokens})
        if not self.responses:
            raise AssertionError("Unexpected completion request")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def stub_completion_cls():
    return StubCompletion
