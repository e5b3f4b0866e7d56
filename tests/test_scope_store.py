import json

import pytest

import config
import scope_store
from scope_store import Language


def test_loads_local_datasets_per_language():
    english = scope_store.load_scope_data(Language.ENGLISH)
    indonesian = scope_store.load_scope_data(Language.INDONESIAN)

    assert english["scope_9001_2015"].scope[0].iaf_code == "Agriculture, Forestry and Fishing (01)"
    assert indonesian["scope_9001_2015"].scope[0].iaf_code == "Pertanian, Kehutanan, dan Perikanan (01)"


def test_dataset_is_cached():
    assert scope_store.load_scope_data(Language.ENGLISH) is scope_store.load_scope_data(Language.ENGLISH)


def test_loads_dataset_from_s3(monkeypatch, s3_bucket):
    document = {
        "scope_45001_2018": {
            "standar": "ISO 45001:2018",
            "scope": [{"IAF_CODE": "Construction (28)", "NACE_DETAIL_INFORMATION": []}],
        }
    }
    s3_bucket.put_object(Bucket="scope-data", Key="scope/scope_id.json", Body=json.dumps(document).encode("utf-8"))
    monkeypatch.setenv("SCOPE_DATA_ID_S3_URI", "s3://scope-data/scope/scope_id.json")
    config.clear_caches()

    dataset = scope_store.load_scope_data(Language.INDONESIAN)

    assert list(dataset) == ["scope_45001_2018"]
    assert dataset["scope_45001_2018"].standard == "ISO 45001:2018"


def test_missing_s3_object_is_configuration_error(monkeypatch, s3_bucket):
    monkeypatch.setenv("SCOPE_DATA_EN_S3_URI", "s3://scope-data/missing.json")
    config.clear_caches()

    with pytest.raises(config.ConfigurationError):
        scope_store.load_scope_data(Language.ENGLISH)


def test_invalid_local_documents_are_configuration_errors(monkeypatch, tmp_path):
    not_json = tmp_path / "broken.json"
    not_json.write_text("{", encoding="utf-8")
    a_list = tmp_path / "list.json"
    a_list.write_text("[]", encoding="utf-8")

    for path in (not_json, a_list, tmp_path / "absent.json"):
        monkeypatch.setenv("SCOPE_DATA_EN_PATH", str(path))
        config.clear_caches()
        scope_store.clear_caches()
        with pytest.raises(config.ConfigurationError):
            scope_store.load_scope_data(Language.ENGLISH)
