import json
import logging

import pytest

import config
import fallback
import guard
import search


def test_typo_corrected_query_searches_english_dataset(dataset_loader, stub_completion_cls):
    completion = stub_completion_cls("transport")
    response = search.run_search("trasnport", completion, dataset_loader=dataset_loader)
    payload = response.to_payload()

    assert payload["corrected_query"] == "transport"
    assert payload["query"] == "trasnport"
    assert payload["total_hasil"] >= 1
    assert {card["nace_child"]["code"] for card in payload["hasil_pencarian"]} == {"49.4", "52.1"}
    assert payload["penjelasan"].startswith(
        'Kami mendeteksi kemungkinan typo pada pencarian Anda. Pencarian "trasnport" telah dikoreksi menjadi "transport".\n\n'
    )
    assert "Ditemukan 2 kategori scope" in payload["penjelasan"]
    assert payload["saran"] == search.DIRECT_SUGGESTION
    assert len(completion.calls) == 1


def test_indonesian_query_uses_indonesian_dataset(dataset_loader, stub_completion_cls):
    response = search.run_search("pertanian", stub_completion_cls("pertanian"), dataset_loader=dataset_loader)
    payload = response.to_payload()

    assert "corrected_query" not in payload
    assert payload["hasil_pencarian"]
    for card in payload["hasil_pencarian"]:
        assert card["iaf_code"] == "Pertanian, Kehutanan, dan Perikanan (01)"
        assert card["standar"] == "ISO 9001:2015"


def test_exact_title_round_trip_stays_deterministic(dataset_loader, stub_completion_cls):
    completion = stub_completion_cls("Raising of poultry")
    response = search.run_search("Raising of poultry", completion, dataset_loader=dataset_loader)

    first = response.results[0]
    assert first.nace_child.code == "01.4"
    assert first.nace_child_details[0].code == "01.47"
    assert len(completion.calls) == 1


def test_cards_are_ordered_by_relevance(dataset_loader, stub_completion_cls):
    completion = stub_completion_cls("")
    response = search.run_search("metal doors", completion, dataset_loader=dataset_loader)
    scores = [card.relevance_score for card in response.results]
    assert scores == sorted(scores, reverse=True)


@pytest.mark.parametrize("query", ["", "   "])
def test_blank_query_falls_back_to_ai_and_degrades(query, dataset_loader, stub_completion_cls):
    completion = stub_completion_cls("", "Maaf, tidak ada hasil.")
    response = search.run_search(query, completion, dataset_loader=dataset_loader)
    payload = response.to_payload()

    assert payload["total_hasil"] == 0
    assert payload["hasil_pencarian"] == []
    assert payload["penjelasan"] == guard.MALFORMED_EXPLANATION
    assert payload["saran"] == guard.MALFORMED_SUGGESTION
    assert payload["raw_ai_response"] == "Maaf, tidak ada hasil."
    assert completion.calls[1]["max_output_tokens"] == 8192


def test_ai_fallback_results_are_composed(dataset_loader, stub_completion_cls):
    ai_answer = {
        "hasil_pencarian": [
            {
                "scope_key": "scope_14001_2015",
                "iaf_code": "Basic metals (17)",
                "nace_code": "25",
                "nace_child_code": "25.1",
                "nace_child_detail_code": "25.12",
                "relevance_score": 70,
            }
        ],
        "penjelasan": "Rolling door termasuk pintu logam.",
        "saran": "Gunakan kode 25.12.",
    }
    completion = stub_completion_cls("zeppelin hangar", json.dumps(ai_answer))
    response = search.run_search("zepelin hangar", completion, dataset_loader=dataset_loader)
    payload = response.to_payload()

    assert payload["corrected_query"] == "zeppelin hangar"
    assert payload["total_hasil"] == 1
    assert [d["code"] for d in payload["hasil_pencarian"][0]["nace_child_details"]] == ["25.12", "25.11"]
    assert payload["penjelasan"].endswith("Rolling door termasuk pintu logam.")
    assert payload["penjelasan"].startswith("Kami mendeteksi kemungkinan typo")
    assert payload["saran"] == "Gunakan kode 25.12."
    assert "raw_ai_response" not in payload
    assert 'Pencarian user: "zeppelin hangar"' in completion.calls[1]["prompt"]


def test_empty_ai_answer_raises_service_error(dataset_loader, stub_completion_cls):
    completion = stub_completion_cls("zeppelin", "")
    with pytest.raises(fallback.AIServiceError):
        search.run_search("zeppelin", completion, dataset_loader=dataset_loader)


def test_typo_correction_can_be_disabled(monkeypatch, dataset_loader, stub_completion_cls):
    monkeypatch.setenv("TYPO_CORRECTION_ENABLED", "false")
    config.clear_caches()

    completion = stub_completion_cls()
    response = search.run_search("freight", completion, dataset_loader=dataset_loader)

    assert response.total >= 1
    assert completion.calls == []


def test_direct_search_logs_once(caplog, dataset_loader, stub_completion_cls):
    caplog.set_level(logging.DEBUG)
    search.run_search("freight", stub_completion_cls("freight"), dataset_loader=dataset_loader)

    events = [record.getMessage() for record in caplog.records]
    assert events.count("direct_search_completed") == 1
    assert not [event for event in events if event.startswith("direct_search_") and event != "direct_search_completed"]
