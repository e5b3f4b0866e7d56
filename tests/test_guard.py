import pytest

import guard


@pytest.mark.parametrize(
    "raw",
    [
        '{"hasil_pencarian": [], "penjelasan": "x"}',
        '```json\n{"hasil_pencarian": [], "penjelasan": "x"}\n```',
        '```\n{"hasil_pencarian": [], "penjelasan": "x"}\n```',
        '  ```json {"hasil_pencarian": [], "penjelasan": "x"}```  ',
    ],
)
def test_parse_ai_answer_accepts_fenced_and_plain_json(raw):
    assert guard.parse_ai_answer(raw) == {"hasil_pencarian": [], "penjelasan": "x"}


@pytest.mark.parametrize(
    "raw",
    [
        "Maaf, saya tidak menemukan hasil.",
        '{"hasil_pencarian": "none"}',
        '{"penjelasan": "tanpa hasil"}',
        "[1, 2, 3]",
    ],
)
def test_parse_ai_answer_rejects_missing_result_list(raw):
    with pytest.raises(guard.AIResponseMalformed) as excinfo:
        guard.parse_ai_answer(raw)
    assert excinfo.value.raw_text == raw


def test_strip_code_fence_leaves_plain_text_untouched():
    assert guard.strip_code_fence("  plain  ") == "plain"
