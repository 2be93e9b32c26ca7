from types import SimpleNamespace

from models.serialization import decode_correct_options, decode_options, question_columns, question_from_row
from schemas.generation import QuizQuestionItem


def test_columns_round_trip_through_json_text():
    item = QuizQuestionItem(question="Q", options=["é", "b", "c", "d"], correct_options=[1, 3], explanation="E")
    cols = question_columns(item)
    assert cols["options"] == '["é", "b", "c", "d"]'
    assert cols["correct_options"] == "[1, 3]"
    assert question_from_row(SimpleNamespace(**cols)) == item


def test_legacy_list_values_are_accepted():
    assert decode_options(["a", "b", "c", "d"]) == ["a", "b", "c", "d"]
    assert decode_correct_options([2]) == [2]


def test_malformed_text_degrades_to_defaults():
    assert decode_options("not json") == ["Option A", "Option B", "Option C", "Option D"]
    assert decode_correct_options("[") == [0]
    assert decode_correct_options(None) == [0]
