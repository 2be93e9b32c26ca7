from pipeline.prompts import build_prompt
from schemas.generation import ItemKind


def test_flashcard_prompt_embeds_count_and_content():
    prompt = build_prompt(ItemKind.FLASHCARDS, "Mitochondria make ATP.", 7)
    assert "EXACTLY 7 flashcards" in prompt.user_message
    assert "Mitochondria make ATP." in prompt.user_message
    assert '"question"' in prompt.user_message and '"answer"' in prompt.user_message
    assert "no code fences" in prompt.user_message
    assert "educator" in prompt.system_message
    assert "emphasis" not in prompt.user_message


def test_quiz_prompt_states_answer_distribution():
    prompt = build_prompt(ItemKind.QUIZ, "content", 12)
    msg = prompt.user_message
    assert "EXACTLY 12 multiple-choice questions" in msg
    assert "exactly 4 options" in msg
    assert "60%" in msg and "30%" in msg and "10%" in msg
    assert "NEVER write a question with 0 or 4 correct options" in msg
    assert "random positions" in msg
    assert '"correctOptions"' in msg and '"explanation"' in msg


def test_focus_topics_are_included_when_given():
    quiz = build_prompt(ItemKind.QUIZ, "content", 5, focus_topics="Krebs cycle, glycolysis")
    cards = build_prompt(ItemKind.FLASHCARDS, "content", 5, focus_topics="Krebs cycle")
    assert "emphasis on these topics: Krebs cycle, glycolysis" in quiz.user_message
    assert "emphasis on these topics: Krebs cycle" in cards.user_message


def test_blank_focus_topics_are_ignored():
    prompt = build_prompt(ItemKind.QUIZ, "content", 5, focus_topics="   ")
    assert "emphasis" not in prompt.user_message
