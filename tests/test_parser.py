"""
Tests for the markdown parser.
"""

from backend.parser import parse_flashcard_content, parse_flashcard_file, validate_flashcard_file


def test_parse_basic_card():
    content = """
## Question 1
What is spaced repetition?

### Answer
Reviewing material at increasing intervals.

---
"""
    cards = parse_flashcard_content(content)

    assert cards == [
        {
            "front": "What is spaced repetition?",
            "back": "Reviewing material at increasing intervals.",
            "tags": [],
        }
    ]


def test_parse_multiple_cards_with_asterisk_separator():
    content = """
## Capital of France?

### Answer
Paris

***

## Capital of Japan?

### answer
Tokyo

***
"""
    cards = parse_flashcard_content(content)

    assert [card["front"] for card in cards] == ["Capital of France?", "Capital of Japan?"]
    assert [card["back"] for card in cards] == ["Paris", "Tokyo"]


def test_parse_tags_line():
    content = """
## What does SM-2 stand for?

### Answer
SuperMemo 2, an early spaced repetition algorithm.
It adapts intervals with an ease factor.

Tags: memory, algorithms ,

---
"""
    cards = parse_flashcard_content(content)

    assert len(cards) == 1
    assert cards[0]["back"] == (
        "SuperMemo 2, an early spaced repetition algorithm.\n"
        "It adapts intervals with an ease factor."
    )
    assert cards[0]["tags"] == ["memory", "algorithms"]


def test_parse_keeps_multiline_markdown_answer():
    content = """
## What are Python decorators?

### Answer
Functions that wrap other functions.

```python
@cache
def fib(n): ...
```

---
"""
    cards = parse_flashcard_content(content)

    assert "```python" in cards[0]["back"]
    assert cards[0]["tags"] == []


def test_parse_skips_incomplete_sections():
    content = """
## Only a front

No answer heading here.

---

### Answer
An answer without a front.

---
"""
    assert parse_flashcard_content(content) == []


def test_parse_empty_content():
    assert parse_flashcard_content("") == []


def test_parse_flashcard_file(tmp_path):
    file_path = tmp_path / "deck.md"
    file_path.write_text("## 2 + 2?\n\n### Answer\n4\n\nTags: math\n\n---\n", encoding="utf-8")

    cards = parse_flashcard_file(str(file_path))

    assert cards == [{"front": "2 + 2?", "back": "4", "tags": ["math"]}]


def test_validate_valid_file(tmp_path):
    file_path = tmp_path / "valid.md"
    file_path.write_text("## Front\n\n### Answer\nBack\n\n---\n", encoding="utf-8")

    is_valid, message = validate_flashcard_file(str(file_path))

    assert is_valid is True
    assert "1 flashcard" in message


def test_validate_empty_file(tmp_path):
    file_path = tmp_path / "empty.md"
    file_path.write_text("", encoding="utf-8")

    is_valid, message = validate_flashcard_file(str(file_path))

    assert is_valid is False
    assert "No valid flashcards" in message


def test_validate_nonexistent_file():
    is_valid, message = validate_flashcard_file("/nonexistent/file.md")

    assert is_valid is False
    assert "not found" in message.lower()
