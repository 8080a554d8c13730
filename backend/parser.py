"""
Markdown parser for flashcard files.

Expected format:
## Front
What is the difference between @staticmethod and @classmethod in Python?

### Answer
@staticmethod doesn't receive any implicit first argument.
@classmethod receives the class as implicit first argument (cls).

Tags: python, oop

---

The "Tags:" line is optional and must be the last line of the answer.
"""
import logging
import re

logger = logging.getLogger(__name__)

TAGS_LINE = re.compile(r'\n[Tt]ags:\s*(.*)\s*$')


def parse_flashcard_file(file_path: str) -> list[dict]:
    """
    Parse a markdown file containing flashcards.

    Args:
        file_path: Path to the markdown file

    Returns:
        List of card dictionaries with 'front', 'back' and 'tags' keys
    """
    with open(file_path, encoding='utf-8') as f:
        content = f.read()

    return parse_flashcard_content(content)


def _split_tags(answer_text: str) -> tuple[str, list[str]]:
    tags_match = TAGS_LINE.search(answer_text)
    if not tags_match:
        return answer_text, []

    tags = [tag.strip() for tag in tags_match.group(1).split(',') if tag.strip()]
    return answer_text[:tags_match.start()].strip(), tags


def parse_flashcard_content(content: str) -> list[dict]:
    """
    Parse markdown content containing flashcards.

    Args:
        content: Markdown string content

    Returns:
        List of card dictionaries with 'front', 'back' and 'tags' keys
    """
    flashcards = []

    # Handle both --- and *** as separators
    sections = re.split(r'\n---+\n|\n\*\*\*+\n', content)

    for section in sections:
        section = section.strip()
        if not section:
            continue

        # Match ## (with optional "Question N" text) followed by content
        front_match = re.search(
            r'^##\s+(.+?)(?=\n###|\Z)',
            section,
            re.MULTILINE | re.DOTALL
        )

        # Match ### Answer followed by content
        back_match = re.search(
            r'###\s+[Aa]nswer\s*\n(.+?)(?=\n##|\Z)',
            section,
            re.MULTILINE | re.DOTALL
        )

        if front_match and back_match:
            front_text = front_match.group(1).strip()
            back_text, tags = _split_tags(back_match.group(1).strip())

            # Remove "Question N" prefix if present
            front_text = re.sub(r'^[Qq]uestion\s+\d+\s*\n', '', front_text).strip()

            flashcards.append({
                'front': front_text,
                'back': back_text,
                'tags': tags,
            })
        else:
            logger.debug("Skipping section without front/answer: %.40r", section)

    return flashcards


def validate_flashcard_file(file_path: str) -> tuple[bool, str]:
    """
    Validate a flashcard file format.

    Args:
        file_path: Path to the markdown file

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        flashcards = parse_flashcard_file(file_path)

        if not flashcards:
            return False, "No valid flashcards found in file"

        for i, card in enumerate(flashcards):
            if not card['front']:
                return False, f"Card {i+1} has empty front"
            if not card['back']:
                return False, f"Card {i+1} has empty answer"

        return True, f"Valid file with {len(flashcards)} flashcard(s)"

    except FileNotFoundError:
        return False, "File not found"
    except (OSError, UnicodeDecodeError) as e:
        return False, f"Error parsing file: {e!s}"
