import pytest
import sys
from pathlib import Path

# Add src to sys.path so we can import exam_drafter
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from exam_drafter.core.models import (  # noqa: E402
    DocumentMetadata,
    FormSnapshot,
    Question,
    QuestionType,
)
from exam_drafter.drafts import MemoryKeyValueStore  # noqa: E402


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# Common test fixtures
@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


@pytest.fixture
def metadata():
    return DocumentMetadata(
        title="Simulado de Inglês",
        language="english",
        difficulty_level="b1",
        class_ref="9A",
        date="05/03/2024",
    )


@pytest.fixture
def form():
    return FormSnapshot(
        title="Simulado de Inglês",
        language="english",
        difficulty="b1",
        topics="present perfect",
        questions_count=3,
    )


@pytest.fixture
def make_questions():
    """Factory: n questions cycling multipleChoice / trueFalse, prefixed prompts."""
    def _create(n: int, prefix: str = "Q"):
        questions = []
        for i in range(n):
            if i % 2 == 0:
                questions.append(Question(
                    id=f"{prefix}{i + 1}",
                    type=QuestionType.MULTIPLE_CHOICE,
                    prompt=f"{prefix} prompt {i + 1}",
                    options=("one", "two", "three", "four"),
                    correct_answer=1,
                ))
            else:
                questions.append(Question(
                    id=f"{prefix}{i + 1}",
                    type=QuestionType.TRUE_FALSE,
                    prompt=f"{prefix} statement {i + 1}",
                    correct_answer="Verdadeiro",
                ))
        return tuple(questions)
    return _create


@pytest.fixture
def three_questions():
    """2 multipleChoice (4 options each) + 1 trueFalse."""
    return (
        Question(
            id="1",
            type=QuestionType.MULTIPLE_CHOICE,
            prompt="She ___ to school every day.",
            options=("go", "goes", "going", "gone"),
            correct_answer=1,
        ),
        Question(
            id="2",
            type=QuestionType.MULTIPLE_CHOICE,
            prompt="They ___ finished.",
            options=("has", "have", "is", "are"),
            correct_answer="have",
        ),
        Question(
            id="3",
            type=QuestionType.TRUE_FALSE,
            prompt="'Went' is the past tense of 'go'.",
            correct_answer="Verdadeiro",
        ),
    )
