"""
Questionnaire Domain Model

PHQ-9 response vector with shape and range validation.

CLINICAL_REVIEW_REQUIRED: Item ordering follows the standard PHQ-9;
item 9 (index 8) is the self-harm ideation question.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator

from mindlens.domain.errors import MalformedInputError

PHQ9_LENGTH = 9
SELF_HARM_QUESTION_INDEX = 8
MIN_ITEM_SCORE = 0
MAX_ITEM_SCORE = 3


@dataclass(frozen=True)
class QuestionnaireResponse:
    """
    Ordered PHQ-9 item scores.

    Each value is one of 0 ("not at all") to 3 ("nearly every day").
    Construction fails loudly; values are never coerced, truncated
    or padded.

    Attributes:
        scores: Exactly nine integer item scores
    """

    scores: tuple[int, ...]

    def __post_init__(self) -> None:
        if len(self.scores) != PHQ9_LENGTH:
            raise MalformedInputError(
                f"Expected {PHQ9_LENGTH} responses, got {len(self.scores)}"
            )
        for index, value in enumerate(self.scores):
            # bool is an int subclass and is never a valid answer
            if isinstance(value, bool) or not isinstance(value, int):
                raise MalformedInputError(
                    f"Response {index} must be an integer, got {type(value).__name__}",
                    field=f"responses[{index}]",
                )
            if not MIN_ITEM_SCORE <= value <= MAX_ITEM_SCORE:
                raise MalformedInputError(
                    f"Response {index} out of range: {value}",
                    field=f"responses[{index}]",
                )

    @classmethod
    def from_answers(cls, answers: Iterable[int]) -> "QuestionnaireResponse":
        """Build from any iterable of answers (validated)."""
        if isinstance(answers, QuestionnaireResponse):
            return answers
        if isinstance(answers, (str, bytes)):
            raise MalformedInputError("Responses must be a sequence of integers")
        try:
            scores = tuple(answers)
        except TypeError as e:
            raise MalformedInputError("Responses must be a sequence of integers") from e
        return cls(scores=scores)

    @property
    def total(self) -> int:
        return sum(self.scores)

    @property
    def self_harm_score(self) -> int:
        return self.scores[SELF_HARM_QUESTION_INDEX]

    def count_at(self, value: int) -> int:
        """Number of items answered with exactly ``value``."""
        return sum(1 for score in self.scores if score == value)

    def __iter__(self) -> Iterator[int]:
        return iter(self.scores)

    def __len__(self) -> int:
        return len(self.scores)

    def __getitem__(self, index: int) -> int:
        return self.scores[index]
