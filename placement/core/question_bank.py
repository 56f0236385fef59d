"""
Question bank: the immutable catalog of placement questions.

The repository is an explicitly constructed value passed to the selector and
to history decoding. There is no process-wide catalog; callers that want the
packaged questions use ``default_repository()``.
"""
import logging
from typing import Dict, Iterable, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from libs.domain_types import CEFRLevel, QuestionCategory

logger = logging.getLogger(__name__)

# Every question offers exactly this many answer options
OPTION_COUNT = 4


class QuestionNotFoundError(KeyError):
    """Raised when a question id is not present in the repository."""

    def __init__(self, question_id: str):
        super().__init__(question_id)
        self.question_id = question_id

    def __str__(self) -> str:
        return f"Unknown question id: {self.question_id!r}"


class Question(BaseModel):
    """A single multiple-choice placement question."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique question identifier")
    text: str = Field(..., min_length=1, description="Prompt shown to the user")
    options: Tuple[str, ...] = Field(
        ..., description="Answer options, addressed by index"
    )
    correct_answer_index: int = Field(
        ..., ge=0, description="Index of the correct option"
    )
    explanation: str = Field("", description="Why the correct option is right")
    difficulty: CEFRLevel = Field(..., description="CEFR level of the question")
    category: QuestionCategory = Field(..., description="Skill area tested")
    tags: Tuple[str, ...] = Field(default=(), description="Free-form topic tags")
    times_used: int = Field(default=0, ge=0, description="Times administered")
    success_rate: float = Field(
        default=0.5, ge=0.0, le=1.0, description="Historical share answered correctly"
    )

    @field_validator("options")
    @classmethod
    def validate_options(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        """Validate the fixed option count and that no option is blank."""
        if len(v) != OPTION_COUNT:
            raise ValueError(f"Question must have {OPTION_COUNT} options, got {len(v)}")
        if any(not option.strip() for option in v):
            raise ValueError("Answer options cannot be empty")
        return v

    @model_validator(mode="after")
    def validate_correct_index(self) -> "Question":
        """Validate that the correct index addresses an existing option."""
        if self.correct_answer_index >= len(self.options):
            raise ValueError(
                f"correct_answer_index {self.correct_answer_index} out of range "
                f"for {len(self.options)} options"
            )
        return self

    @property
    def correct_option(self) -> str:
        """Text of the correct option."""
        return self.options[self.correct_answer_index]


class QuestionRepository:
    """
    Read-only, in-memory collection of questions.

    Grouping by level is a derived view recomputed on each call; the only
    stored state is the question tuple and an id index built at construction.

    Example:
        >>> repo = QuestionRepository(questions)
        >>> repo.find_by_id("B1_001").difficulty
        <CEFRLevel.B1: 'B1'>
    """

    def __init__(self, questions: Iterable[Question]):
        """
        Build a repository from a collection of questions.

        Args:
            questions: Questions in catalog order

        Raises:
            ValueError: If two questions share an id
        """
        self._questions: Tuple[Question, ...] = tuple(questions)
        self._by_id: Dict[str, Question] = {}
        for question in self._questions:
            if question.id in self._by_id:
                raise ValueError(f"Duplicate question id: {question.id!r}")
            self._by_id[question.id] = question

    def __len__(self) -> int:
        return len(self._questions)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._by_id

    def all_questions(self) -> List[Question]:
        """Return every question in catalog order."""
        return list(self._questions)

    def by_level(self) -> Dict[CEFRLevel, List[Question]]:
        """
        Group questions by CEFR level.

        Every level is present as a key; levels without questions map to an
        empty list. Within a level, catalog order is preserved.
        """
        grouped: Dict[CEFRLevel, List[Question]] = {level: [] for level in CEFRLevel}
        for question in self._questions:
            grouped[question.difficulty].append(question)
        return grouped

    def find_by_id(self, question_id: str) -> Question:
        """
        Look up a question by id.

        Raises:
            QuestionNotFoundError: If the id is not in the catalog
        """
        try:
            return self._by_id[question_id]
        except KeyError:
            raise QuestionNotFoundError(question_id) from None


def _q(
    id: str,
    text: str,
    options: Tuple[str, str, str, str],
    correct: int,
    explanation: str,
    level: CEFRLevel,
    category: QuestionCategory,
    tags: Tuple[str, ...] = (),
) -> Question:
    return Question(
        id=id,
        text=text,
        options=options,
        correct_answer_index=correct,
        explanation=explanation,
        difficulty=level,
        category=category,
        tags=tags,
    )


_G = QuestionCategory.GRAMMAR
_V = QuestionCategory.VOCABULARY
_R = QuestionCategory.READING

DEFAULT_CATALOG: Tuple[Question, ...] = (
    # A1
    _q("A1_001", "I ___ a student.", ("am", "is", "are", "be"), 0,
       'Use "am" with "I".', CEFRLevel.A1, _G, ("to_be", "present_simple")),
    _q("A1_002", "She ___ to school every day.", ("go", "goes", "going", "went"), 1,
       'Use present simple "goes" for daily habits.', CEFRLevel.A1, _G,
       ("present_simple", "third_person")),
    _q("A1_003", 'What is the opposite of "hot"?', ("cold", "warm", "big", "small"), 0,
       "Hot and cold are opposites.", CEFRLevel.A1, _V, ("antonyms", "adjectives")),
    # A2
    _q("A2_001", "Yesterday, I ___ to the market.", ("go", "goes", "went", "going"), 2,
       'Use past simple "went" with "yesterday".', CEFRLevel.A2, _G,
       ("past_simple", "time_expressions")),
    _q("A2_002", "You ___ see a doctor if you feel sick.", ("should", "must", "will", "can"), 0,
       '"Should" is used for advice.', CEFRLevel.A2, _G, ("modals", "advice")),
    _q("A2_003", "The museum is closed ___ Mondays.", ("in", "at", "on", "by"), 2,
       'Use "on" with days of the week.', CEFRLevel.A2, _G, ("prepositions", "time")),
    # B1
    _q("B1_001", "I have ___ this movie three times.", ("see", "saw", "seen", "seeing"), 2,
       'Use past participle "seen" with present perfect.', CEFRLevel.B1, _G,
       ("present_perfect", "irregular_verbs")),
    _q("B1_002", "If it rains, we ___ cancel the picnic.", ("will", "would", "might", "could"), 0,
       "First conditional: if + present, will + base verb.", CEFRLevel.B1, _G,
       ("conditionals", "first_conditional")),
    _q("B1_003", "Please ___ the form before you leave.", ("fill in", "fill up", "fill on", "fill at"), 0,
       '"Fill in" means to complete a form.', CEFRLevel.B1, _V, ("phrasal_verbs",)),
    # B2
    _q("B2_001", "The report ___ by the team right now.",
       ("is being prepared", "is prepared", "prepares", "preparing"), 0,
       "Present continuous passive for actions happening now.", CEFRLevel.B2, _G,
       ("passive_voice", "present_continuous")),
    _q("B2_002", "By the time we arrived, the film ___.",
       ("had already started", "has already started", "already started", "was already start"), 0,
       "Past perfect for an action completed before another past action.", CEFRLevel.B2, _G,
       ("past_perfect",)),
    _q("B2_003",
       '"Despite the heavy traffic, she arrived on time." What does the sentence imply?',
       ("The traffic did not make her late", "She was late because of traffic",
        "There was no traffic", "She left late"), 0,
       '"Despite" introduces a contrast: the traffic did not stop her.', CEFRLevel.B2, _R,
       ("contrast", "inference")),
    # C1
    _q("C1_001", "___ had I arrived than the phone rang.", ("No sooner", "Hardly", "Scarcely", "Only"), 0,
       '"No sooner...than" is a fixed structure.', CEFRLevel.C1, _G,
       ("inversion", "fixed_expressions")),
    _q("C1_002", "The new policy was met with widespread ___.",
       ("scepticism", "sceptic", "sceptical", "sceptically"), 0,
       "A noun is needed after the adjective \"widespread\".", CEFRLevel.C1, _V,
       ("word_formation",)),
    # C2
    _q("C2_001", "His explanation was so ___ that nobody could follow it.",
       ("convoluted", "lucid", "succinct", "candid"), 0,
       '"Convoluted" means extremely complex and difficult to follow.', CEFRLevel.C2, _V,
       ("advanced_adjectives",)),
    _q("C2_002", "Were the proposal ___ approved, the board would reconvene.",
       ("to be", "be", "being", "been"), 0,
       "Formal inverted conditional: were + subject + to-infinitive.", CEFRLevel.C2, _G,
       ("inversion", "conditionals")),
)


def default_repository() -> QuestionRepository:
    """Build a repository over the packaged catalog."""
    repo = QuestionRepository(DEFAULT_CATALOG)
    logger.debug(f"Loaded default question catalog with {len(repo)} questions")
    return repo
