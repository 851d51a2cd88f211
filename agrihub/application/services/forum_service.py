from __future__ import annotations

import random
import threading
from typing import List, Optional, Tuple

from ...agent.workflows.analysis_graph import FAIL, StructuredRequestSpec, run_structured_request
from ...domain.errors import InvalidInputError, NotFoundError
from ...domain.progress import PARSE, ProgressTracker
from ...infra.config import get_config
from ...observability.logging_utils import log_event
from ...prompts.analysis_prompts import build_forum_prompt
from ...prompts.report_messages import (
    EMPTY_QUESTION_MESSAGE,
    FORUM_FAILURE_MESSAGE,
    FORUM_SUCCESS_MESSAGE,
)
from ...schemas import (
    AnalysisOutcome,
    FarmerProfile,
    ForumMessage,
    ForumReply,
    ForumThread,
    GenerationConfig,
)
from .session import rejected_outcome


FORUM_REQUEST_NAME = "forum"
QUESTION_AUTHOR = "You"
FIRST_NAMES = [
    "Rajesh", "Suresh", "Ramesh", "Mahesh", "Prakash",
    "Dinesh", "Bharat", "Kishan", "Arjun", "Gopal",
]
LAST_NAMES = [
    "Patel", "Singh", "Yadav", "Kumar", "Sharma",
    "Verma", "Gupta", "Patil", "Reddy", "Choudhary",
]
VILLAGES = [
    "Pratappur", "Ganeshganj", "Ramgarh", "Krishnanagar", "Bhimpur",
    "Sultanpur", "Madhavpur", "Sitapur", "Gopalnagar", "Devgarh",
]
MIN_EXPERIENCE = 5
MAX_EXPERIENCE = 34
FORUM_GENERATION = GenerationConfig(
    temperature=0.7, top_k=40, top_p=0.8, max_output_tokens=1024
)


def random_farmer_profile(rng: Optional[random.Random] = None) -> FarmerProfile:
    rng = rng or random
    return FarmerProfile(
        name=f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
        village=rng.choice(VILLAGES),
        experience=rng.randint(MIN_EXPERIENCE, MAX_EXPERIENCE),
    )


def forum_request_spec() -> StructuredRequestSpec:
    return StructuredRequestSpec(
        name=FORUM_REQUEST_NAME,
        model=get_config().text_model,
        generation=FORUM_GENERATION,
        schema=ForumReply,
        fallback=FAIL,
        failure_message=FORUM_FAILURE_MESSAGE,
        parse_failure_message=FORUM_FAILURE_MESSAGE,
        stage_notices={PARSE: FORUM_SUCCESS_MESSAGE},
    )


def ask_farmers(
    question: str,
    profiles: Tuple[FarmerProfile, FarmerProfile],
    tracker: Optional[ProgressTracker] = None,
) -> AnalysisOutcome:
    text = (question or "").strip()
    if not text:
        return rejected_outcome(FORUM_REQUEST_NAME, InvalidInputError(EMPTY_QUESTION_MESSAGE))
    first, second = profiles
    return run_structured_request(
        forum_request_spec(), build_forum_prompt(text, first, second), tracker=tracker
    )


class ForumBoard:
    """In-memory threads of one forum view; gone when the process exits."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self.threads: List[ForumThread] = []
        self.loading = False
        self._lock = threading.Lock()

    def ask(
        self, question: str, tracker: Optional[ProgressTracker] = None
    ) -> Tuple[AnalysisOutcome, Optional[int]]:
        """Ask the simulated farmers; returns the outcome and the index of the new thread, if any."""
        profiles = (random_farmer_profile(self._rng), random_farmer_profile(self._rng))
        self.loading = True
        try:
            outcome = ask_farmers(question, profiles, tracker)
        finally:
            self.loading = False
        if outcome.status != "ok":
            return outcome, None
        reply = ForumReply.model_validate(outcome.data)
        thread = ForumThread(
            question=ForumMessage(author=QUESTION_AUTHOR, content=question.strip()),
            responses=reply.responses,
        )
        with self._lock:
            self.threads.append(thread)
            index = len(self.threads) - 1
        log_event("forum_thread_added", index=index)
        return outcome, index

    def get_thread(self, index: int) -> ForumThread:
        if index < 0 or index >= len(self.threads):
            raise NotFoundError(f"No thread at index {index}")
        return self.threads[index]

    def toggle_like(self, index: int) -> ForumThread:
        thread = self.get_thread(index)
        thread.liked = not thread.liked
        thread.likes += 1 if thread.liked else -1
        return thread
