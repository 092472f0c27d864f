"""
Interview Orchestrator - turn controller for one mock interview.

Owns the candidate profile, the transcript and the question counter,
decides when to ask the next question, when to stop and when to
summarize, and owns cancellation of the in-flight generation.
"""

import asyncio
import logging
from typing import Any, Callable

from interview_coach.config.settings import Settings, get_settings
from interview_coach.core.api_client import ApiClientError
from interview_coach.core.stream_consumer import CancellationToken, StreamConsumer
from interview_coach.models.generation import AIModel
from interview_coach.models.interview import (
    InterviewPhase,
    InterviewSession,
    Message,
    MessageRole,
)
from interview_coach.models.stream import StreamResult, StreamState
from interview_coach.prompts.feedback import FeedbackPrompts
from interview_coach.prompts.interviewer import InterviewerPrompts

logger = logging.getLogger(__name__)

FALLBACK_INTERVIEWER_TEXT = (
    "Sorry, er ging iets mis. Laten we het gesprek voortzetten. "
    "Kun je me vertellen wat je motivatie is voor deze functie?"
)


class SessionValidationError(ValueError):
    """Raised when a session profile cannot start an interview."""
    pass


class PhaseTransitionError(Exception):
    """Raised when an invalid phase transition is attempted."""
    pass


class FeedbackGenerationError(Exception):
    """Raised when feedback could not be generated. The transcript is unchanged."""
    pass


class InterviewOrchestrator:
    """
    Manages the interview lifecycle using a state machine pattern.

    Phases:
        SETUP → INTERVIEW → FEEDBACK → (SETUP | INTERVIEW)

    At most one generation is in flight at any time. Submissions made while
    one is running are ignored, not queued, so the transcript and counter
    only ever have a single writer.
    """

    VALID_TRANSITIONS: dict[InterviewPhase, list[InterviewPhase]] = {
        InterviewPhase.SETUP: [InterviewPhase.INTERVIEW],
        InterviewPhase.INTERVIEW: [InterviewPhase.FEEDBACK],
        InterviewPhase.FEEDBACK: [InterviewPhase.SETUP, InterviewPhase.INTERVIEW],
    }

    def __init__(
        self,
        api_client: Any,  # InterviewApiClient
        settings: Settings | None = None,
        model: AIModel = AIModel.SMART,
    ):
        """
        Initialize the orchestrator.

        Args:
            api_client: Opens token streams and requests complete generations
            settings: Interview thresholds and delays
            model: Model used for every request
        """
        self.api_client = api_client
        self.settings = settings or get_settings()
        self.model = model

        self.interviewer_prompts = InterviewerPrompts(
            wrap_up_threshold=self.settings.wrap_up_threshold
        )
        self.feedback_prompts = FeedbackPrompts()

        self._phase = InterviewPhase.SETUP
        self._session: InterviewSession | None = None
        self._transcript: list[Message] = []
        self._question_count = 0

        self._consumer: StreamConsumer | None = None
        self._feedback_in_flight = False
        self._pending_transition: asyncio.Task | None = None

        # Observer callbacks
        self._update_callbacks: list[Callable[[str], None]] = []
        self._message_callbacks: list[Callable[[Message], None]] = []
        self._phase_callbacks: list[Callable[[InterviewPhase, InterviewPhase], None]] = []

    # =========================================================================
    # READ-ONLY VIEWS
    # =========================================================================

    @property
    def phase(self) -> InterviewPhase:
        return self._phase

    @property
    def session(self) -> InterviewSession | None:
        return self._session

    @property
    def transcript(self) -> tuple[Message, ...]:
        return tuple(self._transcript)

    @property
    def question_count(self) -> int:
        return self._question_count

    @property
    def stream_state(self) -> StreamState:
        return self._consumer.state if self._consumer else StreamState.IDLE

    @property
    def partial_text(self) -> str:
        """Interviewer text received so far for the in-flight turn."""
        return self._consumer.full_text if self._consumer else ""

    @property
    def is_busy(self) -> bool:
        """Whether a generation (streaming or feedback) is in flight."""
        return self._consumer is not None or self._feedback_in_flight

    @property
    def feedback_pending(self) -> bool:
        """Whether the switch to the feedback phase has been scheduled."""
        return self._pending_transition is not None

    @property
    def questions_remaining(self) -> int:
        return max(0, self.settings.question_limit - self._question_count)

    @property
    def is_wrapping_up(self) -> bool:
        return self._question_count >= self.settings.wrap_up_threshold

    # =========================================================================
    # CALLBACKS
    # =========================================================================

    def on_update(self, callback: Callable[[str], None]) -> None:
        """Register a callback receiving the partial interviewer text."""
        self._update_callbacks.append(callback)

    def on_message(self, callback: Callable[[Message], None]) -> None:
        """Register a callback for every appended transcript message."""
        self._message_callbacks.append(callback)

    def on_phase_change(self, callback: Callable[[InterviewPhase, InterviewPhase], None]) -> None:
        self._phase_callbacks.append(callback)

    def _notify(self, callbacks: list[Callable[..., None]], *args: Any) -> None:
        for callback in callbacks:
            try:
                callback(*args)
            except Exception as e:
                logger.error(f"Callback error: {e}")

    def _handle_update(self, text: str) -> None:
        self._notify(self._update_callbacks, text)

    # =========================================================================
    # STATE MACHINE
    # =========================================================================

    def _check_transition(self, new_phase: InterviewPhase) -> None:
        valid_next_phases = self.VALID_TRANSITIONS.get(self._phase, [])
        if new_phase not in valid_next_phases:
            raise PhaseTransitionError(
                f"Invalid transition from {self._phase.value} to {new_phase.value}. "
                f"Valid transitions: {[p.value for p in valid_next_phases]}"
            )

    def _transition(self, new_phase: InterviewPhase) -> None:
        self._check_transition(new_phase)
        old_phase = self._phase
        self._phase = new_phase
        logger.info(f"Interview phase: {old_phase.value} → {new_phase.value}")
        self._notify(self._phase_callbacks, old_phase, new_phase)

    def _append(self, role: MessageRole, text: str) -> Message:
        message = Message(role=role, text=text)
        self._transcript.append(message)
        self._notify(self._message_callbacks, message)
        return message

    # =========================================================================
    # INTERVIEW FLOW
    # =========================================================================

    async def start_interview(self, session: InterviewSession) -> StreamResult:
        """
        Start a new interview and generate the opening question.

        Raises:
            SessionValidationError: If the job title is empty
            PhaseTransitionError: If not in the setup phase
        """
        if not session.job_title.strip():
            raise SessionValidationError("Vul alsjeblieft de functietitel in om te beginnen.")
        if self._phase is not InterviewPhase.SETUP:
            raise PhaseTransitionError(
                f"Cannot start an interview in phase {self._phase.value}; reset the session first"
            )
        self._check_transition(InterviewPhase.INTERVIEW)

        self._session = session
        self._transcript = []
        self._question_count = 0
        self._transition(InterviewPhase.INTERVIEW)

        logger.info(
            f"Starting interview | role: {session.job_title} | "
            f"type: {session.session_type.value}"
        )
        return await self._generate(self.interviewer_prompts.opening_prompt(session))

    async def repeat_interview(self) -> StreamResult:
        """
        Run the interview again with the same session settings.

        Raises:
            PhaseTransitionError: If not in the feedback phase
        """
        self._check_transition(InterviewPhase.INTERVIEW)
        if self._phase is not InterviewPhase.FEEDBACK or self._session is None:
            raise PhaseTransitionError("Repeat is only available after an interview")

        self._transcript = []
        self._question_count = 0
        self._transition(InterviewPhase.INTERVIEW)
        return await self._generate(self.interviewer_prompts.opening_prompt(self._session))

    async def submit_candidate_turn(self, text: str) -> StreamResult | None:
        """
        Record a candidate answer and ask the next question.

        Returns:
            The generation outcome, or None when nothing was generated
            (ignored submission, or the interview is ending)
        """
        text = (text or "").strip()
        if not text:
            return None
        if self.is_busy:
            logger.info("Ignoring candidate turn while a generation is in flight")
            return None
        if self._phase is not InterviewPhase.INTERVIEW or self.feedback_pending:
            logger.info(f"Ignoring candidate turn in phase {self._phase.value}")
            return None

        self._append(MessageRole.CANDIDATE, text)

        if self._question_count >= self.settings.question_limit:
            logger.info(f"Question limit reached ({self._question_count}), ending interview")
            self._pending_transition = asyncio.create_task(self._enter_feedback())
            return None

        window = self._transcript[-self.settings.history_window:]
        prompt = self.interviewer_prompts.next_question_prompt(
            self._session, window, self._question_count
        )
        return await self._generate(prompt)

    async def _enter_feedback(self) -> None:
        """Switch to the feedback phase after a short settle delay."""
        try:
            await asyncio.sleep(self.settings.feedback_delay_seconds)
            if self._phase is InterviewPhase.INTERVIEW:
                self._transition(InterviewPhase.FEEDBACK)
        finally:
            if self._pending_transition is asyncio.current_task():
                self._pending_transition = None

    async def wait_for_transition(self) -> None:
        """Wait until a scheduled switch to the feedback phase has happened."""
        task = self._pending_transition
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def _generate(self, prompt: str) -> StreamResult:
        """
        Run one streaming generation and fold its outcome into the transcript.

        Completed appends the interviewer message and counts the question,
        Failed appends the fallback message, Cancelled appends nothing.
        """
        token = CancellationToken()
        consumer = self.api_client.open_stream(
            prompt,
            self.model,
            token=token,
            on_update=self._handle_update,
        )
        self._consumer = consumer

        try:
            result = await consumer.run()
        except Exception as e:
            logger.error(f"Interview question generation error: {e}")
            result = StreamResult(state=StreamState.FAILED, error_message=str(e))
        finally:
            superseded = self._consumer is not consumer
            if not superseded:
                self._consumer = None

        if superseded:
            logger.info("Discarding result of a superseded generation")
            return StreamResult(state=StreamState.CANCELLED, text=result.text)

        if result.state is StreamState.COMPLETED:
            self._append(MessageRole.INTERVIEWER, result.text)
            self._question_count += 1
            logger.info(f"Interviewer turn {self._question_count} completed ({len(result.text)} chars)")
        elif result.state is StreamState.FAILED:
            logger.warning(f"Generation failed, using fallback question: {result.error_message}")
            self._append(MessageRole.INTERVIEWER, FALLBACK_INTERVIEWER_TEXT)
        else:
            logger.info("Generation cancelled")

        return result

    def cancel_generation(self) -> bool:
        """
        Cancel the in-flight streaming generation.

        Returns:
            True if a generation was cancelled
        """
        if self._consumer is None:
            return False
        self._consumer.cancel()
        return True

    # =========================================================================
    # FEEDBACK
    # =========================================================================

    async def generate_feedback(self) -> Message | None:
        """
        Generate the final feedback message over the full transcript.

        Once feedback exists, further calls return it without another
        backend request.

        Raises:
            PhaseTransitionError: If not in the feedback phase
            FeedbackGenerationError: If the backend call fails
        """
        if self._phase is not InterviewPhase.FEEDBACK or self._session is None:
            raise PhaseTransitionError("Feedback is only available after the interview")

        if self._transcript and self._transcript[-1].role is MessageRole.INTERVIEWER:
            return self._transcript[-1]
        if self.is_busy:
            return None

        session = self._session
        prompt = self.feedback_prompts.feedback_prompt(session, self._transcript)

        self._feedback_in_flight = True
        try:
            text = await self.api_client.complete(prompt, self.model)
        except ApiClientError as e:
            logger.error(f"Feedback generation error: {e.message}")
            raise FeedbackGenerationError(e.message) from e
        finally:
            self._feedback_in_flight = False

        if self._phase is not InterviewPhase.FEEDBACK or self._session is not session:
            logger.info("Discarding feedback for a session that was reset")
            return None

        return self._append(MessageRole.INTERVIEWER, text)

    # =========================================================================
    # RESET
    # =========================================================================

    def reset_session(self) -> None:
        """Clear everything and return to setup. Always succeeds."""
        if self._consumer is not None:
            self._consumer.cancel()
            self._consumer = None
        if self._pending_transition is not None:
            self._pending_transition.cancel()
            self._pending_transition = None

        self._session = None
        self._transcript = []
        self._question_count = 0
        self._feedback_in_flight = False

        if self._phase is not InterviewPhase.SETUP:
            old_phase = self._phase
            self._phase = InterviewPhase.SETUP
            logger.info(f"Interview phase: {old_phase.value} → setup (reset)")
            self._notify(self._phase_callbacks, old_phase, InterviewPhase.SETUP)
