"""Tests for the interview turn controller."""

import asyncio

import pytest

from interview_coach.core.interview_orchestrator import (
    FALLBACK_INTERVIEWER_TEXT,
    FeedbackGenerationError,
    InterviewOrchestrator,
    PhaseTransitionError,
    SessionValidationError,
)
from interview_coach.models.interview import (
    InterviewPhase,
    InterviewSession,
    MessageRole,
    SessionType,
)
from interview_coach.models.stream import StreamState
from tests.helpers import stream_bytes


@pytest.fixture
def session():
    return InterviewSession(job_title="Marketing Manager", session_type=SessionType.BEHAVIORAL)


@pytest.fixture
def orchestrator(fake_api, settings):
    return InterviewOrchestrator(fake_api, settings)


async def wait_until(predicate, timeout: float = 1.0):
    async def poll():
        while not predicate():
            await asyncio.sleep(0)
    await asyncio.wait_for(poll(), timeout)


async def run_to_limit(orchestrator, session):
    await orchestrator.start_interview(session)
    while orchestrator.question_count < 7:
        await orchestrator.submit_candidate_turn("Mijn antwoord")


async def test_start_interview_streams_opening_question(orchestrator, fake_api, session):
    fake_api.queue_reply("Hallo", " en", " welkom.")
    updates = []
    orchestrator.on_update(updates.append)

    result = await orchestrator.start_interview(session)

    assert result.state is StreamState.COMPLETED
    assert orchestrator.phase is InterviewPhase.INTERVIEW
    assert orchestrator.question_count == 1
    [message] = orchestrator.transcript
    assert message.role is MessageRole.INTERVIEWER
    assert message.text == "Hallo en welkom."
    assert updates[-1] == "Hallo en welkom."
    assert "Marketing Manager" in fake_api.prompts[0]
    assert "Gedragsvragen" in fake_api.prompts[0]
    assert orchestrator.stream_state is StreamState.IDLE


async def test_start_interview_rejects_blank_job_title(orchestrator, fake_api):
    with pytest.raises(SessionValidationError):
        await orchestrator.start_interview(InterviewSession(job_title="   "))

    assert orchestrator.phase is InterviewPhase.SETUP
    assert orchestrator.session is None
    assert fake_api.prompts == []


async def test_start_interview_twice_is_rejected(orchestrator, session):
    await orchestrator.start_interview(session)

    with pytest.raises(PhaseTransitionError):
        await orchestrator.start_interview(session)


async def test_candidate_turn_builds_prompt_from_recent_window(orchestrator, fake_api, session):
    await orchestrator.start_interview(session)
    for answer in ["eerste", "tweede", "derde"]:
        await orchestrator.submit_candidate_turn(answer)

    last_prompt = fake_api.prompts[-1]
    assert "Kandidaat: derde" in last_prompt
    assert "Kandidaat: tweede" in last_prompt
    assert "Kandidaat: eerste" not in last_prompt
    assert orchestrator.question_count == 4
    assert len(orchestrator.transcript) == 7


async def test_blank_candidate_turn_is_ignored(orchestrator, fake_api, session):
    await orchestrator.start_interview(session)

    assert await orchestrator.submit_candidate_turn("   ") is None

    assert len(orchestrator.transcript) == 1
    assert len(fake_api.prompts) == 1


async def test_submission_during_generation_is_a_noop(orchestrator, fake_api, session):
    gate = asyncio.Event()
    fake_api.queue(stream_bytes("Welkom"), gate=gate)
    task = asyncio.create_task(orchestrator.start_interview(session))
    await wait_until(lambda: orchestrator.partial_text == "Welkom")

    assert orchestrator.is_busy
    assert await orchestrator.submit_candidate_turn("te vroeg") is None
    assert orchestrator.transcript == ()
    assert orchestrator.question_count == 0

    gate.set()
    await task
    assert orchestrator.question_count == 1
    assert len(fake_api.prompts) == 1


async def test_failed_generation_appends_fallback(orchestrator, fake_api, session):
    fake_api.queue(stream_bytes("Half", " antwoord", error="Quota bereikt"))

    result = await orchestrator.start_interview(session)

    assert result.state is StreamState.FAILED
    [message] = orchestrator.transcript
    assert message.text == FALLBACK_INTERVIEWER_TEXT
    assert "Half" not in message.text
    assert orchestrator.question_count == 0

    # The interview continues after a failed turn
    fake_api.queue_reply("Nieuwe vraag?")
    await orchestrator.submit_candidate_turn("Ik wil groeien")
    assert orchestrator.transcript[-1].text == "Nieuwe vraag?"
    assert orchestrator.question_count == 1


async def test_cancelled_generation_appends_nothing(orchestrator, fake_api, session):
    await orchestrator.start_interview(session)
    gate = asyncio.Event()
    fake_api.queue(stream_bytes("Onvolledig"), gate=gate)

    task = asyncio.create_task(orchestrator.submit_candidate_turn("antwoord"))
    await wait_until(lambda: orchestrator.partial_text == "Onvolledig")
    assert orchestrator.cancel_generation()
    result = await asyncio.wait_for(task, 1)

    assert result.state is StreamState.CANCELLED
    assert [m.role for m in orchestrator.transcript] == [MessageRole.INTERVIEWER, MessageRole.CANDIDATE]
    assert orchestrator.question_count == 1
    assert not orchestrator.is_busy

    # A new request is accepted afterwards
    fake_api.queue_reply("Volgende?")
    result = await orchestrator.submit_candidate_turn("nog een antwoord")
    assert result.state is StreamState.COMPLETED
    assert orchestrator.question_count == 2


async def test_cancel_without_generation_returns_false(orchestrator):
    assert orchestrator.cancel_generation() is False


async def test_wrap_up_instruction_near_the_end(orchestrator, fake_api, session):
    await orchestrator.start_interview(session)
    while orchestrator.question_count < 6:
        await orchestrator.submit_candidate_turn("antwoord")
    assert "laatste vragen" not in fake_api.prompts[-1]

    await orchestrator.submit_candidate_turn("antwoord")

    assert "Dit is een van de laatste vragen" in fake_api.prompts[-1]
    assert orchestrator.is_wrapping_up


async def test_question_limit_moves_to_feedback_without_generation(orchestrator, fake_api, session):
    await run_to_limit(orchestrator, session)
    prompts_before = len(fake_api.prompts)

    result = await orchestrator.submit_candidate_turn("Mijn laatste antwoord")

    assert result is None
    assert orchestrator.feedback_pending
    assert len(fake_api.prompts) == prompts_before
    assert orchestrator.transcript[-1].role is MessageRole.CANDIDATE

    await orchestrator.wait_for_transition()
    assert orchestrator.phase is InterviewPhase.FEEDBACK
    assert orchestrator.question_count == 7


async def test_submission_while_feedback_pending_is_ignored(fake_api, session, settings):
    orchestrator = InterviewOrchestrator(fake_api, settings.model_copy(update={"feedback_delay_seconds": 0.05}))
    await run_to_limit(orchestrator, session)
    await orchestrator.submit_candidate_turn("laatste")
    length = len(orchestrator.transcript)

    assert await orchestrator.submit_candidate_turn("nog iets") is None
    assert len(orchestrator.transcript) == length
    await orchestrator.wait_for_transition()


async def test_generate_feedback_appends_once(orchestrator, fake_api, session):
    await run_to_limit(orchestrator, session)
    await orchestrator.submit_candidate_turn("laatste")
    await orchestrator.wait_for_transition()

    feedback = await orchestrator.generate_feedback()
    again = await orchestrator.generate_feedback()

    assert feedback.text == "Goed gedaan!"
    assert again is feedback
    assert len(fake_api.complete_prompts) == 1
    assert "Kandidaat: laatste" in fake_api.complete_prompts[0]
    assert orchestrator.transcript[-1] is feedback


async def test_generate_feedback_failure_keeps_transcript(orchestrator, fake_api, session):
    await run_to_limit(orchestrator, session)
    await orchestrator.submit_candidate_turn("laatste")
    await orchestrator.wait_for_transition()
    fake_api.feedback_error = "Feedback generation failed"
    length = len(orchestrator.transcript)

    with pytest.raises(FeedbackGenerationError):
        await orchestrator.generate_feedback()

    assert len(orchestrator.transcript) == length
    fake_api.feedback_error = None
    assert (await orchestrator.generate_feedback()).text == "Goed gedaan!"


async def test_generate_feedback_outside_feedback_phase(orchestrator, session):
    with pytest.raises(PhaseTransitionError):
        await orchestrator.generate_feedback()

    await orchestrator.start_interview(session)
    with pytest.raises(PhaseTransitionError):
        await orchestrator.generate_feedback()


async def test_repeat_interview_keeps_session_and_clears_transcript(orchestrator, fake_api, session):
    await run_to_limit(orchestrator, session)
    await orchestrator.submit_candidate_turn("laatste")
    await orchestrator.wait_for_transition()
    fake_api.queue_reply("Welkom terug")

    await orchestrator.repeat_interview()

    assert orchestrator.phase is InterviewPhase.INTERVIEW
    assert orchestrator.session == session
    assert [m.text for m in orchestrator.transcript] == ["Welkom terug"]
    assert orchestrator.question_count == 1


async def test_repeat_interview_requires_feedback_phase(orchestrator, session):
    await orchestrator.start_interview(session)

    with pytest.raises(PhaseTransitionError):
        await orchestrator.repeat_interview()


async def test_reset_during_generation_lands_in_setup(orchestrator, fake_api, session):
    gate = asyncio.Event()
    fake_api.queue(stream_bytes("Welkom"), gate=gate)
    task = asyncio.create_task(orchestrator.start_interview(session))
    await wait_until(lambda: orchestrator.partial_text == "Welkom")

    orchestrator.reset_session()
    result = await asyncio.wait_for(task, 1)

    assert result.state is StreamState.CANCELLED
    assert orchestrator.phase is InterviewPhase.SETUP
    assert orchestrator.session is None
    assert orchestrator.transcript == ()
    assert orchestrator.question_count == 0


async def test_reset_cancels_pending_feedback_transition(fake_api, session, settings):
    orchestrator = InterviewOrchestrator(fake_api, settings.model_copy(update={"feedback_delay_seconds": 0.05}))
    await run_to_limit(orchestrator, session)
    await orchestrator.submit_candidate_turn("laatste")

    orchestrator.reset_session()
    await asyncio.sleep(0.1)

    assert orchestrator.phase is InterviewPhase.SETUP
    assert not orchestrator.feedback_pending


async def test_phase_callbacks_report_transitions(orchestrator, session):
    changes = []
    orchestrator.on_phase_change(lambda old, new: changes.append((old, new)))

    await orchestrator.start_interview(session)
    orchestrator.reset_session()

    assert changes == [
        (InterviewPhase.SETUP, InterviewPhase.INTERVIEW),
        (InterviewPhase.INTERVIEW, InterviewPhase.SETUP),
    ]


async def test_same_state_gives_same_prompt(orchestrator, session):
    prompts = orchestrator.interviewer_prompts
    window = ()

    assert prompts.opening_prompt(session) == prompts.opening_prompt(session)
    assert prompts.next_question_prompt(session, window, 6) == prompts.next_question_prompt(session, window, 6)


async def test_start_interview_from_feedback_is_rejected(orchestrator, session):
    await run_to_limit(orchestrator, session)
    await orchestrator.submit_candidate_turn("laatste")
    await orchestrator.wait_for_transition()
    transcript = orchestrator.transcript

    with pytest.raises(PhaseTransitionError):
        await orchestrator.start_interview(InterviewSession(job_title="Totaal Andere Functie"))

    assert orchestrator.phase is InterviewPhase.FEEDBACK
    assert orchestrator.session == session
    assert orchestrator.transcript == transcript


def test_interview_phase_only_moves_forward_to_feedback():
    assert InterviewOrchestrator.VALID_TRANSITIONS[InterviewPhase.INTERVIEW] == [InterviewPhase.FEEDBACK]
