"""CLI entry point for running a mock interview in the terminal.

Talks to a running Interview Coach server and prints interviewer questions
as they stream in.

Usage:
    # Start the server first
    python main.py

    # Then run an interview
    interview-coach --job-title "Marketing Manager" --session-type behavioral
"""

import argparse
import asyncio
import sys

from interview_coach.core.api_client import InterviewApiClient
from interview_coach.core.interview_orchestrator import (
    FeedbackGenerationError,
    InterviewOrchestrator,
    SessionValidationError,
)
from interview_coach.models.generation import AIModel
from interview_coach.models.interview import (
    ExperienceLevel,
    InterviewPhase,
    InterviewSession,
    Message,
    MessageRole,
    SessionType,
)

EXIT_COMMANDS = {"/stop", "/quit", "/exit"}


class TerminalPrinter:
    """Prints streamed text deltas and completed messages."""

    def __init__(self, out=sys.stdout):
        self.out = out
        self._printed = 0

    def update(self, text: str) -> None:
        if self._printed == 0:
            self.out.write("\nInterviewer: ")
        self.out.write(text[self._printed:])
        self.out.flush()
        self._printed = len(text)

    def message(self, message: Message) -> None:
        if message.role is not MessageRole.INTERVIEWER:
            return
        if self._printed == 0:
            # Nothing streamed (fallback or feedback), print it whole
            self.out.write(f"\nInterviewer: {message.text}")
        self.out.write("\n\n")
        self.out.flush()
        self._printed = 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Practice a job interview with a streamed AI interviewer",
    )
    parser.add_argument("--server", default="http://localhost:8000", help="Interview Coach server URL")
    parser.add_argument("--job-title", required=True, help="Job title you are applying for")
    parser.add_argument("--company", default="", help="Company name")
    parser.add_argument(
        "--experience",
        choices=[level.value for level in ExperienceLevel],
        default=None,
        help="Your experience level",
    )
    parser.add_argument("--industry", default="", help="Industry or sector")
    parser.add_argument(
        "--session-type",
        choices=[session_type.value for session_type in SessionType],
        default=SessionType.GENERAL.value,
        help="Kind of questions to practice",
    )
    parser.add_argument("--interviewer-name", default=None)
    parser.add_argument("--interviewee-name", default=None)
    parser.add_argument(
        "--model",
        choices=[model.value for model in AIModel],
        default=AIModel.SMART.value,
        help="AI model to use",
    )
    return parser


def session_from_args(args: argparse.Namespace) -> InterviewSession:
    return InterviewSession(
        job_title=args.job_title,
        company=args.company,
        experience_level=ExperienceLevel(args.experience) if args.experience else None,
        industry=args.industry,
        session_type=SessionType(args.session_type),
        interviewer_name=args.interviewer_name,
        interviewee_name=args.interviewee_name,
    )


async def read_answer(prompt: str = "Jij: ") -> str:
    return await asyncio.to_thread(input, prompt)


async def run_interview(args: argparse.Namespace) -> int:
    """Run one interview from setup to feedback."""
    api_client = InterviewApiClient(args.server)
    orchestrator = InterviewOrchestrator(api_client, model=AIModel(args.model))

    printer = TerminalPrinter()
    orchestrator.on_update(printer.update)
    orchestrator.on_message(printer.message)

    try:
        await orchestrator.start_interview(session_from_args(args))

        while orchestrator.phase is InterviewPhase.INTERVIEW:
            if orchestrator.is_wrapping_up:
                print("(Laatste vragen - gesprek wordt afgerond)")
            else:
                print(f"(Nog {orchestrator.questions_remaining} vragen te gaan)")

            try:
                answer = await read_answer()
            except EOFError:
                break

            if answer.strip().lower() in EXIT_COMMANDS:
                break

            await orchestrator.submit_candidate_turn(answer)
            if orchestrator.feedback_pending:
                print("\nGesprek voltooid! Feedback wordt gegenereerd...\n")
                await orchestrator.wait_for_transition()

        if orchestrator.phase is not InterviewPhase.FEEDBACK:
            return 0

        try:
            await orchestrator.generate_feedback()
        except FeedbackGenerationError as e:
            print(f"Feedback kon niet worden gegenereerd: {e}", file=sys.stderr)
            return 1

        return 0

    finally:
        orchestrator.reset_session()
        await api_client.close()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(run_interview(args))
    except SessionValidationError as e:
        print(e, file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\nGesprek afgebroken.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
