"""
AI Interviewer Prompt Templates

Contains prompts for:
- Opening the interview
- Asking the next question

Every template is a pure function of the session profile, the trailing
transcript window and the question counter, so the same state always
produces the same prompt.
"""

from interview_coach.models.interview import InterviewSession, Message, format_transcript


class InterviewerPrompts:
    """
    Prompt templates for the AI interviewer.

    Key principles:
    - Professional but personable tone
    - One question at a time
    - Realistic questions for the chosen role
    """

    def __init__(self, wrap_up_threshold: int = 6):
        self.wrap_up_threshold = wrap_up_threshold

    def _profile_lines(self, session: InterviewSession, full: bool) -> str:
        lines = [f"- Functie: {session.job_title}"]
        if full:
            lines.append(f"- Bedrijf: {session.company}")
        lines.append(f"- Ervaring: {session.experience_label}")
        if full:
            lines.append(f"- Sector: {session.industry}")
        lines.append(f"- Gesprektype: {session.session_type.display_name}")
        if session.interviewee_name:
            lines.append(f"- Naam kandidaat: {session.interviewee_name}")
        return "\n".join(lines)

    def _persona(self, session: InterviewSession) -> str:
        if session.interviewer_name:
            return f"Je bent {session.interviewer_name}, een professionele HR-interviewer"
        return "Je bent een professionele HR-interviewer"

    def opening_prompt(self, session: InterviewSession) -> str:
        """Prompt for the first interviewer turn."""
        return f"""{self._persona(session)} die een sollicitatiegesprek voert.

KANDIDAAT PROFIEL:
{self._profile_lines(session, full=True)}

INSTRUCTIES:
1. Begin het gesprek op een vriendelijke, professionele manier
2. Stel jezelf kort voor als interviewer
3. Stel de eerste vraag passend bij het gekozen gesprektype
4. Houd de vraag realistisch en relevant voor de functie
5. Gebruik een natuurlijke, menselijke toon

Begin nu het sollicitatiegesprek."""

    def next_question_prompt(
        self,
        session: InterviewSession,
        recent_messages: list[Message] | tuple[Message, ...],
        question_count: int,
    ) -> str:
        """Prompt for a follow-up interviewer turn."""
        wrap_up = ""
        if question_count >= self.wrap_up_threshold:
            wrap_up = (
                "BELANGRIJK: Dit is een van de laatste vragen. "
                "Begin het gesprek af te ronden en bedank de kandidaat."
            )

        return f"""{self._persona(session)} die een sollicitatiegesprek voortzet.

KANDIDAAT PROFIEL:
{self._profile_lines(session, full=False)}

RECENTE CONVERSATIE:
{format_transcript(recent_messages)}

INSTRUCTIES:
1. Reageer kort en professioneel op het laatste antwoord van de kandidaat
2. Stel een nieuwe, relevante vervolgvraag
3. Varieer tussen verschillende vraagtypen binnen het gekozen gesprektype
4. Houd vragen realistisch en passend bij de functie
5. Na 5-7 vragen, begin af te ronden

{wrap_up}

Stel nu je volgende vraag."""
