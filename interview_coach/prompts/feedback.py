"""
Feedback Prompt Templates

Builds the summarization request over the complete transcript.
"""

from interview_coach.models.interview import InterviewSession, Message, format_transcript


class FeedbackPrompts:
    """Prompt templates for post-interview feedback."""

    FEEDBACK_STRUCTURE = """Geef feedback in deze structuur:

## 🎯 Algemene Indruk
[Korte samenvatting van de prestatie]

## ✅ Sterke Punten
[3-4 specifieke dingen die goed gingen]

## 🔧 Verbeterpunten
[3-4 concrete suggesties voor verbetering]

## 💡 Tips voor Volgende Keer
[Praktische adviezen voor toekomstige gesprekken]

## 📊 Score: X/10
[Cijfer met korte uitleg]

Houd de feedback constructief, specifiek en motiverend."""

    def feedback_prompt(
        self,
        session: InterviewSession,
        transcript: list[Message] | tuple[Message, ...],
    ) -> str:
        """Prompt asking for structured feedback on the full conversation."""
        conversation = format_transcript(transcript, separator="\n\n")

        return f"""Analyseer dit sollicitatiegesprek en geef constructieve feedback.

GESPREK DETAILS:
- Functie: {session.job_title}
- Gesprektype: {session.session_type.display_name}

VOLLEDIGE CONVERSATIE:
{conversation}

{self.FEEDBACK_STRUCTURE}"""
