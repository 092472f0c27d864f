"""
Generation backend models for Interview Coach
"""

from enum import Enum

from interview_coach.config.settings import Settings


class AIModel(str, Enum):
    """Model selection exposed to clients."""

    PRO = "pro"  # Deep reasoning, slowest
    SMART = "smart"  # Default conversational model
    INTERNET = "internet"  # Experimental fast model

    def resolve(self, settings: Settings) -> str:
        """Map to the configured backend model identifier."""
        return {
            AIModel.PRO: settings.gemini_pro_model,
            AIModel.SMART: settings.gemini_smart_model,
            AIModel.INTERNET: settings.gemini_internet_model,
        }[self]


class ErrorCategory(str, Enum):
    """Known classes of upstream generation failures."""

    CREDENTIALS = "credentials"
    QUOTA = "quota"
    GENERIC = "generic"

    @property
    def user_message(self) -> str:
        """Message safe to show to the end user."""
        messages = {
            ErrorCategory.CREDENTIALS: "De API-sleutel is ongeldig of heeft geen toegang tot dit model.",
            ErrorCategory.QUOTA: "Het gebruikslimiet van de AI-dienst is bereikt. Probeer het later opnieuw.",
            ErrorCategory.GENERIC: "Er is een fout opgetreden bij het genereren van een antwoord.",
        }
        return messages[self]
