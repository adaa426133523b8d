from app.models.profile import Profile, ProfileRole
from app.models.agenda import Agenda
from app.models.suggestion import Suggestion, SuggestionStatus
from app.models.vote import AgendaVote, SuggestionVote, VOTE_TABLES
from app.models.testimonial import Testimonial
from app.models.system_setting import SystemSettings

__all__ = [
    "Profile",
    "ProfileRole",
    "Agenda",
    "Suggestion",
    "SuggestionStatus",
    "AgendaVote",
    "SuggestionVote",
    "VOTE_TABLES",
    "Testimonial",
    "SystemSettings",
]
