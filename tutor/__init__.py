# tutor/__init__.py
__all__ = ["TutorClient", "TutorRequest", "TutorResponse", "preset_answer", "knowledge_hints", "knowledge_name"]

from .client import TutorClient, TutorRequest, TutorResponse
from .presets import preset_answer, knowledge_hints, knowledge_name
