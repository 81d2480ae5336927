"""Benefits questionnaire and personalized insight engine."""

__version__ = "0.1.0"
