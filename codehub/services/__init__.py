"""
Code Hub Services
=================

Business logic for the Code Hub application.

Services:
- request_builder: LLM request assembly and the single outbound call
- response_normalizer: raw LLM output -> ProblemAnalysis
- form_state: immutable authoring state and its transitions
- snippet_templates: Computational Layer snippet rendering
"""

# Services are imported directly when needed to avoid circular imports
# Example: from codehub.services.response_normalizer import normalize

__all__ = [
    'request_builder',
    'response_normalizer',
    'form_state',
    'snippet_templates'
]
