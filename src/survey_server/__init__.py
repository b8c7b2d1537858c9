"""survey_server — FastAPI REST API for the survey SDK.

Exposes the SurveyOrchestrator as a stateless HTTP API: the conversational
endpoints (``/s/{external_id}/init`` and ``/respond``) plus session read and
delete endpoints under ``/api/v1``.
"""
