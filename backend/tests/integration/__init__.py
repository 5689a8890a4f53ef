"""
Integration Tests

End-to-end schedule generation through StudyScheduleService with an
in-memory task store. No external services are required; the LLM
provider is always mocked.
"""
