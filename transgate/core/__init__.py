"""Gateway core: orchestration, validation, models and errors."""
