"""Domain services: storage, scoring, generation and sessions."""
