"""Sample shop application used by the end-to-end tests."""
