"""In-memory stand-ins for the Gmail API used across the test suite."""
