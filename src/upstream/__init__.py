"""Client for OpenAI-compatible chat completion API."""
