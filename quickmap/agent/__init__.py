"""Language model integration: completion requests, prompts and response parsing."""
