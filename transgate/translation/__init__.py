"""Provider interface, prompts and response parsing."""
