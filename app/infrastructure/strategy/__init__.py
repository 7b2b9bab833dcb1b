"""Strategy infrastructure: prompt templates and the LLM adapters."""
