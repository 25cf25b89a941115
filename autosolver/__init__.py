"""AutoSolver: answers a question bank against source notes with an LLM."""
