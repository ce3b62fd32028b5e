"""Community chat assistant: archive, recall and follow-up conversations."""
