"""Host integrations for the vi engine."""
