"""Core — run context, configuration, services and result models."""
