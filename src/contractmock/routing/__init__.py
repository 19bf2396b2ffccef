"""Route table construction and provider-state-aware matching."""
