"""Polling loop, check orchestration and scheduling."""
