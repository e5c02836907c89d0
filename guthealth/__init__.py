"""Bowel-health tracking backend: record logging, health scoring and trends."""
