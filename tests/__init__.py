"""
Test suite for habit-voice.

This package contains tests for all core functionality including:
- Spoken number decoding
- The activity-detection cascade and extraction pipeline
- Name normalization and the tracked-activity registry
- Recording events in the day store
- Transcript session accumulation
- Configuration management and the CLI
"""
