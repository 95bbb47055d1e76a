"""
Core functionality for habit-voice.

This package contains the main logic for:
- Decoding spoken numbers
- Detecting activity mentions with a tiered rule cascade
- Normalizing activity names against the tracked-activity registry
- Admitting and recording detected activities
- Accumulating transcript sessions from the speech engine
- Configuration management
"""
