# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Prefer `.env` for settings. This file should contain only safe overrides.
"""

# Example: run without the console prompt
# CONSOLE_ENABLED = False

# Example: offer a longer short list
# SHORTLIST_SIZE = 7
