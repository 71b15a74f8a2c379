"""
Gemini relay package.

Provides:
- A FastAPI relay that forwards prompts to the Gemini generateContent API
- Origin allow-list guard and CORS wiring for browser callers
"""

__version__ = "1.0.0"
