"""
Chat Image Relay Package

A chat relay bot that answers questions with a language model and replies
with stock photos when a message asks for a picture:
- Sentinel-based intent classification over an OpenAI-compatible API
- Keyword refinement and Unsplash image search
- Self-healing transport connection with terminal logout handling
"""

__title__ = "Chat Image Relay"
__description__ = "Chat relay bot answering with language-model text or Unsplash photos"
__license__ = "MIT"
__version__ = "1.0.0"

__all__ = []
