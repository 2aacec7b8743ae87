"""Job Alert Reels - turn job postings into Instagram reels.

Extracts job details from free-form messages, renders an animated
1080x1920 reel with Pillow and FFmpeg, uploads it and publishes it
through the Instagram Graph API.
"""

__version__ = "0.1.0"
