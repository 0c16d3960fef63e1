"""
Money Tracker - Source Package

Backend for a personal expense tracker: entries live in a Google Sheet,
receipt photos in Drive (or Cloudinary), and a small HTTP API serves
both to the client.

DESIGN PRINCIPLES:
1. The entry row is written before anything else can fail
2. A lost receipt is acceptable, a lost entry is not
3. Every request answers with JSON, never with a crash
4. Storage and file hosting are swappable
"""

__version__ = "1.0.0"
__author__ = "Money Tracker Team"
