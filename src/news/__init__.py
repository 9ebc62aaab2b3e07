"""
News Module
===========

Personalized news for authenticated users:
- GNews search client with typed upstream errors
- TTL-cached search and preference-based feeds
- Per-user read and favorite tracking
- Background cache warming and cleanup jobs
"""
