"""
Services layer for business logic.

Services:
- stream: stream listing out of the user's debrid cloud
"""
