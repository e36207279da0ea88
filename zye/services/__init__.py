"""
Services module for business logic separation.

This module contains the link store, the redirect decision engine and its
collaborators (expiration, crawler detection, templates, previews), keeping
them separate from the HTTP endpoints.
"""
