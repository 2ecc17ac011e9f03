"""
Services module for business logic separation.

This module contains the in-memory URL registry and the background
expiry sweeper, keeping them separate from API endpoints.
"""
