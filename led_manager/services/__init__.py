"""
Services

- vnnox/ - VNNOX device API client
- storage/ - Supabase display and schedule stores
- monitoring/ - Status polling and scheduled content reconciliation
"""
