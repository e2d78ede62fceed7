# Middleware package init
"""
SheetRelay Backend — Middleware Package
========================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Rate Limit] → [Logging] → [CORS] → Route Handler

    1. Request ID FIRST: every response, 429s included, carries X-Request-ID
    2. Rate Limit (opt-in): Reject abusive clients before spending Sheets quota
    3. Logging: One line per request with status and duration
"""
