# Routes package init
"""
SheetRelay Backend — API Routes Package
=========================================

Route Inventory:
    - records.py:  GET /data, POST /add, /edit, /delete, /save-image-link
    - upload.py:   POST /upload
    - health.py:   GET /health

Routes are THIN: extract request data, call a service, return its result.
Errors propagate to the global exception handlers in main.py.
"""
