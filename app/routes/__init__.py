# Routes package init
"""
TechNotes Backend — API Routes Package
========================================

Route Inventory:
    - users.py:   GET/POST /users, PATCH/DELETE /users/{id}, PATCH/DELETE /users
    - root.py:    GET / (landing page) and the negotiated 404 page
    - health.py:  GET /health

Routes stay thin: they parse the request, call a service and pick the
status code. Business rules belong in services.
"""
