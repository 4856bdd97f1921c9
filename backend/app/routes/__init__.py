"""
WellNest Backend — API Routes Package
======================================

Route Inventory:
    - auth.py:                  POST /api/auth/login, GET /api/auth/me
    - employees.py:             /api/employees (list, stats, bulk, CRUD, reset-password)
    - events.py:                /api/events (employee CRUD)
    - practitioners.py:         /api/practitioners (employee CRUD)
    - public_events.py:         /api/public/events (no auth, cacheable)
    - public_practitioners.py:  /api/public/practitioners (no auth, cacheable)
    - uploads.py:               /api/upload (admin only)
    - health.py:                GET /api/health

Design Principle:
    Routes are THIN. They declare a guard, parse the request, call a service
    and wrap the result in a response envelope. Business rules live in services.
"""
