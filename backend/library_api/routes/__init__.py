"""
Library Store Backend - API Routes Package
===========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - auth.py:          POST /api/auth/register, POST /api/auth/login, GET /api/auth/me
    - books.py:         /api/books CRUD, GET /api/books/genre/{genre_id}
    - genres.py:        /api/genre CRUD
    - transactions.py:  POST/GET /api/transactions, statistics, detail
    - health.py:        GET /health-check

Routes stay THIN: read the request, call a service, wrap the result in the
response envelope. Business rules live in services.
"""
