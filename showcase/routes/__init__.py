# Routes package init
"""
Showcase Backend — API Routes Package
=======================================

Route Inventory:
    - auth.py:    POST /login, POST /logout
    - items.py:   GET  /items?type=slider|not_slider|all
                  POST /items                      (admin)
                  GET  /items/{id}
                  PUT|POST /items/{id}             (admin)
                  DELETE /items/{id}               (admin)
    - files.py:   GET  /files/{ref}                (stored images)
    - health.py:  GET  /health

Routes stay thin: they unpack the request, call a service and let the
global exception handlers shape every error response.
"""
