# Services package init
"""
Showcase Backend — Services Layer
===================================

What:  Business logic between the routes (HTTP) and storage (database, disk).

Service Inventory:
    - FileService:  image validation, storage under a root directory, cleanup
    - TokenService: issue, resolve and revoke personal access tokens
    - AuthService:  credential check at login, token revocation at logout
    - ItemService:  item CRUD that keeps each row and its image file in step
    - user_service: user lookup, creation and the bootstrap admin account

Services raise application exceptions (showcase.exceptions) and never build
HTTP responses, so they can be tested with a plain session.
"""
