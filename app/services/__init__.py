# Services package init
"""
TechNotes Backend — Services Layer
====================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
How:   Services receive the request's session, apply business rules and return
       response models or raise application exceptions.

Service Inventory:
    - UserService: list / create / update / delete user records
    - password_service: bcrypt hashing and verification
"""
