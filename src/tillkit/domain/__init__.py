"""Domain layer for tillkit application.

Services are imported from their own modules (for example
``tillkit.domain.checkout``) so the database layer can import the entity
module without pulling in every service.
"""
