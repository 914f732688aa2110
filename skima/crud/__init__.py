"""
CRUD operations (Create, Read, Update, Delete) for database models.

This layer provides a clean separation between API routes and database operations,
following the Repository pattern.
"""

from skima.crud import collaborator, evaluation, role_profile, skill

__all__ = ["collaborator", "evaluation", "role_profile", "skill"]
