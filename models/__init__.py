"""
Storage singleton shared by the API.
The engine is created when the app factory calls storage.reload().
"""
from models.db_storage import DBStorage

storage = DBStorage()
