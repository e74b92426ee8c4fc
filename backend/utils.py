from flask import request
from base import Base


def get_json_body():
    """
    Returns the request's JSON object, or an empty dict when the body is
    missing, malformed or not an object.
    """
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def clear_database(engine):
    """
    Wipes all catalog data and recreates the schema.

    Used by the reset script to return a demo database to a clean state
    before it is seeded again.
    """
    import schema  # Ensure all models are registered with Base
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
