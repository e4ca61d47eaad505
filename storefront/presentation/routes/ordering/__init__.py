from flask import Blueprint

ordering_bp = Blueprint('ordering', __name__)

# Import all route modules
from . import api  # noqa: E402,F401
