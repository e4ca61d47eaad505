from flask import Blueprint

inventory_bp = Blueprint('inventory', __name__)

# Import all route modules
from . import api  # noqa: E402,F401
