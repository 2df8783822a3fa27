from flask import Blueprint

lecturer_bp = Blueprint('lecturer', __name__)

from . import lecturer  # noqa: E402,F401
