# models/__init__.py
from .base import BaseModel
from .lecturer import Lecturer
from .class_session import ClassSession
from .attendance import Attendance

__all__ = [
    'BaseModel',
    'Lecturer',
    'ClassSession',
    'Attendance'
]
