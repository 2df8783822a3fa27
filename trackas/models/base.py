# models/base.py
from datetime import datetime, date
import uuid
from trackas.extensions import db


class BaseModel(db.Model):
    """Base model class with common functionality."""

    __abstract__ = True

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    created_at = db.Column(db.DateTime, default=datetime.now, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    # Columns never exposed through to_dict()
    __private_fields__ = ()

    def to_dict(self):
        """Convert model instance to dictionary."""
        result = {}

        for column in self.__table__.columns:
            if column.name in self.__private_fields__:
                continue
            value = getattr(self, column.name)
            if isinstance(value, (datetime, date)):
                result[column.name] = value.isoformat()
            else:
                result[column.name] = value

        return result

    def save(self):
        """Save the model instance."""
        db.session.add(self)
        db.session.commit()
        return self

