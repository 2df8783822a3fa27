# services/auth_service.py
"""
Authentication service for lecturer accounts.
Handles registration, login and logout.
"""

import logging

from flask import session
from flask_login import login_user, logout_user, current_user
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from trackas.models import Lecturer
from trackas.extensions import db


class AuthService:
    """Service class for lecturer authentication."""

    @staticmethod
    def register_lecturer(email, full_name, password):
        """
        Create a lecturer account.

        Returns:
            tuple: (success: bool, lecturer: Lecturer|None, message: str)
        """
        logger = logging.getLogger('auth_service')

        email = email.strip().lower()

        if db.session.query(Lecturer).filter_by(email=email).first():
            return False, None, "An account with this email already exists"

        lecturer = Lecturer(email=email, full_name=full_name.strip())
        lecturer.set_password(password)

        try:
            db.session.add(lecturer)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            return False, None, "An account with this email already exists"
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Lecturer registration failed: {str(e)}", exc_info=True)
            return False, None, "An error occurred during registration. Please try again."

        logger.info(f"Lecturer registered: {email}")
        return True, lecturer, "Registration successful"

    @staticmethod
    def authenticate_lecturer(email, password, remember_me=False):
        """
        Authenticate a lecturer and start a login session.

        Returns:
            tuple: (success: bool, lecturer: Lecturer|None, message: str)
        """
        logger = logging.getLogger('auth_service')

        try:
            lecturer = (
                db.session.query(Lecturer)
                .filter_by(email=email.strip().lower(), is_active=True)
                .first()
            )

            if not lecturer or not lecturer.check_password(password):
                logger.warning(f"Failed login attempt for: {email}")
                return False, None, "Invalid email or password"

            lecturer.record_login()
            db.session.commit()

            login_user(lecturer, remember=remember_me)

            logger.info(f"Successful login for lecturer: {lecturer.email}")
            return True, lecturer, "Login successful"

        except SQLAlchemyError as e:
            logger.error(f"Authentication error: {str(e)}", exc_info=True)
            db.session.rollback()
            return False, None, "An error occurred during login. Please try again."

    @staticmethod
    def logout_lecturer_session():
        """Logout current lecturer and clear session."""
        logger = logging.getLogger('auth_service')

        if current_user.is_authenticated:
            email = current_user.email
            logout_user()
            session.clear()
            logger.info(f"Lecturer logged out: {email}")

        return True
