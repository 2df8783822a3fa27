# forms/auth_forms.py
"""
Flask-WTF forms for lecturer authentication.
Accept both form posts and JSON bodies.
"""

from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, BooleanField
from wtforms.validators import DataRequired, Email, Length, EqualTo, ValidationError


class LoginForm(FlaskForm):
    """Lecturer login form."""

    email = StringField(
        'Email',
        validators=[
            DataRequired(message='Email is required'),
            Length(max=120, message='Email is too long')
        ]
    )

    password = PasswordField(
        'Password',
        validators=[
            DataRequired(message='Password is required'),
            Length(min=1, max=255, message='Password is too long')
        ]
    )

    remember_me = BooleanField('Remember me', default=False)


class LecturerRegistrationForm(FlaskForm):
    """Lecturer sign-up form."""

    email = StringField(
        'Email',
        validators=[
            DataRequired(message='Email is required'),
            Email(message='Enter a valid email address', check_deliverability=False),
            Length(max=120, message='Email is too long')
        ]
    )

    full_name = StringField(
        'Full Name',
        validators=[
            DataRequired(message='Full name is required'),
            Length(min=2, max=120, message='Must be between 2 and 120 characters')
        ]
    )

    password = PasswordField(
        'Password',
        validators=[
            DataRequired(message='Password is required'),
            Length(min=8, max=255, message='Password must be at least 8 characters')
        ]
    )

    confirm_password = PasswordField(
        'Confirm Password',
        validators=[
            DataRequired(message='Please confirm your password'),
            EqualTo('password', message='Passwords must match')
        ]
    )

    def validate_full_name(self, field):
        if not field.data or not field.data.strip():
            raise ValidationError('Full name cannot be empty')
