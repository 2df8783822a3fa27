# forms/class_forms.py
"""
Flask-WTF forms for lecturer class scheduling.
"""

from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, DateField, TimeField
from wtforms.validators import DataRequired, Length, Optional


class ScheduleClassForm(FlaskForm):
    """Schedule a class. Venue coordinates are optional raw values."""

    course_title = StringField(
        'Course Title',
        validators=[DataRequired(message='Course title is required'), Length(max=200)]
    )

    course_code = StringField(
        'Course Code',
        validators=[DataRequired(message='Course code is required'), Length(max=50)]
    )

    lecture_venue = StringField('Lecture Venue', validators=[Optional(), Length(max=255)])

    date = DateField('Date', format='%Y-%m-%d',
                     validators=[DataRequired(message='Date is required')])

    time = TimeField('Time', format='%H:%M',
                     validators=[DataRequired(message='Time is required')])

    note = TextAreaField('Note', validators=[Optional(), Length(max=2000)])

    # Map-selected venue coordinate, validated by the scheduling service
    latitude = StringField('Latitude')
    longitude = StringField('Longitude')
