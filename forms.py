from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField
from wtforms.validators import DataRequired, Email, Length, Optional


class ApiForm(FlaskForm):
    """Forms posted as JSON by the API; session cookies are SameSite=Lax."""

    class Meta:
        csrf = False

    def error_messages(self):
        return {name: errors[0] for name, errors in self.errors.items() if errors}


class RegistrationForm(ApiForm):
    email = StringField('Email', validators=[DataRequired(), Email(), Length(max=120)])
    name = StringField('Name', validators=[Optional(), Length(max=120)])
    password = PasswordField('Password', validators=[
        DataRequired(),
        Length(min=8, message='Password must be at least 8 characters')
    ])


class LoginForm(ApiForm):
    email = StringField('Email', validators=[
        DataRequired(message='Please enter your email')
    ])
    password = PasswordField('Password', validators=[
        DataRequired(message='Please enter your password')
    ])
