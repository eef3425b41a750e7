from flask_wtf import FlaskForm
from wtforms import StringField
from wtforms.validators import Email, Length, Optional


class SetupForm(FlaskForm):
    email = StringField("Email", validators=[Optional(), Email(), Length(max=255)])
    business_name = StringField("Business name", validators=[Optional(), Length(max=120)])
    referral_code = StringField("Referral code", validators=[Optional(), Length(max=16)])
