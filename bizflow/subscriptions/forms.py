from flask_wtf import FlaskForm
from wtforms import StringField
from wtforms.validators import DataRequired, Length, Optional, URL


class QuoteForm(FlaskForm):
    new_tier = StringField("New plan", validators=[DataRequired(), Length(max=20)])


class UpgradeForm(QuoteForm):
    # What the client believes the current plan is; the stored subscription wins.
    current_tier = StringField("Current plan", validators=[Optional(), Length(max=20)])
    callback_url = StringField("Callback URL", validators=[Optional(), URL(require_tld=False)])
