from flask_wtf import FlaskForm
from wtforms import IntegerField, StringField
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange, Optional, Regexp, ValidationError


class WithdrawalForm(FlaskForm):
    # kobo, like every other amount the API takes or returns
    amount = IntegerField("Amount", validators=[InputRequired(), NumberRange(min=1)])

    bank_code = StringField("Bank code", validators=[DataRequired(), Length(max=20)])
    bank_name = StringField("Bank name", validators=[Optional(), Length(max=120)])
    account_name = StringField("Account name", validators=[DataRequired(), Length(max=120)])
    account_number = StringField(
        "Account number",
        validators=[DataRequired(), Regexp(r"^\d{10}$", message="Account number must be 10 digits.")],
    )

    def validate_amount(self, field):
        # int() would quietly truncate a JSON float such as 299999.5
        if field.raw_data and str(field.raw_data[0]).strip() != str(field.data):
            raise ValidationError("Amount must be a whole number of kobo.")
