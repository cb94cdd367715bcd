from pydantic import BaseModel, EmailStr, field_validator
import phonenumbers
import re

class Token(BaseModel):
    access_token: str
    token_type: str


def validate_phone_number(value):
    """
    Validates phone number format using Google's phonenumbers library.
    Accepts international format: +919812345678
    """
    try:
        parsed = phonenumbers.parse(value, None)
        if not phonenumbers.is_valid_number(parsed):
            raise ValueError('Invalid phone number')

        return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)

    except phonenumbers.NumberParseException:
        raise ValueError('Phone number must include country code (e.g.: +91xxxxxxxxxx)')


class CreateOwnerRequest(BaseModel):
    email: EmailStr
    password: str
    restaurant_name: str
    phone_number: str | None = None

    @field_validator('password')
    @classmethod
    def validate_password(cls, value):
        """
        Password must be at least 8 characters and contain:
        - At least one letter
        - At least one digit
        """
        if len(value) < 8:
            raise ValueError('Password must be at least 8 characters')

        if not re.search(r'[A-Za-z]', value):
            raise ValueError('Password must contain at least one letter')


        if not re.search(r'\d', value):
            raise ValueError('Password must contain at least one digit')

        return value

    @field_validator('restaurant_name')
    @classmethod
    def validate_restaurant_name(cls, value):
        value = value.strip()
        if not value:
            raise ValueError('Restaurant name cannot be empty')
        return value

    @field_validator('phone_number')
    @classmethod
    def validate_phone(cls, value):
        if value is None:
            return value
        return validate_phone_number(value)
