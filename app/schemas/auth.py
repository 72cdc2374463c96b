from pydantic import EmailStr

from app.schemas.common import CamelModel


class GoogleIn(CamelModel):
    # the ID token handed to the frontend by Google Identity Services
    credential: str


class UserOut(CamelModel):
    id: str
    email: EmailStr
    name: str
    timezone: str
