from sqlmodel import Field, SQLModel

__all__ = [
    "TokenPayload",
]


# Contents of JWT token
class TokenPayload(SQLModel):
    sub: str | None = Field(
        default=None, description="Subject of the token, the account ID"
    )
