from pydantic import BaseModel, Field

class AdminIdentity(BaseModel):
    """The authenticated caller attached to a request by the authentication middleware.

    ``claims`` keeps the full decoded claim set for provider-specific extras.
    """
    uid: str
    email: str | None = None
    admin: bool = False
    role: str | None = None
    claims: dict = Field(default_factory=dict)

    @staticmethod
    def from_claims(claims: dict) -> 'AdminIdentity':
        return AdminIdentity(
            uid=claims.get('uid') or claims.get('sub'),
            email=claims.get('email'),
            admin=claims.get('admin') is True,
            role=claims.get('role'),
            claims=dict(claims),
        )
