from dataclasses import dataclass
from typing import Optional

from carshare_web.utils.constants import Role


@dataclass
class User:
    """
    The signed-in user as reported by the backend's auth endpoints.
    Only ``is_verified`` may change after creation; the role is fixed.
    """
    user_id: str
    email: str
    name: str
    role: str  # "HOST" | "RENTER" | "ADMIN"
    phone_number: Optional[str] = None
    is_verified: bool = False

    @property
    def is_host(self) -> bool:
        return self.role == Role.HOST

    @property
    def is_renter(self) -> bool:
        return self.role == Role.RENTER

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> Optional["User"]:
        """Map an ``AuthUser`` JSON object to a User; None for empty input."""
        if not d:
            return None
        return cls(
            user_id=str(d.get("userId") or ""),
            email=d.get("email") or "",
            name=d.get("name") or "",
            role=(d.get("role") or "").upper(),
            phone_number=d.get("phoneNumber"),
            is_verified=bool(d.get("isVerified")),
        )

    def to_dict(self) -> dict:
        """Inverse of ``from_dict``; this is what the session cookie stores."""
        return {
            "userId": self.user_id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "phoneNumber": self.phone_number,
            "isVerified": self.is_verified,
        }
