# storefront/api/deps.py
from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, status

from storefront.domain.errors import Forbidden
from storefront.domain.status import Role


@dataclass(frozen=True)
class Principal:
    """Uzytkownik juz zweryfikowany przez gateway (auth jest poza tym serwisem)."""

    user_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def scope_user_id(self) -> str | None:
        # admin widzi wszystko, zwykly user tylko swoje
        return None if self.is_admin else self.user_id


def get_principal(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Principal:
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not authenticated")

    try:
        role = Role((x_user_role or Role.USER.value).upper())
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown role")

    return Principal(user_id=x_user_id, role=role)


def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    if not principal.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to perform this action",
        )
    return principal


def ensure_owner_or_admin(principal: Principal, owner_id: str, action: str) -> None:
    if not principal.is_admin and owner_id != principal.user_id:
        raise Forbidden(action)
