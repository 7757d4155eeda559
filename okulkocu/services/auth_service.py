from __future__ import annotations

import logging
from typing import Optional

from okulkocu.clients.school_client import SchoolClient
from okulkocu.core.errors import ApiError, AuthError, DataError, ValidationFailed
from okulkocu.core.session import Session, SessionState, role_from_code

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, client: SchoolClient, session: SessionState) -> None:
        self.client = client
        self.session = session

    async def login(self, *, username: str, password: str, school_code: Optional[str] = None) -> Session:
        username = (username or "").strip()
        if not username or not password:
            raise ValidationFailed("Lütfen tüm alanları doldurun")

        self.session.begin_authentication()
        try:
            result = await self.client.login(username, password)
        except ApiError as e:
            self.session.abort_authentication()
            if e.status == 400:
                raise ValidationFailed("Bilgiler boş veya yanlış gönderilmiştir") from e
            message = e.body.get("message") if isinstance(e.body, dict) else None
            raise AuthError(message or "Bilinmeyen hata") from e
        except DataError as e:
            self.session.abort_authentication()
            raise DataError("Geçersiz yanıt formatı") from e
        except Exception:
            self.session.abort_authentication()
            raise

        if result is None:
            self.session.abort_authentication()
            raise AuthError("Kullanıcı adı veya şifre yanlış")

        role = role_from_code(result.rol)
        logger.info("Login succeeded for %s as %s", username, role.value)
        return await self.session.set_session(
            access_token=result.token,
            refresh_token=result.refreshToken,
            role=role,
            school_code=school_code,
        )

    async def logout(self) -> None:
        await self.session.clear_session()
