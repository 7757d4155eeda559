from __future__ import annotations

import logging
from typing import Any, Optional

from okulkocu.clients.school_client import SchoolClient
from okulkocu.core.errors import ValidationFailed
from okulkocu.schemas.school import HomeworkForm

logger = logging.getLogger(__name__)


class HomeworkService:
    def __init__(self, client: SchoolClient) -> None:
        self.client = client

    async def assign(
        self,
        form: HomeworkForm,
        *,
        photo: Optional[bytes] = None,
        photo_name: str = "homework_photo.jpg",
        photo_type: str = "image/jpeg",
    ) -> Any:
        missing = form.missing_fields()
        if missing:
            raise ValidationFailed(f"{missing[0]} gereklidir.")

        if form.teacher_id is None:
            info = await self.client.fetch_user_info()
            if info.OgretmenID is not None:
                form = form.model_copy(update={"teacher_id": info.OgretmenID})

        result = await self.client.assign_homework(
            form, photo=photo, photo_name=photo_name, photo_type=photo_type
        )
        logger.info("Homework assigned (%s, scope=%s)", form.subject, form.scope.name)
        return result
