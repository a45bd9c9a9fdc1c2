# Categories (specialities) gateway.
# Created: 2026-10-18
#
# Create and update are multipart: a ``speciality_name`` field plus an optional
# ``category_image`` file part.

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from clinicdesk.client import ApiClient
from clinicdesk.gateways._query import ListQuery


class CategoryStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


@dataclass(frozen=True)
class ImageUpload:
    """An image file forwarded as the ``category_image`` part."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


def _files(image: ImageUpload | None) -> dict[str, Any] | None:
    if image is None:
        return None
    return {"category_image": (image.filename, image.content, image.content_type)}


async def list_categories(client: ApiClient, query: ListQuery) -> Any:
    return await client.get("/category/admin/all", params=query.to_params(status=False))


async def get_category(client: ApiClient, category_id: str) -> Any:
    return await client.get(f"/category/{category_id}")


async def create_category(
    client: ApiClient, speciality_name: str, image: ImageUpload | None = None
) -> Any:
    return await client.post(
        "/category",
        data={"speciality_name": speciality_name},
        files=_files(image),
    )


async def update_category(
    client: ApiClient,
    category_id: str,
    speciality_name: str,
    status: CategoryStatus | str | None = None,
    image: ImageUpload | None = None,
) -> Any:
    data: dict[str, Any] = {"speciality_name": speciality_name}
    if status is not None:
        data["status"] = CategoryStatus(status).value
    return await client.patch(f"/category/{category_id}", data=data, files=_files(image))


async def delete_category(client: ApiClient, category_id: str) -> Any:
    return await client.delete(f"/category/{category_id}")
